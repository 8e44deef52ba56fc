"""
Configuration API endpoints
"""
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
import logging

from compute_jobs.models.configuration import (
    ConfigurationResponse,
    ConfigurationSnapshot,
    DelimiterRequest,
    InputSourceRequest,
    OutputDestinationRequest,
)
from compute_jobs.models.jobs import RequestStatus
from compute_jobs.services.job_orchestrator import job_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


def _rejected(response: ConfigurationResponse, field: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "code": "CONFIGURATION_REJECTED",
            "message": response.message,
            "field": field
        }
    )


@router.get("/config", response_model=ConfigurationSnapshot)
async def get_configuration():
    """
    Current configuration used by submits without an explicit body
    """
    return job_orchestrator.current_configuration()


@router.post("/config/input", response_model=ConfigurationResponse)
async def set_input_source(request: InputSourceRequest):
    """
    Set the input source
    """
    response = job_orchestrator.set_input_source(request.source)
    if response.request_status != RequestStatus.ACCEPTED:
        return _rejected(response, "source")
    return response


@router.post("/config/output", response_model=ConfigurationResponse)
async def set_output_destination(request: OutputDestinationRequest):
    """
    Set the output destination
    """
    response = job_orchestrator.set_output_destination(request.destination)
    if response.request_status != RequestStatus.ACCEPTED:
        return _rejected(response, "destination")
    return response


@router.post("/config/delimiter", response_model=ConfigurationResponse)
async def configure_delimiter(request: DelimiterRequest):
    """
    Configure the delimiter placed between result pairs
    """
    response = job_orchestrator.configure_delimiter(request.value, request.mode)
    if response.request_status != RequestStatus.ACCEPTED:
        return _rejected(response, "value")
    return response
