"""
Job submission, status and result API endpoints
"""
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from typing import Optional
import logging

from compute_jobs.core.config import settings
from compute_jobs.models.configuration import (
    ConfigurationSnapshot,
    DelimiterMode,
    JobSubmitRequest,
)
from compute_jobs.models.jobs import (
    JobListResponse,
    JobResultResponse,
    JobStatus,
    JobStatusResponse,
    RequestStatus,
    SubmitResponse,
)
from compute_jobs.services.job_orchestrator import job_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


def _job_not_found(job_id: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "code": "JOB_NOT_FOUND",
            "message": message or f"Job {job_id} not found",
            "field": "job_id"
        }
    )


def _internal_error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "code": "INTERNAL_ERROR",
            "message": message,
            "field": None
        }
    )


def _snapshot_from(request: Optional[JobSubmitRequest]) -> Optional[ConfigurationSnapshot]:
    if request is None:
        return None
    if request.delimiter is None:
        return ConfigurationSnapshot(
            input_source=request.input_source,
            output_destination=request.output_destination,
            delimiter=settings.DEFAULT_DELIMITER,
            delimiter_mode=DelimiterMode.DEFAULT
        )
    return ConfigurationSnapshot(
        input_source=request.input_source,
        output_destination=request.output_destination,
        delimiter=request.delimiter,
        delimiter_mode=DelimiterMode.CUSTOM
    )


@router.post("/jobs", response_model=SubmitResponse)
async def submit_job(request: Optional[JobSubmitRequest] = None):
    """
    Submit a job; without a body the current configuration is used
    """
    response = job_orchestrator.submit(_snapshot_from(request))

    if response.request_status != RequestStatus.ACCEPTED:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "code": "SUBMIT_REJECTED",
                "message": response.message,
                "field": None
            }
        )

    return response


@router.post("/jobs/run", response_model=JobStatusResponse)
def run_job(request: Optional[JobSubmitRequest] = None, timeout: Optional[float] = None):
    """
    Submit a job and wait for it to finish
    """
    response = job_orchestrator.start_computation_sync(_snapshot_from(request), timeout=timeout)

    if response.job_id is None:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "code": "SUBMIT_REJECTED",
                "message": response.message,
                "field": None
            }
        )

    return response


@router.get("/jobs", response_model=JobListResponse)
async def list_jobs():
    """
    List every tracked job
    """
    return job_orchestrator.list_jobs()


@router.get("/jobs/{job_id}/status", response_model=JobStatusResponse)
async def get_job_status(job_id: str):
    """
    Get job status by job_id
    """
    response = job_orchestrator.status(job_id)

    if response.job_status == JobStatus.NOT_FOUND:
        return _job_not_found(job_id, response.message)

    if response.request_status != RequestStatus.ACCEPTED:
        return _internal_error(response.message)

    return response


@router.get("/jobs/{job_id}/result", response_model=JobResultResponse)
async def get_job_result(job_id: str):
    """
    Get the result of a completed job
    """
    response = job_orchestrator.result(job_id)

    if response.job_status == JobStatus.NOT_FOUND:
        return _job_not_found(job_id, response.message)

    if response.request_status != RequestStatus.ACCEPTED:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "code": "JOB_NOT_COMPLETED",
                "message": response.message,
                "field": "job_id"
            }
        )

    return response


@router.delete("/jobs/{job_id}", response_model=JobStatusResponse)
async def cancel_job(job_id: str):
    """
    Cancel a job
    """
    response = job_orchestrator.cancel(job_id)

    if response.job_status == JobStatus.NOT_FOUND:
        return _job_not_found(job_id, response.message)

    if response.request_status != RequestStatus.ACCEPTED:
        return _internal_error(response.message)

    return response
