from .jobs import (
    JobStatus,
    RequestStatus,
    JobRecord,
    JobSummary,
    SubmitResponse,
    JobStatusResponse,
    JobResultResponse,
    JobListResponse,
    TERMINAL_STATUSES
)
from .configuration import (
    DelimiterMode,
    ConfigurationSnapshot,
    InputSourceRequest,
    OutputDestinationRequest,
    DelimiterRequest,
    JobSubmitRequest,
    ConfigurationResponse
)

__all__ = [
    "JobStatus",
    "RequestStatus",
    "JobRecord",
    "JobSummary",
    "SubmitResponse",
    "JobStatusResponse",
    "JobResultResponse",
    "JobListResponse",
    "TERMINAL_STATUSES",
    "DelimiterMode",
    "ConfigurationSnapshot",
    "InputSourceRequest",
    "OutputDestinationRequest",
    "DelimiterRequest",
    "JobSubmitRequest",
    "ConfigurationResponse"
]
