"""
Exception hierarchy for the compute job service
"""
from typing import Optional


class ComputeJobsError(Exception):
    """Base class for expected (domain) errors"""

    pass


# =============================================================================
# Configuration / lookup
# =============================================================================


class ConfigurationError(ComputeJobsError):
    """Missing or invalid input source, output destination or delimiter"""

    pass


class NotFoundError(ComputeJobsError):
    """Unknown job identifier"""

    def __init__(self, message: str, job_id: Optional[str] = None):
        super().__init__(message)
        self.job_id = job_id


# =============================================================================
# Storage
# =============================================================================


class StorageError(ComputeJobsError):
    """Base class for storage failures"""

    pass


class ReadError(StorageError):
    """Input could not be read"""

    pass


class WriteError(StorageError):
    """Output could not be written"""

    pass


# =============================================================================
# Computation
# =============================================================================


class ComputeError(ComputeJobsError):
    """A single element could not be computed (out of range, overflow...)"""

    pass


class InternalError(ComputeJobsError):
    """Unexpected failure, reported with a generic message"""

    pass


class JobCancelledError(ComputeJobsError):
    """Raised inside a pipeline once its cancellation token is set"""

    pass
