"""
Job status models
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from enum import Enum
from datetime import datetime


class JobStatus(str, Enum):
    """Job status enumeration"""
    SUBMITTED = "submitted"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    NOT_FOUND = "not_found"  # lookup miss, never stored


TERMINAL_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED})


class RequestStatus(str, Enum):
    """Outcome of a single API operation"""
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class JobRecord(BaseModel):
    """
    Tracked state of one submitted job.

    Records are immutable: every transition builds a new record that replaces
    the previous one in the registry as a whole.
    """
    model_config = ConfigDict(frozen=True)

    job_id: str
    status: JobStatus
    progress: int = Field(0, ge=0, le=100)
    message: str = ""
    input_source: str
    output_destination: str
    delimiter: str
    result_data: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def transition(
        self,
        status: JobStatus,
        message: str,
        progress: Optional[int] = None,
        result_data: Optional[str] = None,
    ) -> "JobRecord":
        """Return a copy moved to `status`; progress never goes backwards"""
        if progress is None:
            progress = self.progress
        return self.model_copy(update={
            "status": status,
            "message": message,
            "progress": max(self.progress, min(progress, 100)),
            "result_data": result_data if status == JobStatus.COMPLETED else None,
            "updated_at": datetime.now(),
        })


class JobSummary(BaseModel):
    """One row of the job listing"""
    job_id: str
    status: JobStatus
    progress: int
    output_destination: str
    message: str

    @classmethod
    def from_record(cls, record: JobRecord) -> "JobSummary":
        return cls(
            job_id=record.job_id,
            status=record.status,
            progress=record.progress,
            output_destination=record.output_destination,
            message=record.message,
        )


class SubmitResponse(BaseModel):
    """Response to an asynchronous submit"""
    request_status: RequestStatus
    job_id: Optional[str] = Field(None, description="Job ID for polling, absent when rejected")
    message: str


class JobStatusResponse(BaseModel):
    """Status, progress and message of one job"""
    request_status: RequestStatus
    job_id: Optional[str] = None
    job_status: JobStatus
    progress: int = 0
    message: str

    @classmethod
    def from_record(cls, record: JobRecord, message: Optional[str] = None) -> "JobStatusResponse":
        return cls(
            request_status=RequestStatus.ACCEPTED,
            job_id=record.job_id,
            job_status=record.status,
            progress=record.progress,
            message=record.message if message is None else message,
        )


class JobResultResponse(BaseModel):
    """Result payload of a completed job"""
    request_status: RequestStatus
    job_id: Optional[str] = None
    job_status: JobStatus
    result_data: Optional[str] = None
    message: str


class JobListResponse(BaseModel):
    """Point-in-time listing of every tracked job"""
    request_status: RequestStatus
    jobs: List[JobSummary] = Field(default_factory=list)
    message: str
