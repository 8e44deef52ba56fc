"""
Job configuration models
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from enum import Enum

from compute_jobs.core.config import settings
from compute_jobs.core.exceptions import ConfigurationError
from compute_jobs.models.jobs import RequestStatus


class DelimiterMode(str, Enum):
    """Delimiter mode"""
    DEFAULT = "default"  # system default, any supplied value is ignored
    CUSTOM = "custom"  # use the supplied value


class ConfigurationSnapshot(BaseModel):
    """
    Input source, output destination and delimiter a job runs with.

    A snapshot is copied into every job at submission, so configuration
    changes made afterwards never reach an already submitted job.
    """
    model_config = ConfigDict(frozen=True)

    input_source: Optional[str] = None
    output_destination: Optional[str] = None
    delimiter: str = Field(default_factory=lambda: settings.DEFAULT_DELIMITER)
    delimiter_mode: DelimiterMode = DelimiterMode.DEFAULT

    @property
    def is_complete(self) -> bool:
        return bool(self.input_source) and bool(self.output_destination)

    def ensure_complete(self) -> None:
        """Raise ConfigurationError unless both endpoints and a delimiter are set"""
        if not self.is_complete:
            raise ConfigurationError(
                "Configuration incomplete: input source or output destination not set"
            )
        if not self.delimiter:
            raise ConfigurationError("Delimiter cannot be empty")


class InputSourceRequest(BaseModel):
    """Set the input source"""
    source: str = Field(..., description="Where the input integers are read from")


class OutputDestinationRequest(BaseModel):
    """Set the output destination"""
    destination: str = Field(..., description="Where the formatted results are written")


class DelimiterRequest(BaseModel):
    """Configure the delimiter placed between result pairs"""
    value: Optional[str] = Field(None, description="Custom delimiter (ignored in default mode)")
    mode: DelimiterMode = Field(DelimiterMode.DEFAULT, description="default or custom")


class JobSubmitRequest(BaseModel):
    """Explicit configuration for a single submit"""
    input_source: str
    output_destination: str
    delimiter: Optional[str] = None


class ConfigurationResponse(BaseModel):
    """Response to a configuration call"""
    request_status: RequestStatus
    message: str
    value: Optional[str] = Field(None, description="Applied value when accepted")
