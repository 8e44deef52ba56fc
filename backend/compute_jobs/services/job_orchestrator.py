"""
In-memory job orchestration service
Configures, submits, tracks and cancels background compute jobs
"""
import logging
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from compute_jobs.core.config import settings
from compute_jobs.core.exceptions import ConfigurationError, NotFoundError
from compute_jobs.models.configuration import (
    ConfigurationResponse,
    ConfigurationSnapshot,
    DelimiterMode,
)
from compute_jobs.models.jobs import (
    JobListResponse,
    JobRecord,
    JobResultResponse,
    JobStatus,
    JobStatusResponse,
    JobSummary,
    RequestStatus,
    SubmitResponse,
    TERMINAL_STATUSES,
)
from compute_jobs.services.cached_compute_engine import CachedFactorialEngine
from compute_jobs.services.compute_engine import ComputeBackend, FactorialEngine
from compute_jobs.services.job_registry import JobRegistry
from compute_jobs.services.pipeline import PipelineExecutor
from compute_jobs.services.storage import FileStorage, StorageBackend
from compute_jobs.services.worker_pool import WorkerPool

logger = logging.getLogger(__name__)


def create_compute_engine() -> ComputeBackend:
    """Compute backend selected by settings"""
    if settings.USE_CACHED_ENGINE:
        return CachedFactorialEngine()
    return FactorialEngine()


@dataclass
class _JobHandle:
    """Cancellation handle of one background pipeline"""
    cancel_event: threading.Event = field(default_factory=threading.Event)
    future: Optional[Future] = None


class JobOrchestrator:
    """In-memory job orchestrator"""

    def __init__(
        self,
        storage: Optional[StorageBackend] = None,
        compute: Optional[ComputeBackend] = None,
        max_job_workers: Optional[int] = None,
        max_compute_workers: Optional[int] = None,
        poll_interval: Optional[float] = None,
    ):
        self._registry = JobRegistry()
        self._handles: Dict[str, _JobHandle] = {}
        self._config = ConfigurationSnapshot()
        self._config_lock = threading.Lock()
        self._poll_interval = (
            settings.SYNC_POLL_INTERVAL_SECONDS if poll_interval is None else poll_interval
        )

        self._storage = storage or FileStorage()
        self._compute = compute or create_compute_engine()
        self._worker_pool = WorkerPool(max_workers=max_compute_workers)
        self._executor = ThreadPoolExecutor(
            max_workers=max_job_workers or settings.MAX_JOB_WORKERS,
            thread_name_prefix="job_orchestrator"
        )
        self._pipeline = PipelineExecutor(
            self._registry, self._storage, self._compute, self._worker_pool
        )

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    @property
    def worker_pool(self) -> WorkerPool:
        return self._worker_pool

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def current_configuration(self) -> ConfigurationSnapshot:
        return self._config

    def set_input_source(self, source: Optional[str]) -> ConfigurationResponse:
        """
        Set the input source used by submits without an explicit configuration
        """
        try:
            value = self._validate_location(source, "Input source")
            with self._config_lock:
                self._config = self._config.model_copy(update={"input_source": value})
            logger.info(f"Input source configured: {value}")
            return ConfigurationResponse(
                request_status=RequestStatus.ACCEPTED,
                message=f"Input source successfully configured: {value}",
                value=value
            )
        except ConfigurationError as e:
            logger.warning(f"Input source rejected: {e}")
            return ConfigurationResponse(request_status=RequestStatus.REJECTED, message=str(e))
        except Exception as e:
            logger.error(f"Unexpected error in set_input_source: {e}", exc_info=True)
            return ConfigurationResponse(
                request_status=RequestStatus.REJECTED,
                message="Internal error configuring input source"
            )

    def set_output_destination(self, destination: Optional[str]) -> ConfigurationResponse:
        """
        Set the output destination used by submits without an explicit configuration
        """
        try:
            value = self._validate_location(destination, "Output destination")
            with self._config_lock:
                self._config = self._config.model_copy(update={"output_destination": value})
            logger.info(f"Output destination configured: {value}")
            return ConfigurationResponse(
                request_status=RequestStatus.ACCEPTED,
                message=f"Output destination successfully configured: {value}",
                value=value
            )
        except ConfigurationError as e:
            logger.warning(f"Output destination rejected: {e}")
            return ConfigurationResponse(request_status=RequestStatus.REJECTED, message=str(e))
        except Exception as e:
            logger.error(f"Unexpected error in set_output_destination: {e}", exc_info=True)
            return ConfigurationResponse(
                request_status=RequestStatus.REJECTED,
                message="Internal error configuring output destination"
            )

    def configure_delimiter(
        self, value: Optional[str] = None, mode: DelimiterMode = DelimiterMode.DEFAULT
    ) -> ConfigurationResponse:
        """
        Default mode applies the system delimiter and ignores `value`;
        custom mode applies the trimmed `value`
        """
        try:
            delimiter, mode = self._resolve_delimiter(value, mode)
            with self._config_lock:
                self._config = self._config.model_copy(
                    update={"delimiter": delimiter, "delimiter_mode": mode}
                )
            label = "Default" if mode == DelimiterMode.DEFAULT else "Custom"
            logger.info(f"{label} delimiter applied: {delimiter!r}")
            return ConfigurationResponse(
                request_status=RequestStatus.ACCEPTED,
                message=f"{label} delimiter applied: {delimiter}",
                value=delimiter
            )
        except ConfigurationError as e:
            logger.warning(f"Delimiter rejected: {e}")
            return ConfigurationResponse(request_status=RequestStatus.REJECTED, message=str(e))
        except Exception as e:
            logger.error(f"Unexpected error in configure_delimiter: {e}", exc_info=True)
            return ConfigurationResponse(
                request_status=RequestStatus.REJECTED,
                message="Internal error configuring delimiter"
            )

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def submit(self, config: Optional[ConfigurationSnapshot] = None) -> SubmitResponse:
        """
        Start a new job in the background
        Uses the current configuration when `config` is not given
        """
        try:
            try:
                config = self._check_snapshot(config or self.current_configuration())
            except ConfigurationError as e:
                logger.warning(f"Submit rejected: {e}")
                return SubmitResponse(request_status=RequestStatus.REJECTED, message=str(e))

            job_id = str(uuid.uuid4())
            record = JobRecord(
                job_id=job_id,
                status=JobStatus.SUBMITTED,
                progress=0,
                message="Job submitted, waiting to start",
                input_source=config.input_source,
                output_destination=config.output_destination,
                delimiter=config.delimiter,
            )

            handle = _JobHandle()
            self._handles[job_id] = handle
            self._registry.put(record)

            try:
                future = self._executor.submit(
                    self._pipeline.run, job_id, config, handle.cancel_event
                )
            except RuntimeError as e:
                logger.error(f"Could not schedule job {job_id}: {e}")
                self._handles.pop(job_id, None)
                self._registry.update(
                    job_id,
                    lambda current: current.transition(
                        JobStatus.FAILED, "Job pool is shut down", 100
                    ),
                )
                return SubmitResponse(
                    request_status=RequestStatus.REJECTED,
                    job_id=job_id,
                    message="Job pool is shut down"
                )

            handle.future = future
            future.add_done_callback(lambda _: self._handles.pop(job_id, None))

            logger.info(
                f"Job {job_id} submitted: {config.input_source} -> {config.output_destination}"
            )
            return SubmitResponse(
                request_status=RequestStatus.ACCEPTED,
                job_id=job_id,
                message="Computation job submitted successfully. Use job ID to check status."
            )

        except Exception as e:
            logger.error(f"Error submitting job: {e}", exc_info=True)
            return SubmitResponse(
                request_status=RequestStatus.REJECTED,
                message="Internal error submitting job"
            )

    def status(self, job_id: Optional[str]) -> JobStatusResponse:
        """
        Get job status by job_id
        """
        try:
            return JobStatusResponse.from_record(self._require_record(job_id))
        except NotFoundError as e:
            return self._rejected_lookup(e.job_id, str(e))
        except Exception as e:
            logger.error(f"Unexpected error checking job status: {e}", exc_info=True)
            return self._rejected_lookup(
                None, "Internal error checking job status", JobStatus.FAILED
            )

    def result(self, job_id: Optional[str]) -> JobResultResponse:
        """
        Get the result of a completed job
        """
        try:
            record = self._require_record(job_id)

            if record.status != JobStatus.COMPLETED:
                return JobResultResponse(
                    request_status=RequestStatus.REJECTED,
                    job_id=record.job_id,
                    job_status=record.status,
                    message=f"Job is not completed. Current status: {record.status.value}"
                )

            return JobResultResponse(
                request_status=RequestStatus.ACCEPTED,
                job_id=record.job_id,
                job_status=record.status,
                result_data=record.result_data,
                message="Job completed successfully"
            )

        except NotFoundError as e:
            return JobResultResponse(
                request_status=RequestStatus.REJECTED,
                job_id=e.job_id,
                job_status=JobStatus.NOT_FOUND,
                message=str(e)
            )
        except Exception as e:
            logger.error(f"Unexpected error retrieving job result: {e}", exc_info=True)
            return JobResultResponse(
                request_status=RequestStatus.REJECTED,
                job_status=JobStatus.NOT_FOUND,
                message="Internal error retrieving job result"
            )

    def cancel(self, job_id: Optional[str]) -> JobStatusResponse:
        """
        Cancel a job (if still submitted or running)
        Terminal jobs are returned unchanged
        """
        try:
            record = self._require_record(job_id)
            job_id = record.job_id

            if record.is_terminal:
                logger.info(f"Cancel ignored, job {job_id} already {record.status.value}")
                return JobStatusResponse.from_record(record)

            handle = self._handles.get(job_id)
            if handle is not None:
                handle.cancel_event.set()
                if handle.future is not None:
                    handle.future.cancel()

            updated = self._registry.update(
                job_id,
                lambda current: current.transition(JobStatus.CANCELLED, "Job cancelled by user"),
            )
            logger.info(f"Job {job_id} cancel requested, now {updated.status.value}")
            return JobStatusResponse.from_record(updated)

        except NotFoundError as e:
            return self._rejected_lookup(e.job_id, str(e))
        except Exception as e:
            logger.error(f"Unexpected error cancelling job: {e}", exc_info=True)
            return self._rejected_lookup(None, "Internal error cancelling job", JobStatus.FAILED)

    def list_jobs(self) -> JobListResponse:
        """
        List every tracked job
        """
        try:
            summaries = [JobSummary.from_record(record) for record in self._registry.list()]
            return JobListResponse(
                request_status=RequestStatus.ACCEPTED,
                jobs=summaries,
                message=f"Found {len(summaries)} job(s)"
            )
        except Exception as e:
            logger.error(f"Unexpected error listing jobs: {e}", exc_info=True)
            return JobListResponse(
                request_status=RequestStatus.REJECTED,
                message="Internal error listing jobs"
            )

    def start_computation_sync(
        self,
        config: Optional[ConfigurationSnapshot] = None,
        timeout: Optional[float] = None,
    ) -> JobStatusResponse:
        """
        Submit a job and block until it reaches a terminal state
        """
        submitted = self.submit(config)
        if submitted.request_status != RequestStatus.ACCEPTED:
            return JobStatusResponse(
                request_status=RequestStatus.REJECTED,
                job_id=submitted.job_id,
                job_status=JobStatus.FAILED,
                message=submitted.message
            )

        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            current = self.status(submitted.job_id)
            if current.request_status != RequestStatus.ACCEPTED or current.job_status in TERMINAL_STATUSES:
                return current
            if deadline is not None and time.monotonic() >= deadline:
                return current.model_copy(update={
                    "request_status": RequestStatus.REJECTED,
                    "message": f"Timed out waiting for job {submitted.job_id}: {current.message}",
                })
            time.sleep(self._poll_interval)

    def shutdown(self, wait: bool = True) -> None:
        """
        Cancel unfinished jobs and stop both pools
        """
        for record in self._registry.list():
            if not record.is_terminal:
                self.cancel(record.job_id)
        self._executor.shutdown(wait=wait, cancel_futures=True)
        self._worker_pool.shutdown(wait=wait)
        logger.info("Job orchestrator shut down")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize_id(job_id: Optional[str]) -> str:
        if not isinstance(job_id, str):
            return ""
        return job_id.strip()

    def _require_record(self, job_id: Optional[str]) -> JobRecord:
        job_id = self._normalize_id(job_id)
        if not job_id:
            raise NotFoundError("Job identifier cannot be null or empty")
        record = self._registry.get(job_id)
        if record is None:
            raise NotFoundError(f"Job not found: {job_id}", job_id)
        return record

    @staticmethod
    def _rejected_lookup(
        job_id: Optional[str], message: str, job_status: JobStatus = JobStatus.NOT_FOUND
    ) -> JobStatusResponse:
        return JobStatusResponse(
            request_status=RequestStatus.REJECTED,
            job_id=job_id,
            job_status=job_status,
            progress=0,
            message=message
        )

    @staticmethod
    def _validate_location(value: Optional[str], label: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(f"{label} cannot be null or empty")
        value = value.strip()
        if len(value) > settings.MAX_PATH_LENGTH:
            raise ConfigurationError(f"{label} path too long")
        return value

    @staticmethod
    def _resolve_delimiter(value: Optional[str], mode) -> Tuple[str, DelimiterMode]:
        try:
            mode = DelimiterMode(mode)
        except ValueError:
            raise ConfigurationError(f"Unknown delimiter mode: {mode}")

        if mode == DelimiterMode.DEFAULT:
            return settings.DEFAULT_DELIMITER, mode

        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError("Custom delimiter cannot be null or empty")
        value = value.strip()
        if len(value) > settings.MAX_DELIMITER_LENGTH:
            raise ConfigurationError("Custom delimiter too long")
        return value, mode

    def _check_snapshot(self, config: ConfigurationSnapshot) -> ConfigurationSnapshot:
        delimiter, mode = self._resolve_delimiter(config.delimiter, config.delimiter_mode)
        config = config.model_copy(update={"delimiter": delimiter, "delimiter_mode": mode})
        config.ensure_complete()
        return config.model_copy(update={
            "input_source": self._validate_location(config.input_source, "Input source"),
            "output_destination": self._validate_location(
                config.output_destination, "Output destination"
            ),
        })


# Global instance
job_orchestrator = JobOrchestrator()
