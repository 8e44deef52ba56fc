"""
Pipeline executor
Carries one job from input read through compute fan-out to output write
"""
import logging
import threading
from typing import Optional

from compute_jobs.core.exceptions import (
    ComputeJobsError,
    InternalError,
    JobCancelledError,
    ReadError,
)
from compute_jobs.models.configuration import ConfigurationSnapshot
from compute_jobs.models.jobs import JobRecord, JobStatus
from compute_jobs.services.compute_engine import ComputeBackend
from compute_jobs.services.job_registry import JobRegistry
from compute_jobs.services.storage import StorageBackend
from compute_jobs.services.worker_pool import WorkerPool

logger = logging.getLogger(__name__)

PROGRESS_READ = 25
PROGRESS_COMPUTED = 75
PROGRESS_DONE = 100

FAILURE_PREFIX = "Computation failed: "
CANCELLED_MESSAGE = "Job cancelled before completion"


class PipelineExecutor:
    """
    Runs a job's pipeline as the only writer of its record.

    Stages: validate -> read -> fan out -> aggregate -> write -> complete.
    Every stage ends with a registry update. Cancellation is checked at
    stage boundaries and while waiting on the fan-out; a cancelled record is
    never overwritten because the registry refuses updates to terminal
    records.
    """

    def __init__(
        self,
        registry: JobRegistry,
        storage: StorageBackend,
        compute: ComputeBackend,
        worker_pool: WorkerPool,
    ):
        self._registry = registry
        self._storage = storage
        self._compute = compute
        self._worker_pool = worker_pool

    def run(
        self,
        job_id: str,
        config: ConfigurationSnapshot,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """Execute the pipeline. Never raises."""
        cancel_event = cancel_event or threading.Event()
        try:
            try:
                self._execute(job_id, config, cancel_event)
            except ComputeJobsError:
                raise
            except Exception as e:
                logger.error(f"Unexpected error processing job {job_id}: {e}", exc_info=True)
                raise InternalError("internal error") from e
        except JobCancelledError as e:
            logger.info(f"Job {job_id} stopped after cancellation: {e}")
            # no-op when cancel() already stored a terminal record
            self._registry.update(
                job_id,
                lambda current: current.transition(JobStatus.CANCELLED, CANCELLED_MESSAGE),
            )
        except ComputeJobsError as e:
            logger.warning(f"Job {job_id} failed: {e}")
            self._fail(job_id, f"{FAILURE_PREFIX}{e}")

    def _execute(
        self, job_id: str, config: ConfigurationSnapshot, cancel_event: threading.Event
    ) -> None:
        self._check_cancelled(cancel_event)
        config.ensure_complete()

        values = self._storage.read(config.input_source)
        if not values:
            raise ReadError("No data read from input source")

        self._check_cancelled(cancel_event)
        self._advance(
            job_id,
            JobStatus.RUNNING,
            PROGRESS_READ,
            f"Read {len(values)} value(s) from {config.input_source}, computing...",
        )
        logger.info(f"Job {job_id}: computing {len(values)} value(s)")

        pairs = self._worker_pool.map_ordered(self._compute_pair, values, cancel_event)
        output = config.delimiter.join(pairs)

        self._check_cancelled(cancel_event)
        self._advance(
            job_id,
            JobStatus.RUNNING,
            PROGRESS_COMPUTED,
            "Computation complete, writing results...",
        )

        self._storage.write(config.output_destination, output)

        self._check_cancelled(cancel_event)
        self._advance(
            job_id,
            JobStatus.COMPLETED,
            PROGRESS_DONE,
            f"Computation completed successfully. Processed {len(values)} numbers.",
            result_data=output,
        )
        logger.info(f"Job {job_id} completed: results written to {config.output_destination}")

    def _compute_pair(self, value: int) -> str:
        return f"{value}={self._compute.compute(value)}"

    def _advance(
        self,
        job_id: str,
        status: JobStatus,
        progress: int,
        message: str,
        result_data: Optional[str] = None,
    ) -> JobRecord:
        record = self._registry.update(
            job_id,
            lambda current: current.transition(status, message, progress, result_data),
        )
        if record is None:
            raise JobCancelledError(f"Job {job_id} is no longer tracked")
        if record.status == JobStatus.CANCELLED:
            raise JobCancelledError(f"Job {job_id} was cancelled")
        return record

    def _fail(self, job_id: str, message: str) -> None:
        self._registry.update(
            job_id,
            lambda current: current.transition(JobStatus.FAILED, message, PROGRESS_DONE),
        )

    @staticmethod
    def _check_cancelled(cancel_event: threading.Event) -> None:
        if cancel_event.is_set():
            raise JobCancelledError("Job cancelled")
