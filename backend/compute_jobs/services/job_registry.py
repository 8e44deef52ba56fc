"""
In-memory job registry
Maps job identifiers to their current (immutable) JobRecord
"""
import threading
from typing import Callable, Dict, List, Optional

from compute_jobs.models.jobs import JobRecord


class JobRegistry:
    """
    Thread-safe table of job records.

    Records are replaced whole, never mutated, so readers always see a
    complete record. Reads go straight to the dict; the lock only makes
    the check-then-replace in update() atomic.
    """

    def __init__(self):
        self._jobs: Dict[str, JobRecord] = {}
        self._lock = threading.Lock()

    def put(self, record: JobRecord) -> None:
        with self._lock:
            self._jobs[record.job_id] = record

    def get(self, job_id: str) -> Optional[JobRecord]:
        return self._jobs.get(job_id)

    def update(
        self, job_id: str, fn: Callable[[JobRecord], JobRecord]
    ) -> Optional[JobRecord]:
        """
        Replace the record with fn(current) unless it is already terminal.

        Returns the record stored after the call (unchanged when terminal),
        or None when the id is unknown.
        """
        with self._lock:
            current = self._jobs.get(job_id)
            if current is None or current.is_terminal:
                return current
            updated = fn(current)
            self._jobs[job_id] = updated
            return updated

    def list(self) -> List[JobRecord]:
        with self._lock:
            return list(self._jobs.values())

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._jobs
