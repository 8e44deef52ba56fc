"""
Bounded worker pool for per-element compute fan-out

One pool is shared by every job, so the number of compute threads stays
fixed no matter how many jobs run or how many elements a job has.
"""
import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Iterable, List, Optional, Sequence, TypeVar

from compute_jobs.core.config import settings
from compute_jobs.core.exceptions import JobCancelledError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class WorkerPool:
    """Fixed-size thread pool with join semantics over a batch of tasks"""

    def __init__(self, max_workers: Optional[int] = None, poll_interval: float = 0.05):
        self._max_workers = max_workers or settings.MAX_COMPUTE_WORKERS
        self._poll_interval = poll_interval
        self._executor = ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="compute_worker"
        )

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def submit(self, fn: Callable[..., R], *args: Any) -> "Future[R]":
        return self._executor.submit(fn, *args)

    def await_all(
        self,
        futures: Sequence["Future[R]"],
        cancel_event: Optional[threading.Event] = None,
    ) -> List[R]:
        """
        Wait for every future and return results in submission order.

        The first failing task (in submission order among those finished)
        fails the batch: unfinished futures are cancelled and its exception
        is re-raised. A set cancel_event cancels unfinished futures and
        raises JobCancelledError; tasks already running are left to finish.
        """
        pending = set(futures)
        try:
            while pending:
                if cancel_event is not None and cancel_event.is_set():
                    raise JobCancelledError("Job cancelled while computing")
                done, pending = wait(
                    pending, timeout=self._poll_interval, return_when=FIRST_EXCEPTION
                )
                for future in futures:
                    if future not in done:
                        continue
                    if future.cancelled():
                        raise JobCancelledError("Compute task was cancelled")
                    error = future.exception()
                    if error is not None:
                        raise error
        except BaseException:
            cancelled = sum(1 for future in futures if future.cancel())
            if cancelled:
                logger.debug(f"Cancelled {cancelled} pending compute task(s)")
            raise

        return [future.result() for future in futures]

    def map_ordered(
        self,
        fn: Callable[[T], R],
        items: Iterable[T],
        cancel_event: Optional[threading.Event] = None,
    ) -> List[R]:
        """Run fn over items on the pool; results keep the order of items"""
        futures = [self.submit(fn, item) for item in items]
        return self.await_all(futures, cancel_event)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)
