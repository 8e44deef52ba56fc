"""
Shared fixtures and test doubles
"""
import random
import threading
import time

import pytest

from compute_jobs.core.exceptions import WriteError
from compute_jobs.models.jobs import TERMINAL_STATUSES
from compute_jobs.services.cached_compute_engine import CachedFactorialEngine
from compute_jobs.services.compute_engine import FactorialEngine
from compute_jobs.services.job_orchestrator import JobOrchestrator
from compute_jobs.services.storage import InMemoryStorage


class GatedStorage(InMemoryStorage):
    """In-memory storage whose reads block until `release` is set"""

    def __init__(self, sources=None):
        super().__init__(sources)
        self.read_started = threading.Event()
        self.release = threading.Event()

    def read(self, source):
        self.read_started.set()
        self.release.wait(timeout=5)
        return super().read(source)


class FailingWriteStorage(InMemoryStorage):
    """In-memory storage that refuses every write"""

    def write(self, destination, text):
        raise WriteError(f"Error writing file: disk full ({destination})")


class JitteredFactorialEngine(FactorialEngine):
    """Sleeps a random short time before each computation"""

    def __init__(self, seed=0, max_delay=0.02):
        super().__init__()
        self._rng = random.Random(seed)
        self._lock = threading.Lock()
        self._max_delay = max_delay

    def compute(self, value):
        with self._lock:
            delay = self._rng.uniform(0, self._max_delay)
        time.sleep(delay)
        return super().compute(value)


def _wait_for_terminal(orchestrator, job_id, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        response = orchestrator.status(job_id)
        if response.job_status in TERMINAL_STATUSES:
            return response
        time.sleep(0.01)
    raise AssertionError(f"Job {job_id} did not reach a terminal state within {timeout}s")


@pytest.fixture
def wait_for_terminal():
    return _wait_for_terminal


@pytest.fixture
def storage():
    return InMemoryStorage({"input.txt": [5, 10, 0]})


@pytest.fixture
def gated_storage():
    storage = GatedStorage({"input.txt": [5, 10, 0]})
    yield storage
    storage.release.set()


@pytest.fixture
def failing_write_storage():
    return FailingWriteStorage({"input.txt": [1, 2, 3]})


@pytest.fixture
def jittered_engine():
    return JitteredFactorialEngine(seed=42)


@pytest.fixture
def make_orchestrator():
    created = []

    def _make(storage, compute=None, max_job_workers=4, max_compute_workers=4):
        orchestrator = JobOrchestrator(
            storage=storage,
            compute=compute or CachedFactorialEngine(),
            max_job_workers=max_job_workers,
            max_compute_workers=max_compute_workers,
            poll_interval=0.01,
        )
        created.append(orchestrator)
        return orchestrator

    yield _make

    for orchestrator in created:
        orchestrator.shutdown(wait=True)


@pytest.fixture
def orchestrator(make_orchestrator, storage):
    return make_orchestrator(storage)
