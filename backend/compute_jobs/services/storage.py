"""
Storage backends for job input and output
Reads integer input and writes formatted result text
"""
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, List, Optional
import logging

from compute_jobs.core.config import settings
from compute_jobs.core.exceptions import ReadError, WriteError

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """Synchronous, blocking source/sink for pipeline data"""

    @abstractmethod
    def read(self, source: str) -> List[int]:
        """Read the input integers from `source`. Raises ReadError."""
        ...

    @abstractmethod
    def write(self, destination: str, text: str) -> None:
        """Write `text` to `destination`. Raises WriteError."""
        ...


class FileStorage(StorageBackend):
    """Reads one integer per line from text files and writes results to files"""

    def __init__(self, base_dir: Optional[Path] = None, input_suffix: Optional[str] = None):
        # Relative paths resolve against base_dir when one is given
        self._base_dir = Path(base_dir) if base_dir is not None else None
        self._input_suffix = (input_suffix or settings.INPUT_FILE_SUFFIX).lower()

    def _resolve(self, location: str) -> Path:
        path = Path(location)
        if self._base_dir is not None and not path.is_absolute():
            path = self._base_dir / path
        return path

    def read(self, source: str) -> List[int]:
        if not source:
            raise ReadError("Source cannot be null or empty")
        if not source.lower().endswith(self._input_suffix):
            raise ReadError(f"Only {self._input_suffix} files are supported")
        if ".." in source:
            raise ReadError("Invalid file path")

        file_path = self._resolve(source)
        values: List[int] = []
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        values.append(int(line))
                    except ValueError:
                        raise ReadError(
                            f"Invalid integer format in file at line {line_number}: {line!r}"
                        )
        except OSError as e:
            raise ReadError(f"Error reading file: {e}")

        logger.info(f"Read {len(values)} integers from {file_path}")
        return values

    def write(self, destination: str, text: str) -> None:
        if not destination:
            raise WriteError("Destination cannot be null or empty")
        if text is None:
            raise WriteError("No data provided to write")
        if ".." in destination:
            raise WriteError("Invalid file path")

        file_path = self._resolve(destination)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                f.write(text)
        except OSError as e:
            raise WriteError(f"Error writing file: {e}")

        logger.info(f"Wrote {len(text)} characters to {file_path}")


class InMemoryStorage(StorageBackend):
    """Dict-backed storage, used for embedding and tests"""

    def __init__(self, sources: Optional[Dict[str, Iterable[int]]] = None):
        self._lock = threading.Lock()
        self._sources: Dict[str, List[int]] = {
            name: list(values) for name, values in (sources or {}).items()
        }
        self._outputs: Dict[str, str] = {}

    def add_source(self, source: str, values: Iterable[int]) -> None:
        with self._lock:
            self._sources[source] = list(values)

    def read(self, source: str) -> List[int]:
        with self._lock:
            values = self._sources.get(source)
        if values is None:
            raise ReadError(f"Error reading source: {source} not found")
        return list(values)

    def write(self, destination: str, text: str) -> None:
        if not destination:
            raise WriteError("Destination cannot be null or empty")
        with self._lock:
            self._outputs[destination] = text

    def get_output(self, destination: str) -> Optional[str]:
        with self._lock:
            return self._outputs.get(destination)
