"""
Per-element compute backends
"""
import logging
import math
from abc import ABC, abstractmethod
from typing import Optional

from compute_jobs.core.config import settings
from compute_jobs.core.exceptions import ComputeError

logger = logging.getLogger(__name__)


class ComputeBackend(ABC):
    """Pure, possibly slow, function from one input value to its result text"""

    @abstractmethod
    def compute(self, value: int) -> str:
        """Compute the result for `value`. Raises ComputeError on bad input."""
        ...


class FactorialEngine(ComputeBackend):
    """Computes n! from scratch on every call"""

    def __init__(self, max_input: Optional[int] = None):
        self._max_input = settings.MAX_FACTORIAL_INPUT if max_input is None else max_input

    @property
    def max_input(self) -> int:
        return self._max_input

    def validate(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ComputeError(f"Input must be an integer, got {value!r}")
        if value < 0:
            raise ComputeError(f"Factorial is not defined for negative numbers: {value}")
        if value > self._max_input:
            raise ComputeError(
                f"Input too large for factorial computation: {value} (max {self._max_input})"
            )

    def compute(self, value: int) -> str:
        self.validate(value)
        return self._to_text(value, math.factorial(value))

    @staticmethod
    def _to_text(value: int, result: int) -> str:
        try:
            return str(result)
        except ValueError:
            # int -> str conversion limit exceeded
            raise ComputeError(f"Computation overflow for input: {value}")
