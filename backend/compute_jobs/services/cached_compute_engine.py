"""
Memoizing factorial backend

Keeps every factorial it has seen in a shared cache and builds new values
forward from the largest cached smaller one, so computing 500! after 499!
costs a single multiplication.
"""
import logging
from typing import Dict, Optional

from compute_jobs.services.compute_engine import FactorialEngine

logger = logging.getLogger(__name__)


class CachedFactorialEngine(FactorialEngine):
    """
    Thread-safe memoizing factorial engine.

    The cache is a plain dict written only through setdefault (atomic
    insert-if-absent), so no lock is taken. Two threads missing on
    overlapping ranges may both do the multiplications; they always store
    identical values, so the result is correct either way.
    """

    def __init__(self, max_input: Optional[int] = None):
        super().__init__(max_input)
        self._cache: Dict[int, int] = {0: 1, 1: 1}

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def is_cached(self, value: int) -> bool:
        return value in self._cache

    def clear_cache(self) -> None:
        self._cache = {0: 1, 1: 1}

    def compute(self, value: int) -> str:
        self.validate(value)
        return self._to_text(value, self._factorial(value))

    def _factorial(self, n: int) -> int:
        cached = self._cache.get(n)
        if cached is not None:
            return cached

        # Largest k < n already cached (0! and 1! are always there)
        start = 2
        result = 1
        for k in range(n - 1, 1, -1):
            partial = self._cache.get(k)
            if partial is not None:
                start = k + 1
                result = partial
                break

        for i in range(start, n + 1):
            result *= i
            self._cache.setdefault(i, result)

        logger.debug(f"Factorial cache miss for {n}: multiplied {start}..{n}")
        return result
