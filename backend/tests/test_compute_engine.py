"""
Unit tests for the factorial compute backends
"""
import math
import threading

import pytest

from compute_jobs.core.exceptions import ComputeError
from compute_jobs.services.cached_compute_engine import CachedFactorialEngine
from compute_jobs.services.compute_engine import FactorialEngine


class TestFactorialEngine:
    """Test the uncached engine"""

    def test_small_values(self):
        """Known factorials are returned as text"""
        engine = FactorialEngine()

        assert engine.compute(0) == "1"
        assert engine.compute(1) == "1"
        assert engine.compute(5) == "120"
        assert engine.compute(10) == "3628800"

    def test_negative_input_rejected(self):
        """Negative input raises ComputeError"""
        engine = FactorialEngine()

        with pytest.raises(ComputeError, match="negative"):
            engine.compute(-1)

    def test_input_above_limit_rejected(self):
        """Input above the configured maximum raises ComputeError"""
        engine = FactorialEngine(max_input=20)

        assert engine.compute(20) == str(math.factorial(20))
        with pytest.raises(ComputeError, match="too large"):
            engine.compute(21)

    def test_non_integer_rejected(self):
        """Booleans and floats are not valid inputs"""
        engine = FactorialEngine()

        with pytest.raises(ComputeError):
            engine.compute(True)
        with pytest.raises(ComputeError):
            engine.compute(3.0)

    def test_default_limit_computes(self):
        """The default maximum (1000) still converts to text"""
        engine = FactorialEngine()

        assert engine.compute(engine.max_input) == str(math.factorial(engine.max_input))


class TestCachedFactorialEngine:
    """Test the memoizing engine"""

    def test_matches_uncached_engine(self):
        """Cached and uncached results agree for every input, in any order"""
        plain = FactorialEngine()
        cached = CachedFactorialEngine()

        for n in [7, 3, 12, 12, 0, 1, 25, 24, 2, 100, 99]:
            assert cached.compute(n) == plain.compute(n), f"Mismatch for {n}"

    def test_result_independent_of_cache_state(self):
        """compute(n) is the same whether n, n-1 or neither is cached"""
        n = 30
        expected = str(math.factorial(n))

        empty = CachedFactorialEngine()
        assert empty.compute(n) == expected

        predecessor = CachedFactorialEngine()
        predecessor.compute(n - 1)
        assert predecessor.is_cached(n - 1)
        assert not predecessor.is_cached(n)
        assert predecessor.compute(n) == expected

        hit = CachedFactorialEngine()
        hit.compute(n)
        assert hit.is_cached(n)
        assert hit.compute(n) == expected

    def test_intermediate_values_cached(self):
        """A miss caches every value between the largest cached one and n"""
        engine = CachedFactorialEngine()
        assert engine.cache_size == 2  # 0! and 1!

        engine.compute(10)

        for k in range(0, 11):
            assert engine.is_cached(k), f"{k}! should be cached"
        assert engine.cache_size == 11

    def test_builds_forward_from_largest_cached(self):
        """Only values above the largest cached k are added"""
        engine = CachedFactorialEngine()
        engine.compute(5)
        engine.compute(8)

        assert engine.cache_size == 9
        assert engine.compute(8) == "40320"

    def test_clear_cache(self):
        """Clearing keeps only the seeds"""
        engine = CachedFactorialEngine()
        engine.compute(50)
        engine.clear_cache()

        assert engine.cache_size == 2
        assert engine.compute(6) == "720"

    def test_validation_matches_plain_engine(self):
        """Invalid inputs raise ComputeError and are never cached"""
        engine = CachedFactorialEngine(max_input=10)

        with pytest.raises(ComputeError):
            engine.compute(-3)
        with pytest.raises(ComputeError):
            engine.compute(11)
        assert not engine.is_cached(11)

    def test_concurrent_overlapping_misses(self):
        """Threads racing on overlapping ranges all see correct values"""
        engine = CachedFactorialEngine()
        inputs = list(range(200, 0, -7)) * 4
        results = {}
        errors = []
        lock = threading.Lock()

        def worker(values):
            try:
                for value in values:
                    result = engine.compute(value)
                    with lock:
                        results.setdefault(value, set()).add(result)
            except Exception as e:  # pragma: no cover - reported below
                errors.append(e)

        threads = [
            threading.Thread(target=worker, args=(inputs[i::8],)) for i in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert not errors
        for value, seen in results.items():
            assert seen == {str(math.factorial(value))}, f"Wrong result for {value}"
