"""
End-to-end tests for prime enumeration and counting.

Reference results come from trial division and from a plain full-array
sieve of Eratosthenes, both independent of the segmented implementation.
"""

import numpy as np
import pytest

from qprimes.errors import InvalidRange
from qprimes.primes import (
    PrimeEnumerator,
    count_primes,
    enumerate_primes,
    iter_primes,
    normalize_range,
)


U64_MAX = 2**64 - 1


def is_prime(n: int) -> bool:
    """Trial division."""
    if n < 2:
        return False
    if n % 2 == 0:
        return n == 2
    d = 3
    while d * d <= n:
        if n % d == 0:
            return False
        d += 2
    return True


def reference_flags_upto(N: int) -> np.ndarray:
    """flags[i] is True iff i is prime, by a full sieve over [0, N]."""
    flags = np.ones(N + 1, dtype=bool)
    flags[:2] = False
    for p in range(2, int(N**0.5) + 1):
        if flags[p]:
            flags[p*p::p] = False
    return flags


def reference_primes(val_min: int, val_max: int) -> list:
    return [n for n in range(val_min, val_max + 1) if is_prime(n)]


# (min, max) pairs: below, straddling and far above isqrt(max).
VARIED_RANGES = [
    (0, 0),
    (0, 100),
    (2, 3),
    (10, 50),
    (90, 10000),
    (95, 105),
    (999, 1000),
    (5000, 5100),
    (65000, 66100),
    (10**6, 10**6 + 3000),
    (2**20 - 5, 2**20 + 5),
    (123456789, 123459999),
]


class TestNormalizeRange:
    """Range validation and the max < min policy."""

    def test_ordered_range_unchanged(self):
        assert normalize_range(3, 9) == (3, 9)

    def test_reversed_range_clamps_max(self):
        """Default policy: max is raised to min, giving a one-value range."""
        assert normalize_range(9, 3) == (9, 9)

    def test_strict_policy_raises(self):
        with pytest.raises(InvalidRange) as info:
            normalize_range(9, 3, strict=True)
        assert info.value.val_min == 9
        assert info.value.val_max == 3
        assert isinstance(info.value, ValueError)

    def test_u64_limits(self):
        assert normalize_range(0, U64_MAX) == (0, U64_MAX)
        with pytest.raises(ValueError):
            normalize_range(0, U64_MAX + 1)
        with pytest.raises(ValueError):
            normalize_range(-1, 10)


class TestBoundaries:
    """Smallest ranges and the special prime 2."""

    def test_two_to_two(self):
        assert enumerate_primes(2, 2) == ([2], 1)

    def test_zero_to_one(self):
        assert enumerate_primes(0, 1) == ([], 0)

    def test_zero_to_two(self):
        assert enumerate_primes(0, 2) == ([2], 1)

    def test_single_values(self):
        for n in range(0, 60):
            expected = [n] if is_prime(n) else []
            assert enumerate_primes(n, n)[0] == expected, f"wrong result for [{n}, {n}]"

    def test_reversed_range_is_single_value(self):
        assert enumerate_primes(7, 3) == ([7], 1)
        assert enumerate_primes(8, 3) == ([], 0)

    def test_perfect_square_bound(self):
        """REGRESSION: 9 is not prime when smax happens to be 9."""
        assert enumerate_primes(0, 64)[0] == reference_primes(0, 64)
        assert 9 not in enumerate_primes(9, 80)[0]


class TestCorrectness:
    """Every reported value is a prime in range, and none are missed."""

    @pytest.mark.parametrize("val_min,val_max", VARIED_RANGES)
    def test_matches_trial_division(self, val_min, val_max):
        primes, count = enumerate_primes(val_min, val_max)
        assert primes == reference_primes(val_min, val_max)
        assert count == len(primes)

    def test_complete_up_to_one_million(self):
        """Output set equals a full sieve over [0, 10**6]."""
        N = 10**6
        primes, count = enumerate_primes(0, N)
        expected = np.nonzero(reference_flags_upto(N))[0].tolist()
        assert primes == expected
        assert count == 78498

    def test_complete_with_small_pages(self):
        """Same result when the range is cut into many 2**8 pages."""
        N = 50000
        primes = list(iter_primes(0, N, max_page_exp=8))
        assert primes == np.nonzero(reference_flags_upto(N))[0].tolist()

    def test_strictly_ascending(self):
        primes, _ = enumerate_primes(0, 200000)
        assert all(a < b for a, b in zip(primes, primes[1:]))

    def test_every_value_prime_and_in_range(self):
        for val_min, val_max in [(10**9, 10**9 + 2000), (3, 3000), (7919, 7919)]:
            for p in iter_primes(val_min, val_max):
                assert val_min <= p <= val_max
                assert is_prime(p), f"{p} is not prime"


class TestPageBoundary:
    """No primes skipped or duplicated where two pages meet."""

    def test_straddle_two_to_the_twenty(self):
        primes, count = enumerate_primes(2**20 - 5, 2**20 + 5)
        assert primes == [1048571, 1048573]
        assert count == 2

    def test_straddle_at_default_page_size(self):
        """A 2**20-wide range spanning pages 0 and 1 of size 2**20."""
        val_min, val_max = 2**19, 2**20 + 2**19
        enumerator = PrimeEnumerator(val_min, val_max)
        assert enumerator.plan.page_size == 2**20
        assert enumerator.plan.num_pages == 2

        primes = list(enumerator)
        flags = reference_flags_upto(val_max)
        expected = [n for n in np.nonzero(flags)[0].tolist() if n >= val_min]
        assert primes == expected
        assert len(set(primes)) == len(primes)
        assert enumerator.pages_swept == 2


class TestReconciliation:
    """Each prime has one emission point: base list <= smax, pages above."""

    def test_primes_around_smax_reported_once(self):
        enumerator = PrimeEnumerator(0, 200)
        assert enumerator.smax == 15
        primes = list(enumerator)
        assert primes.count(13) == 1  # base stage
        assert primes.count(17) == 1  # page stage
        assert primes == reference_primes(0, 200)

    def test_base_primes_in_range(self):
        enumerator = PrimeEnumerator(5, 10**4)
        assert enumerator.base_primes_in_range().tolist() == [5, 7, 11, 13, 17, 19, 23, 29, 31, 37,
                                                              41, 43, 47, 53, 59, 61, 67, 71, 73,
                                                              79, 83, 89, 97, 101]

    def test_min_above_smax_uses_pages_only(self):
        enumerator = PrimeEnumerator(10**6, 10**6 + 100)
        assert enumerator.base_primes_in_range().size == 0
        assert list(enumerator) == reference_primes(10**6, 10**6 + 100)


class TestCountMode:
    """count_primes agrees with enumeration."""

    @pytest.mark.parametrize("val_min,val_max", VARIED_RANGES)
    def test_count_equals_enumeration_length(self, val_min, val_max):
        assert count_primes(val_min, val_max) == len(enumerate_primes(val_min, val_max)[0])

    def test_known_counts(self):
        assert count_primes(0, 100) == 25
        assert count_primes(0, 10**5) == 9592
        assert count_primes(0, 10**6) == 78498

    def test_count_with_small_pages(self):
        assert count_primes(0, 10**5, max_page_exp=6) == 9592


class TestIdempotence:
    """Identical inputs give identical outputs."""

    def test_repeated_calls(self):
        first = enumerate_primes(31337, 41337)
        for _ in range(3):
            assert enumerate_primes(31337, 41337) == first

    def test_enumerator_rerun(self):
        enumerator = PrimeEnumerator(1000, 3000)
        assert list(enumerator) == list(enumerator)
        assert enumerator.count() == enumerator.count()


class TestLargeRange:
    """Regression fixture far above 2**32."""

    def test_ten_to_the_eleven(self):
        """47 primes in [10**11, 10**11 + 1000] (verified independently)."""
        primes, count = enumerate_primes(10**11, 10**11 + 1000)
        assert count == 47
        assert primes[0] == 100000000003
        assert primes[1] == 100000000019
        assert primes[-1] == 100000000951
        assert count_primes(10**11, 10**11 + 1000) == 47


class TestLaziness:
    """Primes are produced on demand."""

    def test_iter_primes_is_lazy(self):
        it = iter_primes(10**9, 10**9 + 10**6)
        assert next(it) == 1000000007
        assert next(it) == 1000000009

    def test_stats(self):
        enumerator = PrimeEnumerator(0, 10**4, max_page_exp=10)
        assert enumerator.stats == {'base_primes': 26, 'page_size': 1024, 'pages_swept': 0}
        enumerator.count()
        assert enumerator.stats['pages_swept'] == 10

    def test_verbose_reports_on_stderr(self, capsys):
        PrimeEnumerator(0, 1000, verbose=True)
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Base sieve" in captured.err
        assert "Page plan" in captured.err


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
