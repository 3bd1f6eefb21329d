"""
Prime enumeration over [val_min, val_max].

Responsibility: orchestration only. Sequences the base sieve, the page plan
and the page sweep into one ascending, duplicate-free stream of primes.

Emission points:
- primes <= smax come from the base prime list
- primes > smax come from the page sweep
"""

import sys
import time
from typing import Iterator, List, Tuple

import numpy as np

from .base_sieve import build_base_sieve
from .errors import InvalidRange
from .page_planner import DEFAULT_PAGE_EXP, plan_pages
from .page_sieve import PageSieveEngine


U64_MAX = (1 << 64) - 1


def normalize_range(val_min: int, val_max: int, strict: bool = False) -> Tuple[int, int]:
    """
    Validate u64 bounds and order them.

    Parameters
    ----------
    val_min, val_max : int
        Requested bounds.
    strict : bool
        Raise InvalidRange on max < min instead of clamping max up to min.

    Returns
    -------
    tuple
        (val_min, val_max) with val_min <= val_max.
    """
    for name, v in (('min', val_min), ('max', val_max)):
        if not 0 <= v <= U64_MAX:
            raise ValueError(f"{name} must be in [0, 2**64), got {v}")
    if val_max < val_min:
        if strict:
            raise InvalidRange(val_min, val_max)
        val_max = val_min
    return val_min, val_max


class PrimeEnumerator:
    """
    Segmented sieve over one range.

    The base sieve runs on construction; pages are swept lazily on
    iteration. Each iteration or count() reruns the sweep.
    """

    def __init__(self, val_min: int, val_max: int,
                 max_page_exp: int = DEFAULT_PAGE_EXP, strict: bool = False,
                 verbose: bool = False):
        self.val_min, self.val_max = normalize_range(val_min, val_max, strict)
        self.verbose = verbose

        t0 = time.time()
        base = build_base_sieve(self.val_max)
        self.smax = base.smax
        self.base_primes = base.primes
        self.plan = plan_pages(self.val_min, self.val_max, max_page_exp)
        self.pages_swept = 0

        if verbose:
            print(f"  Base sieve: {len(self.base_primes):,} primes up to {self.smax:,} "
                  f"({base.bits.nbytes:,} bytes) in {time.time() - t0:.3f}s", file=sys.stderr)
            print(f"  Page plan: 2^{self.plan.page_exp} bits/page, "
                  f"{self.plan.num_pages:,} pages", file=sys.stderr)

    def base_primes_in_range(self) -> np.ndarray:
        """Base primes p with val_min <= p <= val_max, ascending."""
        primes = self.base_primes
        top = int(primes[-1])
        if self.val_min > top:
            return primes[:0]
        # Bounds clamped to the largest base prime fit the uint32 dtype.
        lo = np.searchsorted(primes, self.val_min, side='left')
        hi = np.searchsorted(primes, min(self.val_max, top), side='right')
        return primes[lo:hi]

    @property
    def stats(self) -> dict:
        """Base prime count, page size and pages swept by the last run."""
        return {
            'base_primes': len(self.base_primes),
            'page_size': self.plan.page_size,
            'pages_swept': self.pages_swept,
        }

    def _engine(self) -> PageSieveEngine:
        return PageSieveEngine(self.base_primes, self.smax, self.plan,
                               self.val_min, self.val_max)

    def __iter__(self) -> Iterator[int]:
        for p in self.base_primes_in_range().tolist():
            yield p
        engine = self._engine()
        yield from engine.primes()
        self.pages_swept = engine.pages_swept

    def count(self) -> int:
        """Number of primes in range; same selection as iteration, no emission."""
        engine = self._engine()
        total = len(self.base_primes_in_range()) + engine.count()
        self.pages_swept = engine.pages_swept
        return total


def iter_primes(val_min: int, val_max: int, **kwargs) -> Iterator[int]:
    """Lazily yield every prime in [val_min, val_max], ascending."""
    return iter(PrimeEnumerator(val_min, val_max, **kwargs))


def enumerate_primes(val_min: int, val_max: int, **kwargs) -> Tuple[List[int], int]:
    """
    Return every prime in [val_min, val_max] and how many there are.

    Returns
    -------
    tuple
        (primes, count), primes strictly ascending, count == len(primes).
    """
    primes = list(iter_primes(val_min, val_max, **kwargs))
    return primes, len(primes)


def count_primes(val_min: int, val_max: int, **kwargs) -> int:
    """Number of primes in [val_min, val_max]."""
    return PrimeEnumerator(val_min, val_max, **kwargs).count()
