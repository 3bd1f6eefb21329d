"""
Paged composite-marking sweep.

Responsibility: sieve each aligned page of [val_min, val_max] with the base
primes and report the primes found there. One page buffer is reused for the
whole sweep.

Page bitset mapping: bit j <-> page_start + j (one bit per integer).

Only candidates above smax are reported. Primes <= smax belong to the base
stage, so every prime value has exactly one emission point.
"""

from math import isqrt
from typing import Iterator, Tuple

import numpy as np

from .bitset import BitSet, EVEN_BITS
from .page_planner import PagePlan


# Base primes converted to Python ints per step.
PRIME_CHUNK = 1 << 16


def first_multiple_offset(page_start: int, p: int) -> int:
    """
    Smallest j >= 0 with (page_start + j) % p == 0.

    Python integers throughout: page_start may be close to 2**64.
    """
    return (p - page_start % p) % p


class PageSieveEngine:
    """
    Sieve [val_min, val_max] page by page.

    Parameters
    ----------
    base_primes : np.ndarray
        Ascending primes <= smax, starting with 2.
    smax : int
        Bound of the base stage; only candidates > smax are reported here.
    plan : PagePlan
        Page size and page index range.
    val_min, val_max : int
        Normalised range.
    """

    def __init__(self, base_primes: np.ndarray, smax: int, plan: PagePlan,
                 val_min: int, val_max: int):
        self.smax = smax
        self.plan = plan
        self.val_min = val_min
        self.val_max = val_max
        self.pages_swept = 0

        self._primes = base_primes
        self._page = BitSet(plan.page_size)

    def sieving_primes(self, hi: int) -> Iterator[int]:
        """
        Odd base primes p with p*p <= hi, as Python ints.

        Composites <= hi have a factor <= isqrt(hi). Only that prefix of the
        base list is converted, PRIME_CHUNK values at a time.
        """
        primes = self._primes
        if primes.size == 0:
            return
        root = min(isqrt(hi), int(primes[-1]))
        end = int(np.searchsorted(primes, root, side='right'))
        for lo in range(0, end, PRIME_CHUNK):
            for p in primes[lo:min(lo + PRIME_CHUNK, end)].tolist():
                # Evens are marked up front, so 2 never sieves.
                if p != 2:
                    yield p

    def _mark(self, page_start: int) -> None:
        page = self._page
        page.fill(EVEN_BITS)

        hi = min(page_start + self.plan.page_size - 1, self.val_max)
        for p in self.sieving_primes(hi):
            j0 = first_multiple_offset(page_start, p)
            if j0 < self.plan.page_size:
                page.set_stride(j0, p)

    def sieve_page(self, pg: int) -> Tuple[int, np.ndarray]:
        """
        Sieve one page.

        Returns
        -------
        tuple
            (page_start, offsets) where offsets is the ascending int64 array
            of j such that page_start + j is a prime in
            [val_min, val_max] above smax.
        """
        page_start = self.plan.page_start(pg)
        self._mark(page_start)

        # Scanning stops at val_max.
        stop = min(self.plan.page_size, self.val_max - page_start + 1)
        offsets = self._page.clear_indices(stop)

        lower = max(self.val_min, self.smax + 1) - page_start
        if lower > 0:
            offsets = offsets[offsets >= lower]

        self.pages_swept += 1
        return page_start, offsets

    def pages(self) -> Iterator[Tuple[int, np.ndarray]]:
        """
        Sieve pages in ascending order, one (page_start, offsets) per page.

        The page is the cancellation unit: a consumer may stop between yields.
        """
        for pg in self.plan.pages():
            yield self.sieve_page(pg)

    def primes(self) -> Iterator[int]:
        """Lazily yield primes above smax in ascending order."""
        for page_start, offsets in self.pages():
            for j in offsets.tolist():
                yield page_start + j

    def count(self) -> int:
        """Number of primes above smax, without emitting them."""
        return sum(len(offsets) for _, offsets in self.pages())
