"""
Base sieve: all primes up to isqrt(max) + 1.

Responsibility: the small, classical stage of the segmented sieve. Produces
the ordered base prime list every page is sieved with. Knows nothing about
pages or the target range beyond its upper bound.

Index mapping (odd-only bitset):
- bit i <-> 2i + 1
- n -> bit n >> 1  (n odd)

For n=1: bit 0 (pre-marked, 1 is not prime)
For n=3: bit 1
For n=9: bit 4
"""

from math import isqrt, log
from typing import NamedTuple

import numpy as np

from .bitset import BitSet


class BaseSieve(NamedTuple):
    """Outcome of the base stage."""
    smax: int           # sieve bound, isqrt(val_max) + 1
    bits: BitSet        # odd-only compositeness flags, bit i <-> 2i + 1
    primes: np.ndarray  # ascending primes <= smax, uint32, read-only


def sieve_bound(val_max: int) -> int:
    """Return smax = isqrt(val_max) + 1, exact for every u64 input."""
    return isqrt(val_max) + 1


def odd_sieve(smax: int) -> BitSet:
    """
    Odd-only sieve of Eratosthenes up to smax.

    Parameters
    ----------
    smax : int
        Upper bound (inclusive).

    Returns
    -------
    BitSet
        sbits = smax // 2 + 1 bits; bit i is clear iff 2i + 1 is prime
        (for 2i + 1 <= smax).
    """
    sbits = (smax >> 1) + 1
    bits = BitSet(sbits)
    bits.set(0)

    n = 3
    while n * n <= smax:
        if not bits.test(n >> 1):
            # Smaller odd multiples were already marked by a smaller factor.
            bits.set_stride((n * n) >> 1, n)
        n += 2

    return bits


def prime_count_bound(x: int) -> int:
    """Upper bound on pi(x): 1.256 x / ln x (Rosser and Schoenfeld), at least 2."""
    x = max(x, 3)
    return max(2, int(1.256 * x / log(x)) + 1)


def collect_primes(bits: BitSet, smax: int) -> np.ndarray:
    """
    Read primes out of an odd-only bitset, with 2 prepended.

    The bitset is scanned chunk by chunk into a uint32 buffer sized by
    prime_count_bound. The last byte may cover odd numbers just past smax;
    those are dropped.
    """
    primes = np.empty(prime_count_bound(smax + 2), dtype=np.uint32)
    primes[0] = 2
    n = 1
    for idx in bits.iter_clear_indices():
        odd = 2 * idx[idx >= 1] + 1
        odd = odd[odd <= smax]
        primes[n:n + len(odd)] = odd
        n += len(odd)

    primes = primes[:n]
    primes.flags.writeable = False
    return primes


def build_base_sieve(val_max: int) -> BaseSieve:
    """
    Run the base stage for a range ending at val_max.

    Parameters
    ----------
    val_max : int
        Upper end of the target range.

    Returns
    -------
    BaseSieve
        Bound, bitset and ascending base primes.
    """
    smax = sieve_bound(val_max)
    bits = odd_sieve(smax)
    return BaseSieve(smax, bits, collect_primes(bits, smax))
