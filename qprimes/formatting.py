"""
Output sink for prime listings.

Responsibility: text rendering only. One value per line, decimal or
lowercase hexadecimal (no prefix), plus the optional summary line.
"""

from typing import Iterable, TextIO


def format_prime(p: int, hexout: bool = False) -> str:
    return format(p, 'x') if hexout else str(p)


def write_primes(primes: Iterable[int], stream: TextIO, hexout: bool = False) -> int:
    """
    Write primes one per line.

    Returns
    -------
    int
        Number of values written.
    """
    count = 0
    for p in primes:
        stream.write(format_prime(p, hexout) + "\n")
        count += 1
    return count


def summary_line(count: int, val_min: int, val_max: int) -> str:
    """Summary reported in verbose mode. Bounds are always decimal."""
    return f"{count} primes between {val_min} and {val_max}"
