"""
Error types raised by the sieve.

Responsibility: failure taxonomy only. Invariant violations inside the
sieve surface as plain IndexError and are not wrapped here.
"""


class SieveError(Exception):
    """Base class for sieve failures."""


class OutOfMemory(SieveError, MemoryError):
    """A base or page bitset could not be allocated. Fatal for the run."""


class InvalidRange(SieveError, ValueError):
    """max < min under the strict range policy."""

    def __init__(self, val_min: int, val_max: int):
        super().__init__(f"max ({val_max}) is below min ({val_min})")
        self.val_min = val_min
        self.val_max = val_max
