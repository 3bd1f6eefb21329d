"""
Packed bit array backing both sieve stages.

Responsibility: storage only. The meaning of a bit (which integer it stands
for) belongs to the caller:

- base sieve: origin 1, stride 2  (bit i <-> 2i + 1)
- page sieve: origin page_start, stride 1  (bit j <-> page_start + j)

Bits are packed little-endian within each byte: bit i lives in byte i >> 3
at position i & 7. A set bit means "composite" (or not yet proven prime).
"""

from typing import Iterator

import numpy as np

from .errors import OutOfMemory


# Byte pattern with every even bit position set (bits 0, 2, 4, 6).
EVEN_BITS = 0x55

# Bits unpacked per scan step.
CHUNK_BITS = 1 << 18


class BitSet:
    """
    Fixed-length packed bit array.

    Parameters
    ----------
    num_bits : int
        Number of addressable bits. Never changes after construction.
    fill : bool
        Start with every bit set instead of every bit clear.
    """

    def __init__(self, num_bits: int, fill: bool = False):
        if num_bits < 0:
            raise ValueError(f"num_bits must be >= 0, got {num_bits}")
        self.num_bits = num_bits
        nbytes = (num_bits + 7) >> 3
        try:
            if fill:
                self._buf = np.full(nbytes, 0xFF, dtype=np.uint8)
            else:
                self._buf = np.zeros(nbytes, dtype=np.uint8)
        except MemoryError as exc:
            raise OutOfMemory(f"cannot allocate {nbytes:,} bytes for {num_bits:,} bits") from exc

    def __len__(self) -> int:
        return self.num_bits

    @property
    def nbytes(self) -> int:
        return self._buf.nbytes

    def _check(self, i: int) -> None:
        if i < 0 or i >= self.num_bits:
            raise IndexError(f"bit index {i} out of range [0, {self.num_bits})")

    def set(self, i: int) -> None:
        self._check(i)
        self._buf[i >> 3] |= np.uint8(1 << (i & 7))

    def test(self, i: int) -> bool:
        self._check(i)
        return bool(self._buf[i >> 3] & (1 << (i & 7)))

    def fill(self, pattern: int) -> None:
        """Overwrite every byte with `pattern` (0..255)."""
        self._buf[:] = pattern

    def clear_all(self) -> None:
        self._buf[:] = 0

    def set_stride(self, start: int, step: int) -> None:
        """
        Set bits start, start + step, start + 2*step, ... below num_bits.

        A start at or beyond num_bits is a no-op (the progression is empty).

        Bit start + (k + 8m)*step sits in byte ((start + k*step) >> 3) + m*step
        at the same position as bit start + k*step, so the progression is
        eight strided byte slices updated in place.
        """
        if start < 0:
            raise IndexError(f"bit index {start} out of range [0, {self.num_bits})")
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        for k in range(8):
            i = start + k * step
            if i >= self.num_bits:
                break
            count = (self.num_bits - i + 8 * step - 1) // (8 * step)
            b = i >> 3
            view = self._buf[b:b + count * step:step]
            view |= np.uint8(1 << (i & 7))

    def iter_clear_indices(self, stop: int = None, chunk_bits: int = CHUNK_BITS) -> Iterator[np.ndarray]:
        """
        Yield ascending indices of clear bits in [0, stop), one array per chunk.

        Only one chunk of chunk_bits bits is unpacked at a time.
        """
        if stop is None or stop > self.num_bits:
            stop = self.num_bits
        chunk_bits = max(8, chunk_bits & ~7)
        for lo in range(0, max(stop, 0), chunk_bits):
            n = min(chunk_bits, stop - lo)
            b = lo >> 3
            bits = np.unpackbits(self._buf[b:b + ((n + 7) >> 3)], count=n, bitorder='little')
            yield np.flatnonzero(bits == 0) + lo

    def clear_indices(self, stop: int = None) -> np.ndarray:
        """
        Return ascending indices of clear bits in [0, stop).

        Parameters
        ----------
        stop : int, optional
            Exclusive upper bound on the scan. Defaults to num_bits.

        Returns
        -------
        np.ndarray
            int64 array of bit indices.
        """
        chunks = list(self.iter_clear_indices(stop))
        if not chunks:
            return np.empty(0, dtype=np.int64)
        return np.concatenate(chunks)

    def count_clear(self, stop: int = None) -> int:
        return sum(len(idx) for idx in self.iter_clear_indices(stop))
