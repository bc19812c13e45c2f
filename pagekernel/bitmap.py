"""A fixed-size array of bits, used to track allocation of numbered resources."""

from __future__ import annotations

from typing import Iterator

BITS_IN_BYTE = 8
BITS_IN_WORD = 32


class BitmapFullError(Exception):
    """Raised when no clear bit is left to allocate."""


class Bitmap:
    """A set of ``nitems`` bits, all clear at creation.

    Storage is laid out as 32-bit little-endian words, so the serialized
    form matches the word-array layout used on disk.
    """

    def __init__(self, nitems: int) -> None:
        if nitems < 0:
            raise ValueError(f"bitmap size must be non-negative, got {nitems}")
        self._num_bits = nitems
        self._num_words = -(-nitems // BITS_IN_WORD)
        self._bits = 0

    def _check(self, which: int) -> None:
        if not 0 <= which < self._num_bits:
            raise IndexError(f"bit {which} out of range for bitmap of {self._num_bits} bits")

    def mark(self, which: int) -> None:
        """Set bit ``which``."""
        self._check(which)
        self._bits |= 1 << which

    def clear(self, which: int) -> None:
        """Clear bit ``which``."""
        self._check(which)
        self._bits &= ~(1 << which)

    def test(self, which: int) -> bool:
        """Return True if bit ``which`` is set."""
        self._check(which)
        return bool((self._bits >> which) & 1)

    def find(self) -> int:
        """Set the lowest clear bit and return its number."""
        for i in range(self._num_bits):
            if not (self._bits >> i) & 1:
                self._bits |= 1 << i
                return i
        raise BitmapFullError(f"all {self._num_bits} bits are in use")

    def num_clear(self) -> int:
        """Return how many bits are clear."""
        return self._num_bits - bin(self._bits).count("1")

    def set_bits(self) -> Iterator[int]:
        """Yield the numbers of the set bits in ascending order."""
        return (i for i in range(self._num_bits) if (self._bits >> i) & 1)

    def to_bytes(self) -> bytes:
        """Serialize the bitmap as its array of 32-bit little-endian words."""
        return self._bits.to_bytes(self._num_words * 4, "little")

    def load_bytes(self, data: bytes) -> None:
        """Load bits from a serialized word array.

        Bytes past the bitmap's storage are ignored; storage bytes that
        ``data`` does not reach keep their current contents.
        """
        size = self._num_words * 4
        chunk = bytes(data[:size])
        loaded_bits = len(chunk) * BITS_IN_BYTE
        keep_mask = ~((1 << loaded_bits) - 1)
        value = (self._bits & keep_mask) | int.from_bytes(chunk, "little")
        self._bits = value & ((1 << self._num_bits) - 1)

    def __len__(self) -> int:
        return self._num_bits

    def __str__(self) -> str:
        return "Bitmap set:\n" + "".join(f"{i}, " for i in self.set_bits())