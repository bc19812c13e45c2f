"""Allocation of physical memory frames."""

from __future__ import annotations

from .bitmap import Bitmap, BitmapFullError


class OutOfMemoryError(Exception):
    """Raised when no physical frame is free."""


class MemoryManager:
    """Tracks which physical pages are in use."""

    def __init__(self, num_phys_pages: int) -> None:
        self._frames = Bitmap(num_phys_pages)

    def get_page(self) -> int:
        """Allocate the first free physical page and return its number."""
        try:
            return self._frames.find()
        except BitmapFullError as exc:
            raise OutOfMemoryError("unable to find a free physical page") from exc

    def clear_page(self, index: int) -> None:
        """Return physical page ``index`` to the free pool."""
        self._frames.clear(index)

    def num_free_pages(self) -> int:
        """Return the number of free physical pages."""
        return self._frames.num_clear()