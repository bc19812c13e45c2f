"""Demand paging: physical frames, swap space and second-chance replacement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .bitmap import Bitmap, BitmapFullError
from .memory import OutOfMemoryError

NUM_PHYS_PAGES = 32
PAGE_SIZE = 128
SWAP_SECTORS = 512


class SwapFullError(Exception):
    """Raised when no swap sector is free."""


@dataclass
class FrameInfo:
    """Which address space and virtual page occupy a physical frame."""

    space: Optional[Any] = None
    page_table_index: int = 0


class VirtualMemoryManager:
    """Owns physical memory and the swap store, and services page faults.

    Address spaces handed to it provide ``num_pages``, ``location_on_disk``
    and ``page_table_entry(index)``; entries carry ``physical_page``,
    ``valid``, ``use`` and ``dirty``.
    """

    def __init__(
        self,
        num_phys_pages: int = NUM_PHYS_PAGES,
        page_size: int = PAGE_SIZE,
        swap_sectors: int = SWAP_SECTORS,
    ) -> None:
        self.num_phys_pages = num_phys_pages
        self.page_size = page_size
        self.memory = bytearray(num_phys_pages * page_size)
        self.frames = [FrameInfo() for _ in range(num_phys_pages)]
        self._swap = bytearray(swap_sectors * page_size)
        self._swap_map = Bitmap(swap_sectors)
        self._next_victim = 0

    def alloc_swap_sector(self) -> int:
        """Reserve a swap sector and return its byte offset in the swap store."""
        try:
            return self._swap_map.find() * self.page_size
        except BitmapFullError as exc:
            raise SwapFullError("no free swap sector") from exc

    def write_to_swap(self, data: bytes, location: int) -> int:
        """Write ``data`` at ``location``; return how many bytes fit."""
        if location < 0:
            raise ValueError(f"negative swap location {location}")
        end = min(location + len(data), len(self._swap))
        count = max(end - location, 0)
        self._swap[location:location + count] = data[:count]
        return count

    def read_from_swap(self, location: int, size: int) -> bytes:
        """Read up to ``size`` bytes at ``location`` from the swap store."""
        if location < 0:
            raise ValueError(f"negative swap location {location}")
        return bytes(self._swap[location:location + size])

    def copy_swap_sector(self, to: int, source: int) -> None:
        """Copy one page-sized sector of swap from ``source`` to ``to``."""
        self.write_to_swap(self.read_from_swap(source, self.page_size), to)

    def page_table_entry(self, frame: FrameInfo) -> Any:
        """Return the page table entry of the page occupying ``frame``."""
        return frame.space.page_table_entry(frame.page_table_index)

    def swap_page_in(self, space: Any, virt_addr: int) -> int:
        """Bring the page holding ``virt_addr`` of ``space`` into memory.

        A frame is chosen with the second-chance algorithm; a dirty victim
        is written back to swap first. Returns the physical page used.
        """
        if self._next_victim >= self.num_phys_pages:
            raise OutOfMemoryError("no physical memory available")

        frame = self.frames[self._next_victim]
        while frame.space is not None and self.page_table_entry(frame).use:
            self.page_table_entry(frame).use = False
            self._next_victim = (self._next_victim + 1) % self.num_phys_pages
            frame = self.frames[self._next_victim]

        page_index = virt_addr // self.page_size
        entry = space.page_table_entry(page_index)
        if frame.space is None:
            physical_page = self._next_victim
        else:
            victim = self.page_table_entry(frame)
            physical_page = victim.physical_page
            if victim.dirty:
                start = physical_page * self.page_size
                self.write_to_swap(
                    bytes(self.memory[start:start + self.page_size]),
                    frame.space.location_on_disk[frame.page_table_index],
                )
                victim.dirty = False
            victim.valid = False

        frame.space = space
        frame.page_table_index = page_index
        entry.physical_page = physical_page
        self._load_page(space, page_index)
        self._next_victim = (self._next_victim + 1) % self.num_phys_pages
        return physical_page

    def _load_page(self, space: Any, page_index: int) -> None:
        entry = space.page_table_entry(page_index)
        start = entry.physical_page * self.page_size
        data = self.read_from_swap(space.location_on_disk[page_index], self.page_size)
        self.memory[start:start + len(data)] = data
        entry.valid = True

    def release_pages(self, space: Any) -> None:
        """Free the frames and swap sectors held by ``space``."""
        for index in range(space.num_pages):
            entry = space.page_table_entry(index)
            if entry.valid:
                self.frames[entry.physical_page] = FrameInfo()
            self._swap_map.clear(space.location_on_disk[index] // self.page_size)