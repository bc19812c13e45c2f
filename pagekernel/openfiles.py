"""System-wide and per-process open file tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .bitmap import Bitmap, BitmapFullError

MAX_SYS_OPEN_FILES = 32
# Slots below this index are never matched by name lookup.
FIRST_SEARCHABLE_INDEX = 2


class TooManyOpenFilesError(Exception):
    """Raised when an open file table has no free slot."""


@dataclass
class SysOpenFile:
    """A file held open by the system on behalf of one or more processes."""

    file: Any
    filename: Optional[str]
    num_processes_accessing: int = 1
    file_id: int = -1

    def close_by_process(self) -> bool:
        """Record that one process no longer uses the file.

        When the last user goes away the underlying file is closed and
        released. Returns True if that happened.
        """
        if self.num_processes_accessing <= 0:
            return False
        self.num_processes_accessing -= 1
        if self.num_processes_accessing:
            return False
        close = getattr(self.file, "close", None)
        if callable(close):
            close()
        self.file = None
        self.filename = None
        return True


@dataclass
class UserOpenFile:
    """A process's handle on a system open file, with its own offset."""

    index_in_sys_open_file_list: int
    offset: int = 0
    file_name: Optional[str] = None


class SysOpenFileManager:
    """Table of all files currently open in the system."""

    def __init__(self, capacity: int = MAX_SYS_OPEN_FILES) -> None:
        self._capacity = capacity
        self._slots = Bitmap(capacity)
        self._files: list[Optional[SysOpenFile]] = [None] * capacity

    def add_file(self, file: SysOpenFile) -> int:
        """Store ``file`` in the first free slot and return the slot index."""
        try:
            index = self._slots.find()
        except BitmapFullError as exc:
            raise TooManyOpenFilesError("no more room for open system files") from exc
        self._files[index] = file
        return index

    def find(self, filename: str) -> Optional[tuple[int, SysOpenFile]]:
        """Return ``(index, file)`` for an open file named ``filename``, or None."""
        for index in range(FIRST_SEARCHABLE_INDEX, self._capacity):
            if self._slots.test(index):
                entry = self._files[index]
                if entry is not None and entry.filename == filename:
                    return index, entry
        return None

    def get(self, index: int) -> Optional[SysOpenFile]:
        """Return the open file in slot ``index``, or None if the slot is free."""
        if self._slots.test(index):
            return self._files[index]
        return None