"""Process control blocks."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Optional, Union

from .bitmap import Bitmap, BitmapFullError
from .openfiles import TooManyOpenFilesError, UserOpenFile

MAX_NUM_FILES_OPEN = 32
CONSOLE_INPUT = 0
CONSOLE_OUTPUT = 1


class ProcessStatus(IntEnum):
    """Process states; an exited process holds its exit code instead."""

    GOOD = 0
    BAD = 1
    RUNNING = 2
    BLOCKED = 3


class PCB:
    """Everything the kernel keeps about one process."""

    def __init__(self, pid: int, parent_pid: int) -> None:
        self.pid = pid
        self.parent_pid = parent_pid
        self.status: Union[ProcessStatus, int] = ProcessStatus.GOOD
        self.process: Optional[Any] = None
        self._open = Bitmap(MAX_NUM_FILES_OPEN)
        self._open.mark(CONSOLE_INPUT)
        self._open.mark(CONSOLE_OUTPUT)
        self._files: list[Optional[UserOpenFile]] = [None] * MAX_NUM_FILES_OPEN

    def add_file(self, file: UserOpenFile) -> int:
        """Add ``file`` to the process's open files and return its file id."""
        try:
            file_id = self._open.find()
        except BitmapFullError as exc:
            raise TooManyOpenFilesError("no more room for open files") from exc
        self._files[file_id] = file
        return file_id

    def get_file(self, file_id: int) -> Optional[UserOpenFile]:
        """Return the open file with id ``file_id``, or None if it is not open."""
        if self._open.test(file_id):
            return self._files[file_id]
        return None

    def remove_file(self, file_id: int) -> None:
        """Forget the open file with id ``file_id``."""
        self._open.clear(file_id)
        self._files[file_id] = None