"""A simple file system held in memory."""

from __future__ import annotations

from typing import Optional


class FileSystemError(Exception):
    """Raised when a file operation names a file that does not exist."""


class MemoryFile:
    """An open handle on a file's contents; handles on one file share data."""

    def __init__(self, data: Optional[bytearray] = None, name: str = "") -> None:
        self._data = data if data is not None else bytearray()
        self.name = name
        self._closed = False

    def __len__(self) -> int:
        return len(self._data)

    @property
    def closed(self) -> bool:
        """True once the handle has been closed."""
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise ValueError(f"I/O operation on closed file: {self.name}")

    def read_at(self, size: int, position: int) -> bytes:
        """Return up to ``size`` bytes starting at ``position``."""
        self._check_open()
        if size < 0 or position < 0:
            raise ValueError("size and position must be non-negative")
        return bytes(self._data[position:position + size])

    def write_at(self, data: bytes, position: int) -> int:
        """Write ``data`` at ``position``, growing the file; return bytes written."""
        self._check_open()
        if position < 0:
            raise ValueError(f"position must be non-negative, got {position}")
        if position > len(self._data):
            self._data.extend(bytes(position - len(self._data)))
        self._data[position:position + len(data)] = data
        return len(data)

    def close(self) -> None:
        """Close the handle; the contents stay with the file system."""
        self._closed = True


class MemoryFileSystem:
    """Named files stored as byte arrays."""

    def __init__(self) -> None:
        self._files: dict[str, bytearray] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._files

    def create(self, name: str, size: int = 0) -> None:
        """Create ``name`` holding ``size`` zero bytes, replacing any existing file."""
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        self._files[name] = bytearray(size)

    def open(self, name: str) -> MemoryFile:
        """Return a new handle on ``name``."""
        try:
            return MemoryFile(self._files[name], name)
        except KeyError:
            raise FileSystemError(f"no such file: {name}") from None

    def remove(self, name: str) -> None:
        """Delete ``name``; handles already open keep their data."""
        try:
            del self._files[name]
        except KeyError:
            raise FileSystemError(f"no such file: {name}") from None