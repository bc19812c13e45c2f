"""System call services for user processes running on paged memory."""

from __future__ import annotations

from enum import IntEnum
from typing import Optional, Union

from .addrspace import AddrSpace
from .files import MemoryFileSystem
from .openfiles import SysOpenFile, SysOpenFileManager, UserOpenFile
from .pcb import CONSOLE_INPUT, CONSOLE_OUTPUT, PCB, ProcessStatus
from .processes import ProcessManager
from .vm import NUM_PHYS_PAGES, PAGE_SIZE, VirtualMemoryManager


class Syscall(IntEnum):
    """System call codes placed in register 2 by user programs."""

    HALT = 0
    EXIT = 1
    EXEC = 2
    JOIN = 3
    CREATE = 4
    OPEN = 5
    READ = 6
    WRITE = 7
    CLOSE = 8
    FORK = 9
    YIELD = 10


class Kernel:
    """Owns the process table, open files, paging and console of a machine.

    Console output is collected in ``console_output``; console input is
    taken from ``console_input``.
    """

    def __init__(
        self,
        file_system: Optional[MemoryFileSystem] = None,
        num_phys_pages: int = NUM_PHYS_PAGES,
        page_size: int = PAGE_SIZE,
    ) -> None:
        self.file_system = file_system if file_system is not None else MemoryFileSystem()
        self.vm = VirtualMemoryManager(num_phys_pages, page_size)
        self.processes = ProcessManager()
        self.sys_open_files = SysOpenFileManager()
        self.console_input = bytearray()
        self.console_output = bytearray()
        self._exit_statuses: dict[int, int] = {}

    @staticmethod
    def _pcb(space: AddrSpace) -> PCB:
        if space.pcb is None:
            raise ValueError("address space no longer belongs to a process")
        return space.pcb

    def _new_process(self, parent_pid: int) -> PCB:
        pid = self.processes.allocate_pid()
        self._exit_statuses.pop(pid, None)
        pcb = PCB(pid, parent_pid)
        pcb.status = ProcessStatus.RUNNING
        self.processes.add_process(pcb, pid)
        return pcb

    def start_process(
        self, code: bytes, init_data: bytes = b"", uninit_size: int = 0
    ) -> AddrSpace:
        """Create a process with no parent running the given program image."""
        pcb = self._new_process(-1)
        try:
            return AddrSpace.load(self.vm, pcb, code, init_data, uninit_size)
        except Exception:
            self.processes.clear_pid(pcb.pid)
            raise

    def fork(self, space: AddrSpace) -> AddrSpace:
        """Create a child of the process owning ``space`` with a copy of its memory."""
        parent = self._pcb(space)
        pcb = self._new_process(parent.pid)
        try:
            return space.copy(pcb)
        except Exception:
            self.processes.clear_pid(pcb.pid)
            raise

    def exit(self, space: AddrSpace, status: int) -> None:
        """Finish the process owning ``space`` with exit code ``status``."""
        pcb = self._pcb(space)
        pid = pcb.pid
        pcb.status = status
        self._exit_statuses[pid] = status
        self.processes.broadcast(pid)
        space.release()
        self.processes.clear_pid(pid)

    def join(self, space: AddrSpace, pid: int) -> Union[ProcessStatus, int]:
        """Wait for process ``pid`` to exit and return its exit code.

        Returns -1 at once if ``pid`` is not a live process.
        """
        pcb = self._pcb(space)
        pcb.status = ProcessStatus.BLOCKED
        status = self.processes.get_status(pid)
        if status < 0:
            pcb.status = ProcessStatus.RUNNING
            return status
        self.processes.join(pid)
        pcb.status = ProcessStatus.RUNNING
        if pid in self._exit_statuses:
            return self._exit_statuses[pid]
        return self.processes.get_status(pid)

    def page_fault(self, space: AddrSpace, virt_addr: int) -> int:
        """Bring the page holding ``virt_addr`` into memory; return its frame."""
        return self.vm.swap_page_in(space, virt_addr)

    def create(self, filename: str) -> None:
        """Create an empty file named ``filename``."""
        self.file_system.create(filename, 0)

    def open(self, space: AddrSpace, filename: str) -> int:
        """Open ``filename`` for the process owning ``space``; return its file id."""
        pcb = self._pcb(space)
        found = self.sys_open_files.find(filename)
        if found is None:
            handle = self.file_system.open(filename)
            index = self.sys_open_files.add_file(SysOpenFile(handle, filename))
        else:
            index, sys_file = found
            sys_file.num_processes_accessing += 1
        return pcb.add_file(UserOpenFile(index, 0, filename))

    def read(self, space: AddrSpace, file_id: int, size: int) -> bytes:
        """Read up to ``size`` bytes from an open file or the console."""
        if size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        if file_id == CONSOLE_INPUT:
            count = min(size, len(self.console_input))
            data = bytes(self.console_input[:count])
            del self.console_input[:count]
            return data
        user_file = self._pcb(space).get_file(file_id)
        if user_file is None:
            return b""
        sys_file = self.sys_open_files.get(user_file.index_in_sys_open_file_list)
        if sys_file is None or sys_file.file is None:
            return b""
        data = sys_file.file.read_at(size, user_file.offset)
        user_file.offset += len(data)
        return data

    def write(self, space: AddrSpace, file_id: int, data: bytes) -> int:
        """Write ``data`` to an open file or the console; return bytes written.

        Console output stops at the first NUL byte.
        """
        data = bytes(data)
        if file_id == CONSOLE_OUTPUT:
            text = data.split(b"\0", 1)[0]
            self.console_output += text
            return len(text)
        user_file = self._pcb(space).get_file(file_id)
        if user_file is None:
            return 0
        sys_file = self.sys_open_files.get(user_file.index_in_sys_open_file_list)
        if sys_file is None or sys_file.file is None:
            return 0
        written = sys_file.file.write_at(data, user_file.offset)
        user_file.offset += written
        return written

    def close(self, space: AddrSpace, file_id: int) -> None:
        """Close file ``file_id`` of the process owning ``space``."""
        pcb = self._pcb(space)
        user_file = pcb.get_file(file_id)
        if user_file is None:
            return
        sys_file = self.sys_open_files.get(user_file.index_in_sys_open_file_list)
        if sys_file is not None:
            sys_file.close_by_process()
        pcb.remove_file(file_id)