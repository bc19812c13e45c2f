"""Copying bytes between kernel buffers and a process's paged memory.

Every access goes through the page table; a page that is not resident is
faulted in through the virtual memory manager before it is touched.
"""

from __future__ import annotations

from .addrspace import AddrSpace
from .vm import VirtualMemoryManager

MAX_FILENAME_LEN = 128


def _resident_address(vm: VirtualMemoryManager, space: AddrSpace, virt_addr: int) -> int:
    """Return the physical address of ``virt_addr``, paging it in if needed."""
    while True:
        try:
            return space.translate(virt_addr)
        except ValueError:
            vm.swap_page_in(space, virt_addr)


def _chunks(vm: VirtualMemoryManager, space: AddrSpace, virt_addr: int, size: int, writing: bool):
    """Yield ``(physical_address, count)`` pieces covering the range, page by page."""
    if size < 0:
        raise ValueError(f"size must be non-negative, got {size}")
    page_size = vm.page_size
    while size > 0:
        phys = _resident_address(vm, space, virt_addr)
        entry = space.page_table_entry(virt_addr // page_size)
        entry.use = True
        if writing:
            entry.dirty = True
        count = min(page_size - phys % page_size, size)
        yield phys, count
        size -= count
        virt_addr += count


def read_user(vm: VirtualMemoryManager, space: AddrSpace, virt_addr: int, size: int) -> bytes:
    """Return ``size`` bytes of ``space`` starting at ``virt_addr``."""
    out = bytearray()
    for phys, count in _chunks(vm, space, virt_addr, size, writing=False):
        out += vm.memory[phys:phys + count]
    return bytes(out)


def write_user(vm: VirtualMemoryManager, space: AddrSpace, virt_addr: int, data: bytes) -> int:
    """Store ``data`` in ``space`` at ``virt_addr``; return the number of bytes copied."""
    view = memoryview(bytes(data))
    copied = 0
    for phys, count in _chunks(vm, space, virt_addr, len(view), writing=True):
        vm.memory[phys:phys + count] = view[copied:copied + count]
        copied += count
    return copied


def read_string(
    vm: VirtualMemoryManager,
    space: AddrSpace,
    virt_addr: int,
    max_len: int = MAX_FILENAME_LEN,
) -> str:
    """Read a NUL-terminated string from ``space`` at ``virt_addr``.

    Raises ValueError if no terminator appears within ``max_len`` bytes.
    """
    out = bytearray()
    for offset in range(max_len):
        byte = read_user(vm, space, virt_addr + offset, 1)[0]
        if byte == 0:
            return out.decode("latin-1")
        out.append(byte)
    raise ValueError(f"string at {virt_addr} is longer than {max_len} bytes")