"""Address spaces of user programs, backed by swap and paged in on demand."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .pcb import PCB
from .vm import VirtualMemoryManager

USER_STACK_SIZE = 2048
# Gap left below the top of the address space for the initial stack pointer.
STACK_MARGIN = 16


@dataclass(eq=False)
class PageTableEntry:
    """Translation of one virtual page to a physical frame."""

    virtual_page: int
    physical_page: int = -1
    valid: bool = False
    use: bool = False
    dirty: bool = False
    read_only: bool = False


class AddrSpace:
    """The virtual memory of one process.

    Every page has a swap sector reserved for it when the space is
    created; pages reach physical memory only when a fault brings them in.
    """

    def __init__(self, vm: VirtualMemoryManager, pcb: Optional[PCB], num_pages: int) -> None:
        if num_pages < 0:
            raise ValueError(f"page count must be non-negative, got {num_pages}")
        self.vm = vm
        self.pcb = pcb
        self.num_pages = num_pages
        self.page_table = [PageTableEntry(virtual_page=i) for i in range(num_pages)]
        self.location_on_disk: list[int] = []
        blank = bytes(vm.page_size)
        try:
            for _ in range(num_pages):
                location = vm.alloc_swap_sector()
                self.location_on_disk.append(location)
                vm.write_to_swap(blank, location)
        except Exception:
            self._free_swap()
            raise

    def _free_swap(self) -> None:
        for location in self.location_on_disk:
            self.vm._swap_map.clear(location // self.vm.page_size)
        self.location_on_disk = []

    @classmethod
    def load(
        cls,
        vm: VirtualMemoryManager,
        pcb: Optional[PCB],
        code: bytes,
        init_data: bytes = b"",
        uninit_size: int = 0,
    ) -> "AddrSpace":
        """Create a space for a program and copy its segments into swap.

        The code segment starts at virtual address 0 and the initialized
        data follows it directly; room is added for uninitialized data and
        the user stack.
        """
        if uninit_size < 0:
            raise ValueError(f"uninitialized data size must be non-negative, got {uninit_size}")
        size = len(code) + len(init_data) + uninit_size + USER_STACK_SIZE
        num_pages = -(-size // vm.page_size)
        space = cls(vm, pcb, num_pages)
        if code:
            space.read_file(0, code)
        if init_data:
            space.read_file(len(code), init_data)
        return space

    def copy(self, pcb: Optional[PCB]) -> "AddrSpace":
        """Return a new space for ``pcb`` whose swap holds a copy of this one's."""
        other = AddrSpace(self.vm, pcb, self.num_pages)
        for to, source in zip(other.location_on_disk, self.location_on_disk):
            self.vm.copy_swap_sector(to, source)
        return other

    @property
    def is_valid(self) -> bool:
        """True while the space belongs to a process."""
        return self.pcb is not None

    def translate(self, virtual_address: int) -> int:
        """Return the physical address of ``virtual_address``.

        Raises IndexError for an address outside the space and ValueError
        for a page that is not in memory.
        """
        page_size = self.vm.page_size
        if virtual_address < 0 or virtual_address // page_size >= self.num_pages:
            raise IndexError(
                f"virtual address {virtual_address} outside {self.num_pages} pages"
            )
        index, offset = divmod(virtual_address, page_size)
        entry = self.page_table[index]
        if not entry.valid:
            raise ValueError(f"page table index {index} is not valid")
        frame = entry.physical_page
        if not 0 <= frame < self.vm.num_phys_pages:
            raise ValueError(
                f"frame {frame} outside {self.vm.num_phys_pages} physical pages"
            )
        return frame * page_size + offset

    def read_file(self, virt_addr: int, data: bytes) -> int:
        """Store ``data`` at ``virt_addr`` in the space's swap; return its length."""
        page_size = self.vm.page_size
        if virt_addr < 0 or virt_addr + len(data) > self.num_pages * page_size:
            raise IndexError(
                f"{len(data)} bytes at {virt_addr} do not fit in {self.num_pages} pages"
            )
        view = memoryview(bytes(data))
        while view:
            index, offset = divmod(virt_addr, page_size)
            count = min(len(view), page_size - offset)
            self.vm.write_to_swap(bytes(view[:count]), self.location_on_disk[index] + offset)
            view = view[count:]
            virt_addr += count
        return len(data)

    def initial_registers(self) -> dict[str, int]:
        """Return the register values a program starts with."""
        return {
            "pc": 0,
            "next_pc": 4,
            "stack": self.num_pages * self.vm.page_size - STACK_MARGIN,
        }

    def page_table_entry(self, index: int) -> PageTableEntry:
        """Return the page table entry for virtual page ``index``."""
        return self.page_table[index]

    def page_index(self, entry: PageTableEntry) -> int:
        """Return the virtual page number of ``entry``; ValueError if not ours."""
        for index, candidate in enumerate(self.page_table):
            if candidate is entry:
                return index
        raise ValueError("entry does not belong to this address space")

    def release(self) -> None:
        """Give back the frames and swap held by the space, once."""
        if not self.is_valid:
            return
        self.vm.release_pages(self)
        self.location_on_disk = []
        self.page_table = []
        self.num_pages = 0
        self.pcb = None