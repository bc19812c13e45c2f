# pagekernel

A pure-Python model of the bookkeeping inside a small operating-system
kernel: resource bitmaps, process control blocks, open-file tables, a
process table with join/exit, and demand-paged virtual memory backed by a
swap store with second-chance page replacement.

It has no dependencies outside the standard library.

## Modules

- `pagekernel.bitmap` — `Bitmap`, a fixed number of bits with `mark`,
  `clear`, `test`, `find` (sets and returns the lowest clear bit, raising
  `BitmapFullError` when none is left), `num_clear`, `set_bits`, and
  `to_bytes` / `load_bytes` for a 32-bit little-endian word layout.
- `pagekernel.memory` — `MemoryManager`, which hands out physical frames
  (`get_page`, `clear_page`, `num_free_pages`); raises `OutOfMemoryError`
  when none is free.
- `pagekernel.openfiles` — the system-wide table `SysOpenFileManager`
  (`add_file`, `find` by name, `get` by index), its entries `SysOpenFile`
  (with a count of processes using the file; `close_by_process` closes the
  file when the last one lets go) and per-process handles `UserOpenFile`
  with their own offset. A full table raises `TooManyOpenFilesError`.
- `pagekernel.pcb` — `PCB`, the process control block, holding the PID, the
  parent PID, a `status` and up to 32 file ids (0 and 1 are reserved for
  console input and output); `ProcessStatus` names the states.
- `pagekernel.processes` — `ProcessManager`: PID allocation
  (`allocate_pid`, `clear_pid`), registration (`add_process`), status
  (`broadcast`, `get_status`, `all_finished`) and `join`, which waits on a
  `threading.Condition` until the process broadcasts or a timeout passes.
  A PID is not reused while a joiner still holds it.
- `pagekernel.vm` — `VirtualMemoryManager`: physical memory as a
  `bytearray`, a swap store of page-sized sectors (`alloc_swap_sector`,
  `write_to_swap`, `read_from_swap`, `copy_swap_sector`), page-fault
  service with second-chance replacement (`swap_page_in`, which writes a
  dirty victim back to swap first) and `release_pages`. `FrameInfo` records
  which space and page occupy each frame; `SwapFullError` is raised when
  swap runs out.
- `pagekernel.addrspace` — `AddrSpace` and `PageTableEntry`: a linear page
  table in which every page has a swap sector from the start. `AddrSpace.load`
  places a code segment at address 0 followed by initialized data, adding
  room for uninitialized data and a 2048-byte stack; `copy` duplicates the
  swap contents for a child; `translate` maps a resident address to a
  physical one; `initial_registers` gives the starting `pc`, `next_pc` and
  `stack` values; `release` frees frames and swap.
- `pagekernel.usermem` — `read_user`, `write_user` and `read_string` move
  bytes between the kernel and a process's memory page by page, faulting
  non-resident pages in and setting the use and dirty bits.
- `pagekernel.files` — `MemoryFileSystem` (`create`, `open`, `remove`) and
  `MemoryFile` (`read_at`, `write_at`, `close`), an in-memory file system;
  a missing file raises `FileSystemError`.
- `pagekernel.kernel` — `Kernel`, which ties these together and offers
  `start_process`, `fork`, `exit`, `join`, `page_fault`, `create`, `open`,
  `read`, `write` and `close`. Console output is collected in
  `console_output`; console input is taken from `console_input`.
  `Syscall` lists the system call codes.

## Installation

```
pip install .
```

## Example

```python
from pagekernel.files import MemoryFileSystem
from pagekernel.kernel import Kernel
from pagekernel.usermem import read_user, write_user

kernel = Kernel(MemoryFileSystem(), num_phys_pages=32, page_size=128)
space = kernel.start_process(code=b"\x00" * 256, init_data=b"hello")

print(read_user(kernel.vm, space, 256, 5))   # b"hello", faulted in from swap
write_user(kernel.vm, space, 0, b"hi")

kernel.create("notes")
fd = kernel.open(space, "notes")
kernel.write(space, fd, b"some text")
kernel.close(space, fd)

fd = kernel.open(space, "notes")
print(kernel.read(space, fd, 4))             # b"some"

kernel.write(space, 1, b"Done\n")
print(bytes(kernel.console_output))          # b"Done\n"
kernel.exit(space, 0)
```

## What it does not do

There is no processor: programs are byte images whose segments are placed
in memory, but no instruction is ever executed, and the `Syscall` codes
are not dispatched from registers. The kernel has no scheduler and no
threads of its own, and it offers no exec, yield or halt; `Kernel.join`
returns -1 at once for a PID that is not live and otherwise blocks until
another thread calls `exit` for that process. Files live only in memory
and the console is a pair of byte buffers. There is no command-line tool.

## Running the tests

```
pip install .[test]
pytest
```