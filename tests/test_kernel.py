import threading
import time

import pytest

from pagekernel.files import FileSystemError, MemoryFileSystem
from pagekernel.kernel import Kernel
from pagekernel.pcb import ProcessStatus
from pagekernel.usermem import read_user, write_user

CODE = b"hello world" + bytes(117)


def _pattern(n):
    return bytes(ord("a") + (i % 26) for i in range(n))


def test_halt_program_writes_big_file_and_exits():
    kernel = Kernel()
    space = kernel.start_process(CODE)
    pid = space.pcb.pid
    kernel.create("bigf2")
    file_id = kernel.open(space, "bigf2")
    assert file_id == 2
    buffer = _pattern(512)
    for _ in range(80):
        assert kernel.write(space, file_id, buffer) == 512
    kernel.close(space, file_id)
    kernel.exit(space, 10)
    contents = kernel.file_system.open("bigf2").read_at(100000, 0)
    assert len(contents) == 512 * 80
    assert contents == buffer * 80
    assert kernel.processes.get_status(pid) == -1
    assert not space.is_valid


def test_testvm_program_copies_buffer_and_writes():
    kernel = Kernel()
    size = 1024 * 9
    space = kernel.start_process(CODE, uninit_size=2 * size)
    base = len(CODE)
    kernel.create("aaaa")
    file_id = kernel.open(space, "aaaa")
    write_user(kernel.vm, space, base, _pattern(size))
    copied = read_user(kernel.vm, space, base, size)
    write_user(kernel.vm, space, base + size, copied)
    first = read_user(kernel.vm, space, base + size, 4)
    kernel.write(space, file_id, first)
    kernel.write(space, 1, b"Done\n")
    kernel.close(space, file_id)
    assert kernel.file_system.open("aaaa").read_at(100, 0) == b"abcd"
    assert bytes(kernel.console_output) == b"Done\n"


def test_vm_test_program_pages_through_200_pages():
    kernel = Kernel(num_phys_pages=100, page_size=128)
    space = kernel.start_process(bytes(128), uninit_size=128 * 100 * 2)
    base = 128
    for i in range(200):
        write_user(kernel.vm, space, base + i * 128, i.to_bytes(4, "little"))
    kernel.write(space, 1, b"Attempted to write to 200 pages.\n")
    values = [
        int.from_bytes(read_user(kernel.vm, space, base + i * 128, 4), "little")
        for i in range(200)
    ]
    kernel.write(space, 1, b"Attempted to read from 200 pages.\n")
    assert values == list(range(200))
    resident = sum(1 for entry in space.page_table if entry.valid)
    assert resident <= 100
    assert bytes(kernel.console_output) == (
        b"Attempted to write to 200 pages.\nAttempted to read from 200 pages.\n"
    )


def test_start_process_assigns_pids_in_order():
    kernel = Kernel()
    first = kernel.start_process(CODE)
    second = kernel.start_process(CODE)
    assert (first.pcb.pid, second.pcb.pid) == (0, 1)
    assert first.pcb.parent_pid == -1
    assert first.pcb.status == ProcessStatus.RUNNING


def test_page_fault_loads_page_and_translates():
    kernel = Kernel(page_size=128)
    space = kernel.start_process(CODE)
    assert kernel.page_fault(space, 0) == 0
    assert space.translate(5) == 5
    assert kernel.page_fault(space, 300) == 1
    assert space.translate(300) == 128 + 44
    assert kernel.vm.memory[:11] == b"hello world"


def test_fork_copies_memory_and_sets_parent():
    kernel = Kernel()
    parent = kernel.start_process(CODE)
    child = kernel.fork(parent)
    assert child.pcb.pid == 1
    assert child.pcb.parent_pid == parent.pcb.pid
    assert child.num_pages == parent.num_pages
    assert read_user(kernel.vm, child, 0, 5) == b"hello"
    write_user(kernel.vm, child, 0, b"HELLO")
    assert read_user(kernel.vm, parent, 0, 5) == b"hello"
    assert read_user(kernel.vm, child, 0, 5) == b"HELLO"


def test_exit_frees_pid_and_memory():
    kernel = Kernel()
    parent = kernel.start_process(CODE)
    child = kernel.fork(parent)
    child_pid = child.pcb.pid
    assert not kernel.processes.all_finished()
    kernel.exit(child, 3)
    assert kernel.processes.all_finished()
    assert kernel.processes.get_status(child_pid) == -1
    with pytest.raises(ValueError):
        kernel.open(child, "anything")


def test_join_on_finished_process_returns_minus_one():
    kernel = Kernel()
    parent = kernel.start_process(CODE)
    child = kernel.fork(parent)
    pid = child.pcb.pid
    kernel.exit(child, 1)
    assert kernel.join(parent, pid) == -1
    assert parent.pcb.status == ProcessStatus.RUNNING


def test_join_waits_for_exit_and_returns_status():
    kernel = Kernel()
    parent = kernel.start_process(CODE)
    child = kernel.fork(parent)
    child_pid = child.pcb.pid
    result = {}

    def joiner():
        result["status"] = kernel.join(parent, child_pid)

    thread = threading.Thread(target=joiner)
    thread.start()
    deadline = time.monotonic() + 5
    while parent.pcb.status != ProcessStatus.BLOCKED and time.monotonic() < deadline:
        time.sleep(0.01)
    time.sleep(0.1)
    kernel.exit(child, 7)
    thread.join(5)
    assert result["status"] == 7
    assert parent.pcb.status == ProcessStatus.RUNNING
    assert kernel.processes.get_status(child_pid) == -1


def test_open_missing_file_raises():
    kernel = Kernel()
    space = kernel.start_process(CODE)
    with pytest.raises(FileSystemError):
        kernel.open(space, "missing")


def test_open_shares_system_file_between_processes():
    kernel = Kernel()
    first = kernel.start_process(CODE)
    second = kernel.start_process(CODE)
    for name in ("a", "b", "c"):
        kernel.create(name)
        kernel.open(first, name)
    kernel.open(second, "c")
    assert kernel.sys_open_files.get(2).num_processes_accessing == 2
    assert kernel.sys_open_files.get(2).filename == "c"


def test_read_follows_offset_after_write():
    fs = MemoryFileSystem()
    kernel = Kernel(file_system=fs)
    space = kernel.start_process(CODE)
    kernel.create("data")
    writer = kernel.open(space, "data")
    kernel.write(space, writer, b"0123456789")
    reader = kernel.open(space, "data")
    assert kernel.read(space, reader, 4) == b"0123"
    assert kernel.read(space, reader, 100) == b"456789"
    assert kernel.read(space, reader, 5) == b""


def test_read_and_write_unknown_file_id():
    kernel = Kernel()
    space = kernel.start_process(CODE)
    assert kernel.read(space, 9, 10) == b""
    assert kernel.write(space, 9, b"abc") == 0


def test_console_read_consumes_input():
    kernel = Kernel()
    space = kernel.start_process(CODE)
    kernel.console_input.extend(b"xyz")
    assert kernel.read(space, 0, 2) == b"xy"
    assert bytes(kernel.console_input) == b"z"
    assert kernel.read(space, 0, 5) == b"z"


def test_console_write_stops_at_nul():
    kernel = Kernel()
    space = kernel.start_process(CODE)
    assert kernel.write(space, 1, b"ab\0cd") == 2
    assert bytes(kernel.console_output) == b"ab"


def test_close_releases_file_id_and_system_file():
    kernel = Kernel()
    space = kernel.start_process(CODE)
    kernel.create("f")
    file_id = kernel.open(space, "f")
    sys_index = space.pcb.get_file(file_id).index_in_sys_open_file_list
    kernel.close(space, file_id)
    assert space.pcb.get_file(file_id) is None
    assert kernel.sys_open_files.get(sys_index).num_processes_accessing == 0
    assert kernel.open(space, "f") == file_id