import pytest

from pagekernel.files import FileSystemError, MemoryFile, MemoryFileSystem


def test_created_file_is_empty():
    fs = MemoryFileSystem()
    fs.create("bigf2")
    assert len(fs.open("bigf2")) == 0


def test_create_with_size_is_zero_filled():
    fs = MemoryFileSystem()
    fs.create("SWAP", 64)
    assert fs.open("SWAP").read_at(64, 0) == bytes(64)


def test_write_then_read_round_trip():
    fs = MemoryFileSystem()
    fs.create("aaaa")
    f = fs.open("aaaa")
    data = b"abcd"
    assert f.write_at(data, 0) == len(data)
    assert f.read_at(len(data), 0) == data


def test_handles_share_contents():
    fs = MemoryFileSystem()
    fs.create("shared")
    first, second = fs.open("shared"), fs.open("shared")
    first.write_at(b"data", 0)
    assert second.read_at(4, 0) == b"data"


def test_read_past_end_is_short():
    f = MemoryFile(bytearray(b"abc"))
    assert f.read_at(10, 1) == b"bc"
    assert f.read_at(5, 3) == b""


def test_write_past_end_pads_with_zeros():
    f = MemoryFile()
    f.write_at(b"z", 3)
    assert f.read_at(4, 0) == b"\x00\x00\x00z"


def test_create_replaces_existing_file():
    fs = MemoryFileSystem()
    fs.create("f")
    fs.open("f").write_at(b"old", 0)
    fs.create("f")
    assert len(fs.open("f")) == 0


def test_open_missing_raises():
    with pytest.raises(FileSystemError):
        MemoryFileSystem().open("missing")


def test_remove_then_open_raises():
    fs = MemoryFileSystem()
    fs.create("gone")
    fs.remove("gone")
    assert "gone" not in fs
    with pytest.raises(FileSystemError):
        fs.open("gone")


def test_remove_missing_raises():
    with pytest.raises(FileSystemError):
        MemoryFileSystem().remove("missing")


def test_negative_position_rejected():
    f = MemoryFile()
    with pytest.raises(ValueError):
        f.write_at(b"x", -1)
    with pytest.raises(ValueError):
        f.read_at(1, -1)