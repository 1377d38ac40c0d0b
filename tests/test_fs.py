"""
Tests of the rooted filesystem, through the capability helpers.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from dirserve import fs
from dirserve.fs import (
    Capability,
    DirFS,
    DirectoryFile,
    ExistError,
    InvalidError,
    NotExistError,
    RegularFile,
    require,
    validPath,
)


@pytest.mark.parametrize(
    "name,valid",
    [
        (".", True),
        ("a", True),
        ("a/b.txt", True),
        ("", False),
        ("/a", False),
        ("a/", False),
        ("a//b", False),
        ("./a", False),
        ("a/..", False),
        ("..", False),
        ("a\x00b", False),
    ],
)
def test_valid_path(name: str, valid: bool) -> None:
    assert validPath(name) is valid


def test_lifecycle(tmp_path: Path) -> None:
    root = tmp_path / "root"
    root.mkdir()
    fsys = DirFS(str(root))

    with pytest.raises(NotExistError):
        fsys.open("noexist.txt")
    with pytest.raises(NotExistError):
        fs.stat(fsys, "noexist.txt")

    with fsys.openFile("test.txt", os.O_WRONLY | os.O_CREAT, 0o644) as f:
        assert isinstance(f, RegularFile)
        assert f.write(b"hello world") == 11

    info = fs.stat(fsys, "test.txt")
    assert info.name == "test.txt"
    assert info.size == 11
    assert info.isRegular and not info.isDirectory

    with fsys.open("test.txt") as f:
        assert isinstance(f, RegularFile)
        assert f.read() == b"hello world"
    assert f.isClosed

    fs.makeDir(fsys, "testdir", 0o775)
    assert fs.stat(fsys, "testdir").isDirectory
    with pytest.raises(ExistError):
        fs.makeDir(fsys, "testdir", 0o775)

    with pytest.raises(NotExistError):
        fs.rename(fsys, "noexist.txt", "whatever.txt")
    fs.rename(fsys, "test.txt", "new.test.txt")
    with pytest.raises(NotExistError):
        fs.stat(fsys, "test.txt")
    assert fs.stat(fsys, "new.test.txt").size == 11

    fs.writeFile(fsys, "testdir/foo", b"fizz buzz", 0o664)
    assert (root / "testdir" / "foo").read_bytes() == b"fizz buzz"
    assert [_.name for _ in fs.readDir(fsys, "testdir")] == ["foo"]

    fs.removeAll(fsys, ".")
    assert not root.exists()
    # Removing what's already gone is not an error
    fs.removeAll(fsys, "testdir")


def test_write_file_truncates(tmp_path: Path) -> None:
    fsys = DirFS(str(tmp_path))
    fs.writeFile(fsys, "a.txt", b"a longer content")
    fs.writeFile(fsys, "a.txt", b"short")
    assert (tmp_path / "a.txt").read_bytes() == b"short"


def test_invalid_names_are_rejected(tmp_path: Path) -> None:
    fsys = DirFS(str(tmp_path))
    for name in ("../outside", "/etc/passwd", "a/../../b"):
        with pytest.raises(InvalidError) as e:
            fsys.open(name)
        assert e.value.status == 400
    with pytest.raises(InvalidError):
        DirFS("").open(".")


def test_errors_use_logical_names(tmp_path: Path) -> None:
    with pytest.raises(NotExistError) as e:
        DirFS(str(tmp_path)).open("missing/file.txt")
    assert e.value.path == "missing/file.txt"
    assert e.value.status == 404
    assert str(tmp_path) not in str(e.value)


def test_open_through_a_file_is_not_found(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_bytes(b"")
    with pytest.raises(NotExistError):
        DirFS(str(tmp_path)).open("a.txt/b")


def test_directory_capabilities(tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    (tmp_path / "a.txt").write_bytes(b"a")
    os.symlink("sub", tmp_path / "link")
    fsys = DirFS(str(tmp_path))
    with fsys.open(".") as d:
        assert isinstance(d, DirectoryFile)
        entries = {_.name: _ for _ in require(d, Capability.Enumerate).readDir()}
    assert set(entries) == {"sub", "a.txt", "link"}
    assert entries["sub"].isDirectory
    assert entries["link"].isSymlink and not entries["link"].isDirectory
    assert fsys.stat("link").isDirectory
    assert fsys.lstat("link").isSymlink


def test_regular_files_cannot_be_enumerated(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_bytes(b"a")
    with DirFS(str(tmp_path)).open("a.txt") as f:
        with pytest.raises(InvalidError):
            require(f, Capability.Enumerate, "a.txt")
        # Files opened for reading can't be written either
        with pytest.raises(InvalidError):
            f.write(b"b")


def test_remove_all_keeps_symlink_targets(tmp_path: Path) -> None:
    root = tmp_path / "root"
    (root / "dir").mkdir(parents=True)
    kept = tmp_path / "kept"
    kept.mkdir()
    (kept / "file").write_bytes(b"")
    os.symlink(kept, root / "dir" / "link")
    fs.removeAll(DirFS(str(root)), "dir")
    assert not (root / "dir").exists()
    assert (kept / "file").exists()
