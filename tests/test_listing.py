from __future__ import annotations

import os
from pathlib import Path

from dirserve.access import AccessPatterns
from dirserve.fs import DirFS, DirectoryFile
from dirserve.listing import (
    IndexEntry,
    ListingEntry,
    Ordering,
    enumerateDirectory,
    sortEntries,
)

ENTRIES = [
    ListingEntry("b.txt", 20, 300.0),
    ListingEntry("a.txt", 20, 100.0),
    ListingEntry("c/", 0, 100.0),
    ListingEntry("d.txt", 5, 200.5),
]


def enumerate_root(root: Path, path: str = "/", **patterns: str) -> list[ListingEntry] | IndexEntry:
    fsys = DirFS(str(root))
    name = path.strip("/") or "."
    with fsys.open(name) as d:
        assert isinstance(d, DirectoryFile)
        return enumerateDirectory(fsys, d, path, AccessPatterns.Make(**patterns))


def test_entry() -> None:
    entry = ListingEntry("c/", 0, 100.9)
    assert entry.isDirectory
    assert entry.date == 100
    assert entry.asPrimitive() == {"name": "c/", "size": 0, "date": 100}
    assert not ListingEntry("c", 0, 0).isDirectory
    assert ListingEntry("bad\udcff", 3, 0).asPrimitive() == {
        "name": "bad\ufffd",
        "size": 3,
        "date": 0,
        "href": "bad%FF",
    }


def test_enumerate_sorted_with_directory_slashes(root: Path) -> None:
    entries = enumerate_root(root, hide="/[.]")
    assert isinstance(entries, list)
    assert [_.name for _ in entries] == ["a.txt", "b/", "docs/", "secret.txt"]
    assert entries[0].size == 10
    assert entries[1].size == 0


def test_enumerate_nested(root: Path) -> None:
    entries = enumerate_root(root, "/docs/", deny="/docs/readme")
    assert entries == []


def test_enumerate_skips_broken_links(root: Path) -> None:
    os.symlink("nowhere", root / "broken")
    os.symlink("a.txt", root / "alias.txt")
    entries = enumerate_root(root)
    assert isinstance(entries, list)
    names = [_.name for _ in entries]
    assert "broken" not in names
    assert "alias.txt" in names
    # Links are described by their target
    assert next(_ for _ in entries if _.name == "alias.txt").size == 10


def test_enumerate_index(root: Path) -> None:
    res = enumerate_root(root, "/b/", index="/index[.]html$")
    assert isinstance(res, IndexEntry)
    assert res.path == "/b/index.html"
    assert res.name == "b/index.html"
    assert res.info.size == len(b"<p>index</p>")


def test_directories_are_never_index(root: Path) -> None:
    (root / "b" / "index.html.d").mkdir()
    res = enumerate_root(root, "/b/", index="/index[.]html")
    assert isinstance(res, IndexEntry)
    assert res.name == "b/index.html"
    (root / "b" / "index.html").unlink()
    res = enumerate_root(root, "/b/", index="/index[.]html")
    assert isinstance(res, list)
    assert [_.name for _ in res] == ["index.html.d/"]


def test_hidden_index_is_not_served(root: Path) -> None:
    res = enumerate_root(root, "/b/", index="/index[.]html$", hide="index")
    assert res == []


def test_sort_by_name() -> None:
    assert [_.name for _ in sortEntries(ENTRIES)] == ["a.txt", "b.txt", "c/", "d.txt"]
    assert [_.name for _ in sortEntries(ENTRIES, "name", -1)] == [
        "d.txt",
        "c/",
        "b.txt",
        "a.txt",
    ]


def test_sort_by_size_breaks_ties_by_name() -> None:
    assert [_.name for _ in sortEntries(ENTRIES, "size")] == [
        "c/",
        "d.txt",
        "a.txt",
        "b.txt",
    ]


def test_sort_by_date_uses_whole_seconds() -> None:
    assert [_.name for _ in sortEntries(ENTRIES, "date")] == [
        "a.txt",
        "c/",
        "d.txt",
        "b.txt",
    ]
    assert [_.name for _ in sortEntries(ENTRIES, "date", -1)][0] == "b.txt"


def test_ordering_clicks() -> None:
    ordering = Ordering()
    assert ordering.apply(ENTRIES) == ENTRIES
    ordering = ordering.click("size")
    assert ordering == Ordering("size", 1)
    ordering = ordering.click("size")
    assert ordering == Ordering("size", -1)
    assert ordering.apply(ENTRIES)[0].name == "b.txt"
    assert ordering.click("date") == Ordering("date", 1)
    assert ordering.click("size").click("size") == Ordering("size", -1)
