import pytest

from dirserve import paths


@pytest.mark.parametrize(
    "path,expected",
    [
        ("", "/"),
        ("/", "/"),
        ("/a/./b", "/a/b"),
        ("/a/../b/", "/b/"),
        ("//a//b//", "/a/b/"),
        ("/..", "/"),
        ("/../../a", "/a"),
        ("/a/..", "/"),
        ("/a/b/../..", "/"),
        ("/a/b/../../", "/"),
    ],
)
def test_normalize(path: str, expected: str) -> None:
    assert paths.normalize(path) == expected
    assert paths.normalize(expected) == expected


def test_is_directory_path() -> None:
    assert paths.isDirectoryPath("/")
    assert paths.isDirectoryPath("/docs/")
    assert not paths.isDirectoryPath("/docs")


def test_base() -> None:
    assert paths.base("") == "."
    assert paths.base("/") == "/"
    assert paths.base("/a/b/") == "b"
    assert paths.base("/a/b") == "b"


def test_fs_name() -> None:
    assert paths.fsName("/") == "."
    assert paths.fsName("/a.txt") == "a.txt"
    assert paths.fsName("/a/b/") == "a/b"


def test_join() -> None:
    assert paths.join("/", "a") == "/a"
    assert paths.join("/docs/", "x") == "/docs/x"
    assert paths.join("/docs", "x") == "/docs/x"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("a.txt", "a.txt"),
        ("docs/", "docs/"),
        ("a b", "a%20b"),
        ("100%", "100%25"),
        ("#x?", "%23x%3F"),
        ("é", "%C3%A9"),
        ("a:b", "./a:b"),
        ("x/a:b", "x/a:b"),
        ("bad\udcff.txt", "bad%FF.txt"),
    ],
)
def test_href(name: str, expected: str) -> None:
    assert paths.href(name) == expected


def test_redirection() -> None:
    assert paths.redirection("/docs", True) == "docs/"
    assert paths.redirection("/docs/readme.md/", False) == "../readme.md"
    assert paths.redirection("/a:b", True) == "./a:b/"
    assert paths.redirection("/with space/", False) == "../with%20space"


def test_breadcrumbs_root() -> None:
    assert paths.breadcrumbs("/") == [(".", "/")]


def test_breadcrumbs_directory() -> None:
    assert paths.breadcrumbs("/a/b/") == [
        ("./../..", "/"),
        ("./..", "a/"),
        (".", "b/"),
    ]


def test_breadcrumbs_file() -> None:
    assert paths.breadcrumbs("/docs/readme.md") == [
        ("./..", "/"),
        (".", "docs/"),
        ("readme.md", "readme.md"),
    ]


def test_printable() -> None:
    assert paths.printable("é.txt") == "é.txt"
    assert paths.printable("bad\udcff.txt") == "bad\ufffd.txt"


def test_breadcrumbs_non_utf8() -> None:
    assert paths.breadcrumbs("/bad\udcff/x\udcfe") == [
        ("./..", "/"),
        (".", "bad\ufffd/"),
        ("x%FE", "x\ufffd"),
    ]
