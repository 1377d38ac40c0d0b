import re

import pytest

from dirserve.access import AccessPatterns, compilePattern, matches

HIDE = "/[.][^/]+/?$"


def test_empty_patterns_never_match() -> None:
    patterns = AccessPatterns.Make("", "", "")
    assert patterns == AccessPatterns()
    assert not patterns.isHidden("/.git")
    assert not patterns.isDenied("/secret")
    assert not patterns.isIndex("/index.html")


def test_matches_anywhere_in_the_path() -> None:
    assert matches(re.compile("secret"), "/docs/secret/file")
    assert not matches(re.compile("^secret"), "/docs/secret/file")
    assert not matches(None, "/docs")


@pytest.mark.parametrize(
    "path,hidden",
    [
        ("/.git", True),
        ("/.git/", True),
        ("/docs/.hidden", True),
        ("/docs/a.txt", False),
        ("/.git/config", False),
        ("/a.b", False),
    ],
)
def test_default_hide_pattern(path: str, hidden: bool) -> None:
    assert AccessPatterns.Make(hide=HIDE).isHidden(path) is hidden


def test_denied_paths_are_hidden() -> None:
    patterns = AccessPatterns.Make(hide=HIDE, deny="/private(/|$)")
    assert patterns.isDenied("/private")
    assert patterns.isHidden("/private")
    assert patterns.isDenied("/private/x.txt")
    assert patterns.isHidden("/.env")
    assert not patterns.isDenied("/.env")


def test_index_pattern() -> None:
    patterns = AccessPatterns.Make(index="/index[.]html$")
    assert patterns.isIndex("/b/index.html")
    assert not patterns.isIndex("/b/index.html.bak")
    assert not patterns.isHidden("/b/index.html")


def test_invalid_pattern() -> None:
    assert compilePattern(None) is None
    with pytest.raises(re.error):
        compilePattern("[")
