from __future__ import annotations

import time
from datetime import datetime

import pytest

from dirserve.listing import ListingEntry
from dirserve.render import (
    formatSize,
    formatTime,
    renderError,
    renderRows,
    renderScript,
    script,
)


@pytest.mark.parametrize(
    "size,expected",
    [
        (0, "0B"),
        (1023, "1023B"),
        (1024, "1.0KiB"),
        (1536, "1.5KiB"),
        (1024 * 1024, "1.0MiB"),
        (int(77.8 * 1024 * 1024), "77.8MiB"),
        (1024**8, "1.0YiB"),
        (1024**9, "1024.0YiB"),
    ],
)
def test_format_size(size: int, expected: str) -> None:
    assert formatSize(size) == expected


def local(*args: int) -> float:
    return time.mktime(datetime(*args).timetuple())


def test_format_time_recent() -> None:
    now = local(2024, 3, 5, 20, 0)
    assert formatTime(local(2024, 3, 5, 13, 4), now) == "1:04 PM"
    assert formatTime(local(2024, 3, 5, 12, 30), now) == "12:30 PM"
    assert formatTime(local(2024, 3, 6, 0, 5), now) == "12:05 AM"
    assert formatTime(local(2024, 3, 5, 9, 15), now) == "9:15 AM"


def test_format_time_old() -> None:
    now = local(2024, 3, 5, 20, 0)
    assert formatTime(local(2024, 3, 5, 7, 0), now) == "Mar 5, 2024"
    assert formatTime(local(2006, 1, 2, 15, 4), now) == "Jan 2, 2006"
    assert formatTime(local(2024, 12, 25, 10, 0), now) == "Dec 25, 2024"


def test_rows() -> None:
    now = local(2024, 3, 5, 20, 0)
    entries = [
        ListingEntry("z.txt", 2048, local(2020, 1, 1, 0, 0)),
        ListingEntry("a b/", 0, local(2024, 3, 5, 19, 0)),
    ]
    html = "".join(renderRows("/x/", entries, now))
    assert html.startswith("<!DOCTYPE html>\n")
    assert html.index("a b/") < html.index("z.txt")
    assert '<a href="a%20b/">a b/</a>' in html
    assert '<td class="size"></td>' in html
    assert '<td class="size">2.0KiB</td>' in html
    assert "<td>7:00 PM</td>" in html
    assert "<td>Jan 1, 2020</td>" in html


def test_rows_escape_names() -> None:
    html = "".join(renderRows("/", [ListingEntry("<b>&", 1, 0)]))
    assert "&lt;b&gt;&amp;" in html
    assert "<b>&" not in html


def test_script_payload() -> None:
    entries = [ListingEntry("b", 1, 2.5), ListingEntry("a</script>", 3, 4)]
    assert script(entries) == (
        'fileInfos = [{"name": "a\\u003c/script>", "size": 3, "date": 4}, '
        '{"name": "b", "size": 1, "date": 2}];\n'
        "reorderFiles(compareNames);\n"
    )


def test_render_script_page() -> None:
    html = "".join(renderScript("/docs/", []))
    assert 'id="file-list"' in html
    assert 'id="operations-div"' in html
    assert 'onclick="reorderFiles(compareSizes)"' in html
    assert "function renderFileList" in html
    assert "function formatSize" in html
    assert "fileInfos = [];" in html
    assert '<a href="?format=json">JSON</a>' in html


def test_render_error() -> None:
    html = "".join(renderError("/a<b>", 404, "open a<b>: no such file"))
    assert "Not Found: open a&lt;b&gt;: no such file" in html
    assert "<title>a&lt;b&gt;</title>" in html
