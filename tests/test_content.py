"""
Tests of conditional and range requests, on the 10 bytes `a.txt` file.
"""

from __future__ import annotations

from typing import Callable

import pytest

from dirserve.http.content import ByteRange, NoOverlap, RangeError, parseRange

from conftest import Client

TClient = Callable[..., Client]

LAST_MODIFIED = "Tue, 14 Nov 2023 22:13:20 GMT"
EARLIER = "Tue, 14 Nov 2023 22:13:19 GMT"


# ------------------------- parseRange -------------------------


@pytest.mark.parametrize(
    "header,expected",
    [
        (None, []),
        ("", []),
        ("bytes=0-4", [ByteRange(0, 5)]),
        ("bytes=5-", [ByteRange(5, 5)]),
        ("bytes=-3", [ByteRange(7, 3)]),
        ("bytes=-20", [ByteRange(0, 10)]),
        ("bytes=8-20", [ByteRange(8, 2)]),
        ("bytes=0-1, 4-5", [ByteRange(0, 2), ByteRange(4, 2)]),
        ("bytes=20-,0-1", [ByteRange(0, 2)]),
    ],
)
def test_parse_range(header: str | None, expected: list[ByteRange]) -> None:
    assert parseRange(header, 10) == expected


@pytest.mark.parametrize(
    "header", ["pages=0-1", "bytes=4-2", "bytes=a-b", "bytes=1", "bytes=--1", "bytes=-x"]
)
def test_parse_range_invalid(header: str) -> None:
    with pytest.raises(RangeError):
        parseRange(header, 10)


@pytest.mark.parametrize("header", ["bytes=10-", "bytes=20-30", "bytes=-0"])
def test_parse_range_no_overlap(header: str) -> None:
    with pytest.raises(NoOverlap):
        parseRange(header, 10)


def test_content_range() -> None:
    assert ByteRange(2, 3).contentRange(10) == "bytes 2-4/10"


# ------------------------- ranges -------------------------


def test_single_range(client: TClient) -> None:
    res = client().get("/a.txt", Range="bytes=2-4")
    assert res.status == 206
    assert res.body == b"234"
    assert res.header("Content-Range") == "bytes 2-4/10"
    assert res.header("Content-Length") == "3"
    assert res.header("Content-Type") == "text/plain; charset=utf-8"


def test_single_range_without_sendfile(client: TClient) -> None:
    assert client(sendfile=False).get("/a.txt", Range="bytes=-2").body == b"89"


def test_multiple_ranges(client: TClient) -> None:
    res = client().get("/a.txt", Range="bytes=0-1,5-6")
    assert res.status == 206
    content_type = res.header("Content-Type") or ""
    assert content_type.startswith("multipart/byteranges; boundary=")
    boundary = content_type.split("boundary=", 1)[1]
    assert res.header("Content-Length") == str(len(res.body))
    body = res.body.decode("latin-1")
    assert body.startswith(f"--{boundary}\r\n")
    assert body.endswith(f"\r\n--{boundary}--\r\n")
    assert "Content-Range: bytes 0-1/10\r\n" in body
    assert "Content-Range: bytes 5-6/10\r\n" in body
    assert "\r\n\r\n01\r\n" in body
    assert "\r\n\r\n56\r\n" in body


def test_unsatisfiable_range(client: TClient) -> None:
    res = client().get("/a.txt", Range="bytes=20-30")
    assert res.status == 416
    assert res.header("Content-Range") == "bytes */10"


def test_malformed_range(client: TClient) -> None:
    assert client().get("/a.txt", Range="lines=1-2").status == 416


def test_ranges_larger_than_content_send_everything(client: TClient) -> None:
    res = client().get("/a.txt", Range="bytes=0-,0-")
    assert res.status == 200
    assert res.body == b"0123456789"


def test_range_on_head(client: TClient) -> None:
    res = client().request("/a.txt", method="HEAD", headers={"Range": "bytes=0-3"})
    assert res.status == 206
    assert res.header("Content-Length") == "4"
    assert res.body == b""


# ------------------------- conditions -------------------------


def test_if_modified_since(client: TClient) -> None:
    c = client()
    res = c.get("/a.txt", If_Modified_Since=LAST_MODIFIED)
    assert res.status == 304
    assert res.body == b""
    assert res.header("Last-Modified") == LAST_MODIFIED
    assert c.get("/a.txt", If_Modified_Since=EARLIER).status == 200


def test_if_modified_since_malformed_is_ignored(client: TClient) -> None:
    assert client().get("/a.txt", If_Modified_Since="yesterday").status == 200


def test_if_unmodified_since(client: TClient) -> None:
    c = client()
    assert c.get("/a.txt", If_Unmodified_Since=EARLIER).status == 412
    assert c.get("/a.txt", If_Unmodified_Since=LAST_MODIFIED).status == 200


def test_if_match(client: TClient) -> None:
    c = client()
    # There are no entity tags, so only the wildcard matches
    assert c.get("/a.txt", If_Match='"abc"').status == 412
    assert c.get("/a.txt", If_Match="*").status == 200


def test_if_none_match(client: TClient) -> None:
    c = client()
    assert c.get("/a.txt", If_None_Match="*").status == 304
    assert c.get("/a.txt", If_None_Match='"abc"').status == 200


def test_if_range(client: TClient) -> None:
    c = client()
    res = c.get("/a.txt", Range="bytes=0-1", If_Range=LAST_MODIFIED)
    assert res.status == 206
    assert res.body == b"01"
    res = c.get("/a.txt", Range="bytes=0-1", If_Range=EARLIER)
    assert res.status == 200
    assert res.body == b"0123456789"
    assert c.get("/a.txt", Range="bytes=0-1", If_Range='"etag"').status == 200
