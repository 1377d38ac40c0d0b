"""
Fixtures driving the file service through the Python bridge: requests are
written as raw bytes and responses parsed back, without any socket.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, NamedTuple

import pytest

from dirserve.bridge import PythonBridge
from dirserve.config import ServeConfig
from dirserve.model import mount
from dirserve.services.files import FileService

# A fixed modification time, Tue, 14 Nov 2023 22:13:20 GMT
MTIME: int = 1_700_000_000


class Response(NamedTuple):
    status: int
    headers: dict[str, str]
    body: bytes

    def header(self, name: str) -> str | None:
        return self.headers.get(name.lower())

    @property
    def text(self) -> str:
        return self.body.decode("utf8")


def parseResponse(data: bytes) -> Response:
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    status = int(lines[0].split(" ", 2)[1])
    headers: dict[str, str] = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip().lower()] = value.strip()
    return Response(status, headers, body)


def rawRequest(path: str, method: str = "GET", headers: dict[str, str] | None = None) -> bytes:
    lines = [f"{method} {path} HTTP/1.1", "Host: localhost"]
    lines += [f"{k}: {v}" for k, v in (headers or {}).items()]
    return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")


class Client:
    def __init__(self, root: Path, **options: Any) -> None:
        self.service = FileService(ServeConfig.Make(str(root), **options))
        self.bridge = PythonBridge(mount(self.service))

    def raw(self, data: bytes) -> bytes:
        return self.bridge.request(data)

    def request(
        self, path: str, method: str = "GET", headers: dict[str, str] | None = None
    ) -> Response:
        return parseResponse(self.raw(rawRequest(path, method, headers)))

    def get(self, path: str, **headers: str) -> Response:
        return self.request(path, headers={k.replace("_", "-"): v for k, v in headers.items()})


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """A tree with a file, a directory holding an index, a hidden file and
    a nested directory."""
    (tmp_path / "a.txt").write_bytes(b"0123456789")
    (tmp_path / "b").mkdir()
    (tmp_path / "b" / "index.html").write_bytes(b"<p>index</p>")
    (tmp_path / ".hidden").write_bytes(b"hidden")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "readme.md").write_bytes(b"# Readme\n")
    (tmp_path / "secret.txt").write_bytes(b"secret")
    for path in tmp_path.rglob("*"):
        os.utime(path, (MTIME, MTIME))
    return tmp_path


@pytest.fixture
def client(root: Path) -> Callable[..., Client]:
    """Returns a factory of clients, taking the service options. Patterns
    default to none, except for the default hide pattern."""

    def factory(**options: Any) -> Client:
        options.setdefault("hide", "/[.][^/]+/?$")
        options.setdefault("deny", "")
        options.setdefault("index", "")
        return Client(root, **options)

    return factory
