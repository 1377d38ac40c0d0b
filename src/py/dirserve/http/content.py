import os
import secrets
from email.utils import formatdate, parsedate_to_datetime
from enum import Enum
from typing import BinaryIO, Iterator, NamedTuple

from ..utils.files import SNIFF_LENGTH, contentType, sniffContentType
from .model import HTTPBodyFile, HTTPRequest, HTTPResponse

# --
# == Serve Content
#
# Serves the bytes of a seekable stream with conditional revalidation
# (`Last-Modified` based, there are no ETags) and byte range requests,
# including multipart ranges.


class Condition(Enum):
	"""Outcome of evaluating a conditional request header."""

	Absent = 0
	Passed = 1
	Failed = 2


class ByteRange(NamedTuple):
	start: int
	length: int

	def contentRange(self, size: int) -> str:
		return f"bytes {self.start}-{self.start + self.length - 1}/{size}"


class RangeError(ValueError):
	"""Raised when a `Range` header is malformed or cannot be satisfied."""


class NoOverlap(RangeError):
	pass


def httpDate(timestamp: float) -> str:
	return formatdate(timestamp, usegmt=True)


def parseHTTPDate(value: str | None) -> int | None:
	"""Returns the given HTTP-date as seconds since the epoch, or `None` when
	absent or malformed."""
	if not value:
		return None
	try:
		return int(parsedate_to_datetime(value).timestamp())
	except (TypeError, ValueError, IndexError, OverflowError):
		return None


def isDigits(text: str) -> bool:
	return text.isascii() and text.isdigit()


def parseRange(header: str | None, size: int) -> list[ByteRange]:
	"""Parses a `Range` header value for a resource of the given size,
	returning an empty list when there is no range."""
	if not header:
		return []
	prefix = "bytes="
	if not header.startswith(prefix):
		raise RangeError("invalid range")
	ranges: list[ByteRange] = []
	no_overlap: bool = False
	for spec in header[len(prefix) :].split(","):
		spec = spec.strip()
		if not spec:
			continue
		start, sep, end = spec.partition("-")
		start, end = start.strip(), end.strip()
		if not sep:
			raise RangeError("invalid range")
		if not start:
			# A suffix range like `-500` designates the last bytes
			if not isDigits(end):
				raise RangeError("invalid range")
			n = min(int(end), size)
			if n == 0:
				no_overlap = True
			else:
				ranges.append(ByteRange(size - n, n))
			continue
		if not isDigits(start):
			raise RangeError("invalid range")
		i = int(start)
		if i >= size:
			# The range starts after the end of the resource, which only
			# fails the request if no other range overlaps.
			no_overlap = True
			continue
		if not end:
			ranges.append(ByteRange(i, size - i))
			continue
		if not isDigits(end) or i > int(end):
			raise RangeError("invalid range")
		j = min(int(end), size - 1)
		ranges.append(ByteRange(i, j - i + 1))
	if no_overlap and not ranges:
		raise NoOverlap("invalid range: failed to overlap")
	return ranges


def checkPreconditions(
	request: HTTPRequest, modTime: int | None
) -> tuple[int | None, bool]:
	"""Evaluates the conditional headers, returning the status to respond
	with (if any) and whether the `Range` header should be honored."""
	method = request.method
	if_match = request.header("If-Match")
	if if_match is not None:
		# Without an ETag, only the wildcard can match
		if if_match.strip() != "*":
			return 412, False
	elif modTime is not None:
		since = parseHTTPDate(request.header("If-Unmodified-Since"))
		if since is not None and modTime > since:
			return 412, False
	if_none_match = request.header("If-None-Match")
	if if_none_match is not None:
		if if_none_match.strip() == "*":
			return (304 if method in ("GET", "HEAD") else 412), False
	elif modTime is not None and method in ("GET", "HEAD"):
		since = parseHTTPDate(request.header("If-Modified-Since"))
		if since is not None and modTime <= since:
			return 304, False
	return None, checkIfRange(request, modTime) is not Condition.Failed


def checkIfRange(request: HTTPRequest, modTime: int | None) -> Condition:
	if request.method not in ("GET", "HEAD") or not request.header("Range"):
		return Condition.Absent
	value = request.header("If-Range")
	if not value:
		return Condition.Absent
	# Entity tags never match as we don't produce any
	if value.startswith('"') or value.startswith("W/"):
		return Condition.Failed
	date = parseHTTPDate(value)
	if modTime is None or date is None:
		return Condition.Failed
	return Condition.Passed if modTime == date else Condition.Failed


def guessContentType(name: str, content: BinaryIO) -> str:
	"""Guesses from the extension of `name`, falling back to sniffing the
	first bytes of the content."""
	guessed = contentType(name)
	if guessed:
		return guessed
	content.seek(0)
	prefix = content.read(SNIFF_LENGTH)
	content.seek(0)
	return sniffContentType(prefix or b"")


def iterRanges(
	content: BinaryIO, parts: list[tuple[bytes, ByteRange]], closing: bytes
) -> Iterator[bytes]:
	for head, r in parts:
		yield head
		content.seek(r.start)
		left = r.length
		while left > 0:
			chunk = content.read(min(64_000, left))
			if not chunk:
				raise EOFError(f"Content ended with {left} bytes left to send")
			left -= len(chunk)
			yield chunk
	yield closing


def serveContent(
	request: HTTPRequest,
	name: str,
	modTime: float,
	content: BinaryIO,
	*,
	sendfile: bool = True,
) -> HTTPResponse:
	"""Responds with the content of the seekable stream `content`, where `name`
	is the logical path used to guess the content type and `modTime` the
	modification time (in seconds since the epoch, `0` when unknown)."""
	mtime: int | None = int(modTime) if modTime > 0 else None
	headers: dict[str, str] = {"Accept-Ranges": "bytes"}
	if mtime is not None:
		headers["Last-Modified"] = httpDate(mtime)
	status, use_range = checkPreconditions(request, mtime)
	if status is not None:
		return request.respond(status=status, headers=headers)

	content_type = guessContentType(name, content)
	size = content.seek(0, os.SEEK_END)
	content.seek(0)
	try:
		ranges = parseRange(request.header("Range") if use_range else None, size)
	except RangeError as e:
		return request.error(
			416,
			f"{e}\n",
			headers=headers | {"Content-Range": f"bytes */{size}"},
		)
	# When the ranges add up to more than the content, we send it all
	if sum(_.length for _ in ranges) > size:
		ranges = []

	if not ranges:
		return request.respond(
			HTTPBodyFile(content, 0, size, sendfile),
			contentType=content_type,
			headers=headers,
		)
	elif len(ranges) == 1:
		r = ranges[0]
		return request.respond(
			HTTPBodyFile(content, r.start, r.length, sendfile),
			contentType=content_type,
			status=206,
			headers=headers | {"Content-Range": r.contentRange(size)},
		)
	else:
		boundary = secrets.token_hex(30)
		parts: list[tuple[bytes, ByteRange]] = []
		for i, r in enumerate(ranges):
			head = (
				f"--{boundary}\r\n"
				f"Content-Range: {r.contentRange(size)}\r\n"
				f"Content-Type: {content_type}\r\n\r\n"
			).encode("latin-1")
			parts.append(((b"\r\n" if i else b"") + head, r))
		closing = f"\r\n--{boundary}--\r\n".encode("latin-1")
		length = sum(len(h) + r.length for h, r in parts) + len(closing)
		return request.respond(
			iterRanges(content, parts, closing),
			contentType=f"multipart/byteranges; boundary={boundary}",
			contentLength=length,
			status=206,
			headers=headers,
		)


# EOF
