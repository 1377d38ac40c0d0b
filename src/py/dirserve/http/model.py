from abc import ABC, abstractmethod
from enum import Enum
from typing import (
	Any,
	BinaryIO,
	Callable,
	Literal,
	NamedTuple,
	TypeAlias,
	Union,
)

from ..utils.io import DEFAULT_ENCODING
from .api import ResponseFactory
from .status import HTTP_NO_BODY, HTTP_STATUS

# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------


def headername(name: str, *, headers: dict[str, str] = {}) -> str:
	"""Normalizes the header name as `Kebab-Case`."""
	if name in headers:
		return headers[name]
	key: str = name.lower()
	if key in headers:
		return headers[key]
	else:
		normalized: str = "-".join(_.capitalize() for _ in name.split("-"))
		headers[key] = normalized
		return normalized


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class HTTPRequestLine(NamedTuple):
	"""Represents a request status line"""

	method: str
	path: str
	query: str
	protocol: str


class HTTPHeaders(NamedTuple):
	"""Wraps HTTP headers, keeping key information for response/request processing."""

	headers: dict[str, str]
	contentType: str | None = None
	contentLength: int | None = None


class HTTPProcessingStatus(Enum):
	"""Internal parser/processor state management"""

	Processing = 0
	Body = 1
	Complete = 2
	Timeout = 10
	NoData = 11
	BadFormat = 12


HTTPAtom: TypeAlias = Union[
	HTTPRequestLine,
	HTTPHeaders,
	HTTPProcessingStatus,
	"HTTPRequest",
]

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class HTTPRequestError(Exception):
	"""To be raised by handlers to generate an error response, 500 by default."""

	def __init__(
		self,
		message: str,
		status: int | None = None,
		contentType: str | None = None,
	):
		super().__init__(message)
		self.message: str = message
		self.status: int | None = status
		self.contentType: str | None = contentType


# -----------------------------------------------------------------------------
#
# BODY
#
# -----------------------------------------------------------------------------


class HTTPBodyBlob(NamedTuple):
	"""Represents a body as bytes."""

	payload: bytes = b""
	length: int = 0


class HTTPBodyFile(NamedTuple):
	"""A `length` bytes window of an open, seekable stream starting at
	`offset`. When `sendfile` is set, writers may use a zero-copy transfer."""

	stream: BinaryIO
	offset: int
	length: int
	sendfile: bool = True


# The different types of bodies that are managed
THTTPBody: TypeAlias = HTTPBodyBlob | HTTPBodyFile


# -----------------------------------------------------------------------------
#
# BODY WRITER
#
# -----------------------------------------------------------------------------


class HTTPBodyWriter(ABC):
	"""A generic writer for response heads and bodies."""

	__slots__ = ["shouldClose"]

	CHUNK_SIZE: int = 64_000

	def __init__(self) -> None:
		self.shouldClose: bool = False

	async def write(self, body: THTTPBody | bytes | None) -> bool:
		"""Writes the given type of body."""
		if isinstance(body, bytes):
			return await self._writeBytes(body)
		elif isinstance(body, HTTPBodyBlob):
			return await self._writeBytes(body.payload)
		elif isinstance(body, HTTPBodyFile):
			return await self._writeFile(body)
		elif body is None:
			return True
		else:
			raise ValueError(f"Unsupported body format: {body}")

	async def _writeFile(self, body: HTTPBodyFile) -> bool:
		"""Copies the file window through user space."""
		stream = body.stream
		stream.seek(body.offset)
		left: int = body.length
		while left > 0:
			chunk = stream.read(min(self.CHUNK_SIZE, left))
			if not chunk:
				raise EOFError(f"File ended with {left} bytes left to send")
			left -= len(chunk)
			await self._writeBytes(chunk, left > 0)
		return True

	@abstractmethod
	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool: ...


# -----------------------------------------------------------------------------
#
# REQUESTS
#
# -----------------------------------------------------------------------------


class HTTPRequest(ResponseFactory["HTTPResponse"]):
	"""Represents an HTTP requests, which also acts as a factory for
	responses."""

	__slots__ = [
		"protocol",
		"method",
		"path",
		"query",
		"queryString",
		"_headers",
	]

	def __init__(
		self,
		method: str,
		path: str,
		query: dict[str, str] | None,
		headers: HTTPHeaders,
		protocol: str = "HTTP/1.1",
		queryString: str = "",
	):
		super().__init__()
		self.method: str = method
		# NOTE: The path is kept as received, percent-encoded
		self.path: str = path
		self.query: dict[str, str] | None = query
		self.queryString: str = queryString
		self.protocol: str = protocol
		self._headers: HTTPHeaders = headers

	@property
	def headers(self) -> dict[str, str]:
		return self._headers.headers

	def header(self, name: str) -> str | None:
		return self._headers.headers.get(headername(name))

	def param(self, name: str, default: str | None = None) -> str | None:
		return self.query.get(name, default) if self.query else default

	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> "HTTPResponse":
		return HTTPResponse.Create(
			status=status,
			message=message,
			content=content,
			contentType=contentType,
			contentLength=contentLength,
			protocol=self.protocol,
			headers=headers,
		)


# -----------------------------------------------------------------------------
#
# RESPONSE
#
# -----------------------------------------------------------------------------


class HTTPResponse:
	"""An HTTP response."""

	@staticmethod
	def Create(
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		headers: dict[str, str] | None = None,
		status: int = 200,
		message: str | None = None,
		protocol: str = "HTTP/1.1",
	) -> "HTTPResponse":
		"""Factory method to create HTTP response objects."""
		payload: bytes | None = None
		body: THTTPBody | None = None
		if content is None:
			pass
		elif isinstance(content, str):
			payload = content.encode(DEFAULT_ENCODING)
		elif isinstance(content, bytes):
			payload = content
		elif isinstance(content, (HTTPBodyBlob, HTTPBodyFile)):
			body = content
			if contentLength is None:
				contentLength = content.length
		else:
			raise ValueError(f"Unsupported content {type(content)}:{content}")
		# If we have a payload then it's a Blob response
		if payload is not None:
			contentLength = len(payload)
			body = HTTPBodyBlob(payload, contentLength)
		elif body is None and contentLength is None and status not in HTTP_NO_BODY:
			contentLength = 0
		updated_headers: dict[str, str] = dict(headers) if headers else {}
		if contentType is not None:
			updated_headers["Content-Type"] = contentType
		if contentLength is not None:
			updated_headers["Content-Length"] = str(contentLength)
		return HTTPResponse(
			status=status,
			message=message or HTTP_STATUS.get(status, "Unknown status"),
			headers=HTTPHeaders(
				{headername(k): v for k, v in updated_headers.items()},
				contentType=contentType,
				contentLength=contentLength,
			),
			body=body,
			protocol=protocol,
		)

	__slots__ = [
		"protocol",
		"status",
		"message",
		"headers",
		"body",
		"_onClose",
	]

	def __init__(
		self,
		protocol: str,
		status: int,
		message: str | None,
		headers: HTTPHeaders,
		body: THTTPBody | None = None,
	):
		super().__init__()
		self.protocol: str = protocol
		self.status: int = status
		self.message: str | None = message
		self.headers: HTTPHeaders = headers
		self.body: THTTPBody | None = body
		self._onClose: Callable[[HTTPResponse], None] | None = None

	def getHeader(self, name: str) -> str | None:
		return self.headers.headers.get(headername(name))

	def setHeader(self, name: str, value: str | int | None) -> "HTTPResponse":
		if value is None:
			self.headers.headers.pop(headername(name), None)
		else:
			self.headers.headers[headername(name)] = str(value)
		return self

	def head(self) -> bytes:
		"""Serializes the head as a payload."""
		message: str = self.message or HTTP_STATUS.get(self.status, "Unknown status")
		lines: list[str] = [
			f"{headername(k)}: {v}" for k, v in self.headers.headers.items()
		]
		lines.insert(0, f"{self.protocol} {self.status} {message}")
		lines.append("")
		lines.append("")
		# NOTE: Header values are encoded in latin-1, as per RFC 9110
		return "\r\n".join(lines).encode("latin-1", errors="replace")

	def onClose(
		self, callback: Callable[["HTTPResponse"], None] | None
	) -> "HTTPResponse":
		self._onClose = callback
		return self

	def close(self) -> None:
		"""Runs (once) the close callback, releasing resources held by the body."""
		callback, self._onClose = self._onClose, None
		if callback:
			callback(self)

	def __str__(self) -> str:
		return f"Response({self.protocol} {self.status} {self.message} {self.headers} {self.body})"


# EOF
