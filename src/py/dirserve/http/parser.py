from typing import Iterator, ClassVar, Literal
from urllib.parse import unquote_plus
from ..utils.io import LineParser
from .model import (
	HTTPRequest,
	HTTPRequestLine,
	HTTPHeaders,
	HTTPAtom,
	HTTPProcessingStatus,
	headername,
)


class MessageParser:
	"""Parses an HTTP request line."""

	__slots__ = ["line", "value"]

	def __init__(self) -> None:
		self.line: LineParser = LineParser()
		self.value: HTTPRequestLine | Literal[False] | None = None

	def flush(self) -> HTTPRequestLine | Literal[False] | None:
		res = self.value
		self.reset()
		return res

	def reset(self) -> "MessageParser":
		self.line.reset()
		self.value = None
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bool | None, int]:
		line, read = self.line.feed(chunk, start)
		if line is None:
			return None, read
		# Robustness: empty lines before a request line are ignored
		elif not line:
			self.line.reset()
			return None, read
		else:
			self.value = parseRequestLine(line)
			return True, read

	def __str__(self) -> str:
		return f"MessageParser({self.value})"


class HeadersParser:
	__slots__ = ["headers", "contentType", "contentLength", "line"]

	def __init__(self) -> None:
		super().__init__()
		self.line: LineParser = LineParser()
		self.headers: dict[str, str] = {}
		self.contentType: str | None = None
		self.contentLength: int | None = None

	def flush(self) -> HTTPHeaders:
		res = HTTPHeaders(self.headers, self.contentType, self.contentLength)
		self.reset()
		return res

	def reset(self) -> "HeadersParser":
		self.line.reset()
		self.headers = {}
		self.contentType = None
		self.contentLength = None
		return self

	def feed(
		self, chunk: bytes, start: int = 0
	) -> tuple[str | Literal[False] | None, int]:
		"""Feeds data from chunk, starting at `start` offset. Returns
		a value and the next start offset. When the value is `None`, no
		header has been extracted, when the value is `False` it's an empty
		line, and when the value is a string, a header was added."""
		line, read = self.line.feed(chunk, start)
		if line is None:
			return None, read
		elif not line:
			# An empty line denotes the end of headers
			return False, read
		else:
			self.line.reset()
			# Headers are expected to be in ASCII, latin-1 keeps any byte
			ln: str = line.decode("latin-1")
			i = ln.find(":")
			if i == -1:
				return None, read
			h = ln[:i].strip().lower()
			v = ln[i + 1 :].strip()
			if h == "content-length":
				try:
					self.contentLength = int(v)
				except ValueError:
					self.contentLength = None
			elif h == "content-type":
				self.contentType = v
			n: str = headername(h)
			self.headers[n] = v
			return n, read

	def __str__(self) -> str:
		return f"HeadersParser({self.headers})"


class BodySkipParser:
	"""Skips over the body of a request with a known length. The file service
	never reads request bodies, but must not interpret them as requests."""

	__slots__ = ["remaining"]

	def __init__(self) -> None:
		self.remaining: int = 0

	def reset(self, length: int = 0) -> "BodySkipParser":
		self.remaining = max(0, length)
		return self

	def feed(self, chunk: bytes, start: int = 0) -> tuple[bool | None, int]:
		read = min(len(chunk) - start, self.remaining)
		self.remaining -= read
		return (True if self.remaining == 0 else None), read


class HTTPParser:
	"""A stateful HTTP request parser. Chunks are fed as they come from the
	socket and requests are yielded as soon as their head is complete."""

	METHOD_HAS_BODY: ClassVar[set[str]] = {"POST", "PUT", "PATCH"}

	def __init__(self) -> None:
		self.message: MessageParser = MessageParser()
		self.headers: HeadersParser = HeadersParser()
		self.body: BodySkipParser = BodySkipParser()
		self.parser: MessageParser | HeadersParser | BodySkipParser = self.message
		self.requestLine: HTTPRequestLine | None = None
		self.pending: HTTPRequest | None = None

	def feed(self, chunk: bytes) -> Iterator[HTTPAtom]:
		size: int = len(chunk)
		offset: int = 0
		while offset < size:
			ln, read = self.parser.feed(chunk, offset)
			offset += read
			if ln is None:
				continue
			elif self.parser is self.message:
				line = self.message.flush()
				if line is False or line is None:
					yield HTTPProcessingStatus.BadFormat
					self.parser = self.message.reset()
					return
				self.requestLine = line
				yield line
				self.parser = self.headers
			elif self.parser is self.headers:
				if ln is not False or self.requestLine is None:
					# `ln` is going to be the header name as a string there.
					continue
				headers = self.headers.flush()
				yield headers
				line = self.requestLine
				request = HTTPRequest(
					method=line.method,
					path=line.path,
					query=parseQuery(line.query),
					queryString=line.query,
					headers=headers,
					protocol=line.protocol,
				)
				length = headers.contentLength or 0
				if line.method in self.METHOD_HAS_BODY and length > 0:
					self.pending = request
					self.parser = self.body.reset(length)
					yield HTTPProcessingStatus.Body
				else:
					self.parser = self.message.reset()
					yield request
			elif self.parser is self.body:
				if self.pending:
					yield self.pending
					self.pending = None
				self.parser = self.message.reset()
			else:
				raise RuntimeError(f"Unsupported parser: {self.parser}")


def parseRequestLine(line: bytes) -> HTTPRequestLine | Literal[False]:
	"""Parses `METHOD TARGET PROTOCOL`, returning `False` when malformed."""
	try:
		ln = line.decode("ascii")
	except UnicodeDecodeError:
		return False
	parts = ln.split(" ")
	if len(parts) != 3 or not parts[0] or not parts[2].startswith("HTTP/"):
		return False
	method, target, protocol = parts
	# We drop the fragment, which clients should not send anyway
	p: list[str] = target.split("#", 1)[0].split("?", 1)
	return HTTPRequestLine(method, p[0], p[1] if len(p) > 1 else "", protocol)


def parseQuery(text: str) -> dict[str, str]:
	res: dict[str, str] = {}
	for item in text.split("&"):
		if not item:
			continue
		kv = item.split("=", 1)
		if len(kv) == 1:
			res[unquote_plus(item)] = ""
		else:
			res[unquote_plus(kv[0])] = unquote_plus(kv[1])
	return res


# EOF
