from abc import ABC, abstractmethod
from typing import Any, Generic, Iterator, TypeVar

from ..utils.json import json
from .status import HTTP_STATUS

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# API
#
# -----------------------------------------------------------------------------

# --
# == HTTP Request Response API
#
# Defines the high level API functions (orthogonal to the underlying model)
# to manipulate requests/responses.


class ResponseFactory(ABC, Generic[T]):
	@abstractmethod
	def respond(
		self,
		content: Any = None,
		contentType: str | None = None,
		contentLength: int | None = None,
		status: int = 200,
		headers: dict[str, str] | None = None,
		message: str | None = None,
	) -> T: ...

	def error(
		self,
		status: int,
		content: str | bytes | None = None,
		contentType: str = "text/plain; charset=utf-8",
		headers: dict[str, str] | None = None,
	) -> T:
		message = HTTP_STATUS.get(status, "Server Error")
		return self.respond(
			content=message if content is None else content,
			contentType=contentType,
			status=status,
			message=message,
			headers=headers,
		)

	def notFound(
		self,
		content: str = "Not Found",
		contentType: str = "text/plain; charset=utf-8",
		*,
		status: int = 404,
	) -> T:
		return self.error(status, content=content, contentType=contentType)

	def notAllowed(self, allowed: list[str]) -> T:
		return self.error(405, headers={"Allow": ", ".join(allowed)})

	def fail(
		self,
		content: str | None = None,
		*,
		status: int = 500,
		contentType: str = "text/plain; charset=utf-8",
	) -> T:
		return self.error(status, content=content, contentType=contentType)

	def redirect(self, url: str, permanent: bool = False) -> T:
		# SEE: https://developer.mozilla.org/en-US/docs/Web/HTTP/Redirections
		return self.respondEmpty(
			status=301 if permanent else 302, headers={"Location": str(url)}
		)

	def returns(
		self,
		value: Any,
		headers: dict[str, str] | None = None,
		*,
		status: int = 200,
		contentType: str = "application/json",
	) -> T:
		payload: bytes = json(value)
		return self.respond(
			payload,
			contentType=contentType,
			contentLength=len(payload),
			headers=headers,
			status=status,
		)

	def respondText(
		self,
		content: str | bytes | Iterator[bytes],
		contentType: str = "text/plain; charset=utf-8",
		status: int = 200,
	) -> T:
		return self.respond(content=content, contentType=contentType, status=status)

	def respondHTML(
		self, html: str | bytes | Iterator[bytes], status: int = 200
	) -> T:
		return self.respond(
			content=html, contentType="text/html; charset=UTF-8", status=status
		)

	def respondEmpty(self, status: int, headers: dict[str, str] | None = None) -> T:
		return self.respond(content=None, status=status, headers=headers)


# EOF
