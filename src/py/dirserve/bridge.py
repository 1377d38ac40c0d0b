import asyncio
from typing import Literal

from .http.model import HTTPBodyWriter, HTTPProcessingStatus, HTTPRequest
from .http.parser import HTTPParser
from .model import Application, Service, mount
from .server import SERVER_BADREQUEST, AIOSocketServer


class MemoryBodyWriter(HTTPBodyWriter):
	"""Accumulates everything written in memory."""

	def __init__(self) -> None:
		super().__init__()
		self.data: bytearray = bytearray()

	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool:
		if chunk:
			self.data += chunk
		return True


class PythonBridge:
	"""Bridges act as an interface between an HTTP client and the application,
	here raw request bytes are processed without any socket, going through
	the same parser and response writer as the server."""

	def __init__(self, application: Application):
		self.application: Application = application
		if not self.application:
			raise ValueError("Bridge has not been given an application")

	async def process(self, data: bytes) -> bytes:
		parser = HTTPParser()
		writer = MemoryBodyWriter()
		for atom in parser.feed(data):
			if atom is HTTPProcessingStatus.BadFormat:
				await writer.write(SERVER_BADREQUEST)
				break
			elif isinstance(atom, HTTPRequest):
				await AIOSocketServer.SendResponse(atom, self.application, writer)
		return bytes(writer.data)

	def request(self, data: bytes) -> bytes:
		"""Processes the requests in `data` and returns the raw responses."""
		return asyncio.run(self.process(data))


def run(*components: Application | Service) -> PythonBridge:
	"""Creates a bridge for the given services/application."""
	return PythonBridge(mount(*components))


# EOF
