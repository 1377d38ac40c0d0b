import asyncio
from contextlib import ExitStack
from io import BytesIO
from typing import BinaryIO
from urllib.parse import unquote

from .. import paths
from ..config import ServeConfig
from ..decorators import on
from ..features.nocache import nocache
from ..fs import (
	Capability,
	DirFS,
	DirectoryFile,
	File,
	FSError,
	InternalError,
	InvalidError,
	PermissionDeniedError,
	RegularFile,
	fsError,
	require,
)
from ..http.content import serveContent
from ..http.model import HTTPRequest, HTTPResponse
from ..listing import IndexEntry, enumerateDirectory
from ..model import Service
from ..render import payload, renderError, renderRows, renderScript
from ..utils.logging import LogLevel, debug, error, event, exception, logged


class FileService(Service):
	"""Serves the files and directory listings of the configured root.

	Each request is resolved as follows: the URL path is normalized, denied
	paths are rejected, the entry is opened and its trailing slash checked,
	then directories are listed (or their index served) and files are sent
	with conditional and range requests support."""

	def __init__(self, config: ServeConfig | None = None, *, prefix: str | None = None):
		self.config: ServeConfig = config or ServeConfig.Make()
		self.fs: DirFS = DirFS(self.config.root)
		super().__init__(prefix=prefix)

	@nocache
	@on(GET_HEAD="/{path:any}")
	async def read(self, request: HTTPRequest, path: str = "") -> HTTPResponse:
		# Filesystem access is blocking, so it's done out of the event loop
		return await asyncio.to_thread(self.serve, request, path)

	def serve(self, request: HTTPRequest, path: str) -> HTTPResponse:
		"""Responds to the request for the given (percent-encoded) path. The
		handles opened for the response are closed with the response."""
		normalized = paths.normalize(unquote("/" + path, errors="surrogateescape"))
		if self.config.verbose:
			event(request.method, normalized)
		with ExitStack() as stack:
			try:
				response = self.resolve(request, normalized, stack)
			except Exception as e:
				exception(e, f"Request failed: {request.method} {normalized}")
				return self.errorPage(request, normalized, 500, "internal error")
			handles = stack.pop_all()
		return response.onClose(lambda _: handles.close())

	def resolve(self, request: HTTPRequest, path: str, stack: ExitStack) -> HTTPResponse:
		name = paths.fsName(path)
		try:
			if self.config.patterns.isDenied(path):
				raise PermissionDeniedError("open", name, "permission denied")
			f = stack.enter_context(self.fs.open(name))
			info = f.stat()
			if info.isDirectory != paths.isDirectoryPath(path):
				return self.redirect(request, paths.redirection(path, info.isDirectory))
			elif isinstance(f, DirectoryFile):
				listing = enumerateDirectory(
					self.fs,
					require(f, Capability.Enumerate, name),
					path,
					self.config.patterns,
				)
				if isinstance(listing, IndexEntry):
					# The path is now the index's, which is what errors report
					path = listing.path
					index = stack.enter_context(self.fs.open(listing.name))
					return self.serveFile(
						request, path, index, listing.info.modTime, allowRedirect=False
					)
				elif request.param("format") == "json":
					return request.returns(payload(listing))
				elif self.config.listing == "html":
					return request.respondHTML("".join(renderRows(path, listing)))
				else:
					return request.respondHTML("".join(renderScript(path, listing)))
			else:
				return self.serveFile(request, path, f, info.modTime, allowRedirect=True)
		except FSError as e:
			return self.failure(request, path, e)
		except OSError as e:
			return self.failure(request, path, fsError("read", name, e))

	def serveFile(
		self,
		request: HTTPRequest,
		path: str,
		f: File,
		modTime: float,
		*,
		allowRedirect: bool,
	) -> HTTPResponse:
		"""Sends the content of the file, unless it's an index reached by its
		own name, which is redirected to its directory."""
		if allowRedirect and self.config.patterns.isIndex(path):
			return self.redirect(request, "./")
		if not isinstance(f, RegularFile):
			raise InvalidError("read", paths.fsName(path), "not a regular file")
		stream: BinaryIO = f.stream
		sendfile = self.config.sendfile
		if not stream.seekable():
			stream = BytesIO(stream.read())
			sendfile = False
		return serveContent(request, path, modTime, stream, sendfile=sendfile)

	def redirect(self, request: HTTPRequest, url: str) -> HTTPResponse:
		"""Permanently redirects to the relative `url`, keeping the query."""
		query = request.queryString
		return request.redirect(f"{url}?{query}" if query else url, permanent=True)

	def failure(self, request: HTTPRequest, path: str, err: FSError) -> HTTPResponse:
		if isinstance(err, InternalError):
			error("Request failed", Path=path, Error=str(err))
		else:
			logged(LogLevel.Debug) and debug(
				"Request rejected", Path=path, Status=err.status, Error=str(err)
			)
		return self.errorPage(request, path, err.status, str(err))

	def errorPage(
		self, request: HTTPRequest, path: str, status: int, message: str
	) -> HTTPResponse:
		return request.respond(
			"".join(renderError(path, status, message)),
			contentType="text/html; charset=UTF-8",
			status=status,
		)


# EOF
