import asyncio
import socket
import threading
from dataclasses import dataclass
from signal import SIGINT, SIGTERM
from typing import Any, Callable, Coroutine, Literal, NamedTuple

from .config import HOST, PORT
from .http.model import (
	HTTPBodyFile,
	HTTPBodyWriter,
	HTTPProcessingStatus,
	HTTPRequest,
	HTTPResponse,
)
from .http.parser import HTTPParser
from .http.status import HTTP_NO_BODY
from .model import Application, Service, mount
from .utils.limits import LimitType, unlimit
from .utils.logging import debug, event, exception, info, logged, warning, LogLevel


@dataclass(slots=True)
class ServerState:
	isRunning: bool = True

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		e = context.get("exception")
		if e:
			exception(e)


class ServerOptions(NamedTuple):
	host: str = "0.0.0.0"  # nosec: B104
	port: int = 8080
	backlog: int = 10_000
	# This is the polling timeout for accepting new requests. Every second is
	# good
	polling: float = 1.0
	readsize: int = 4_096
	keepalive: float = 3_600
	# Delay before trying again to bind the listening socket, `0` to fail
	# right away.
	retry: float = 30.0
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True


OPTIONS: ServerOptions = ServerOptions()

SERVER_NOCONTENT: bytes = b"HTTP/1.1 204 No Content\r\nConnection: close\r\n\r\n"
SERVER_BADREQUEST: bytes = (
	b"HTTP/1.1 400 Bad Request\r\n"
	b"Content-Type: text/plain; charset=utf-8\r\n"
	b"Content-Length: 11\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Bad Request"
)
SERVER_ERROR: bytes = (
	b"HTTP/1.1 500 Internal Server Error\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 39\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Internal server error: Request not sent\r\n"
)


class AIOSocketBodyWriter(HTTPBodyWriter):
	"""Specialized body writer to work with AIO sockets."""

	def __init__(
		self,
		client: "socket.socket",
		loop: asyncio.AbstractEventLoop,
	) -> None:
		super().__init__()
		self.client: socket.socket = client
		self.loop: asyncio.AbstractEventLoop = loop

	async def _writeBytes(
		self, chunk: bytes | None | Literal[False], more: bool = False
	) -> bool:
		if chunk is None or chunk is False:
			pass
		else:
			await self.loop.sock_sendall(self.client, chunk)
		return False

	async def _writeFile(self, body: HTTPBodyFile) -> bool:
		if not body.sendfile:
			return await super()._writeFile(body)
		# NOTE: The loop falls back to a user space copy when the stream
		# has no file descriptor or the platform has no `sendfile`.
		if body.length:
			await self.loop.sock_sendfile(
				self.client, body.stream, body.offset, body.length
			)
		return True


# NOTE: Based on benchmarks, this gave the best performance.
class AIOSocketServer:
	"""AsyncIO backend using sockets directly."""

	@classmethod
	async def OnRequest(
		cls,
		app: Application,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		options: ServerOptions,
	) -> None:
		"""Asynchronous worker, processing a socket in the context
		of an application."""
		size: int = options.readsize
		buffer = bytearray(size)
		keep_alive: bool = True
		iteration: int = 0
		status: HTTPProcessingStatus = HTTPProcessingStatus.Processing
		read_count: int = 0
		res_count: int = 0
		req_count: int = 0
		try:
			parser: HTTPParser = HTTPParser()
			writer: AIOSocketBodyWriter = AIOSocketBodyWriter(client, loop)
			# NOTE: A client may send any number of requests through this
			# loop, until there's Connection: close, or the keepalive timeout
			# has expired.
			while keep_alive and not writer.shouldClose:
				try:
					n = await asyncio.wait_for(
						loop.sock_recv_into(client, buffer),
						timeout=options.keepalive,
					)
					read_count += n
				except TimeoutError:
					status = HTTPProcessingStatus.Timeout
					break
				if not n:
					# A no-data means a close
					status = HTTPProcessingStatus.NoData
					break
				# NOTE: With HTTP Pipelining, we may receive more than one
				# request in the same payload.
				for atom in parser.feed(bytes(buffer[:n])):
					if atom is HTTPProcessingStatus.BadFormat:
						warning("Malformed request", Client=f"{id(client):x}")
						await writer.write(SERVER_BADREQUEST)
						status = atom
						keep_alive = False
						break
					elif isinstance(atom, HTTPRequest):
						req = atom
						req_count += 1
						if (
							req.protocol == "HTTP/1.0"
							or (req.header("Connection") or "").lower() == "close"
						):
							keep_alive = False
						res = await cls.SendResponse(req, app, writer)
						if res:
							res_count += 1
						else:
							warning(
								"Sending Response Failed",
								Iteration=iteration,
								Count=res_count,
							)
					if not keep_alive:
						break
				iteration += 1
			if status is HTTPProcessingStatus.NoData and req_count != res_count:
				warning(
					"Client did not feed a complete request",
					ReadCount=read_count,
					Status=status.name,
					Requests=req_count,
					Responses=res_count,
				)
			elif status is HTTPProcessingStatus.Timeout and req_count != res_count:
				warning(
					"Client timed out",
					ReadCount=read_count,
					Requests=req_count,
					Responses=res_count,
				)
		except (BrokenPipeError, ConnectionResetError):
			debug("Client closed the connection", Client=f"{id(client):x}")
		except Exception as e:
			exception(e)
		finally:
			# NOTE: The above loop takes care of keep alive, so we always close
			# the connection on exit.
			client.close()

	@staticmethod
	async def SendResponse(
		request: HTTPRequest,
		app: Application,
		writer: HTTPBodyWriter,
	) -> HTTPResponse | None:
		"""Processes the request within the application and sends a response
		using the given writer. The response is always closed, releasing
		whatever its body holds."""
		req: HTTPRequest = request
		res: HTTPResponse | None = None
		sent: bool = False
		r: HTTPResponse | Coroutine[Any, HTTPResponse, Any] = app.process(req)
		if isinstance(r, HTTPResponse):
			res = r
		else:
			res = await r
		try:
			if res is None:
				warning(
					"Application did not return a response",
					Method=req.method,
					Path=req.path,
				)
				await writer.write(SERVER_NOCONTENT)
				sent = True
			else:
				# We send the request head
				await writer.write(res.head())
				sent = True
				if req.method != "HEAD" and res.status not in HTTP_NO_BODY:
					await writer.write(res.body)
		except (BrokenPipeError, ConnectionResetError):
			# Client did an early close
			writer.shouldClose = True
			sent = True
		except Exception as e:
			exception(e)
			writer.shouldClose = True
		finally:
			if res:
				try:
					res.close()
				except Exception as e:
					exception(e, "Response close handler failed")
		if not sent:
			warning(
				"Server did not send a response",
				Method=req.method,
				Path=req.path,
			)
			await writer.write(SERVER_ERROR)
		return res

	@classmethod
	async def Bind(
		cls, server: socket.socket, options: ServerOptions, state: ServerState
	) -> bool:
		"""Binds the server socket, retrying after `options.retry` seconds
		while the address is unavailable. Returns `False` when the server was
		stopped before it could bind."""
		while state.isRunning:
			try:
				server.bind((options.host, options.port))
				return True
			except OSError as e:
				if not options.retry:
					raise e from e
				warning(
					f"Could not bind to {options.host}:{options.port}, retrying",
					Error=str(e),
					Delay=options.retry,
				)
				waited: float = 0.0
				while waited < options.retry and state.isRunning:
					await asyncio.sleep(min(options.polling, options.retry - waited))
					waited += options.polling
		return False

	@classmethod
	async def Serve(
		cls,
		app: Application,
		options: ServerOptions = ServerOptions(),
	) -> None:
		"""Main server coroutine."""
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		server.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

		loop = asyncio.get_running_loop()
		tasks: set[asyncio.Task[None]] = set()
		# Manage server state
		state = ServerState()
		# Registers handlers for signals and exception (so that we log them). Note
		# that we'll get a `set_wakeup_fd only works in main thread of the main interpreter`
		# when this is not run out of the main thread.
		if (
			options.stopSignals
			and threading.current_thread() is threading.main_thread()
		):
			loop.add_signal_handler(SIGINT, lambda: state.stop())
			loop.add_signal_handler(SIGTERM, lambda: state.stop())
		loop.set_exception_handler(state.onException)

		try:
			if not await cls.Bind(server, options, state):
				return
			# The argument is the backlog of connections that will be accepted before
			# they are refused.
			server.listen(options.backlog)
			# This is what we need to use it with asyncio
			server.setblocking(False)
			await app.start()
			info(
				"Server listening",
				icon="🚀",
				Host=options.host,
				Port=options.port,
			)
			while state.isRunning:
				if options.condition and not options.condition():
					break
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling or 1.0
					)
					client.setblocking(False)
					task = loop.create_task(
						cls.OnRequest(app, client, loop=loop, options=options)
					)
					tasks.add(task)
					task.add_done_callback(tasks.discard)
				except asyncio.TimeoutError:
					continue
				except OSError as e:
					# This can be: [OSError] [Errno 24] Too many open files
					if e.errno == 24:
						await asyncio.sleep(0.1)
					else:
						exception(e)
			await app.stop()
		finally:
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)


def run(
	*components: Application | Service,
	host: str = HOST,
	port: int = PORT,
	backlog: int = OPTIONS.backlog,
	condition: Callable[[], bool] | None = None,
	polling: float = OPTIONS.polling,
	keepalive: float = OPTIONS.keepalive,
	retry: float = OPTIONS.retry,
) -> None:
	"""High level function to run the server."""
	files = unlimit(LimitType.Files)
	logged(LogLevel.Debug) and debug("Raised open files limit", Limit=files)
	options = ServerOptions(
		host=host,
		port=port,
		backlog=backlog,
		condition=condition,
		polling=polling,
		keepalive=keepalive,
		retry=retry,
	)
	app = mount(*components)
	try:
		asyncio.run(AIOSocketServer.Serve(app, options))
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF
