import errno
import os
import posixpath
import stat as statmod
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, BinaryIO, ClassVar, NamedTuple, TypeVar, cast

# --
# == Filesystem
#
# A rooted filesystem where names are slash-separated, unrooted paths that
# are validated before being joined to the root, so that no operation can
# reach outside of it. Errors are reported with the logical name, never with
# the host path.

T = TypeVar("T")

# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


class FSError(Exception):
	"""Base class of filesystem errors, carrying the HTTP status they
	translate to."""

	STATUS: ClassVar[int] = 500

	def __init__(self, op: str, path: str, message: str):
		super().__init__(f"{op} {path}: {message}")
		self.op: str = op
		self.path: str = path
		self.message: str = message

	@property
	def status(self) -> int:
		return self.STATUS


class NotExistError(FSError):
	STATUS = 404


class PermissionDeniedError(FSError):
	STATUS = 403


class InvalidError(FSError):
	STATUS = 400


class ExistError(FSError):
	STATUS = 409


class InternalError(FSError):
	STATUS = 500


ERRNO_ERRORS: dict[int, type[FSError]] = {
	errno.ENOENT: NotExistError,
	errno.ENOTDIR: NotExistError,
	errno.EACCES: PermissionDeniedError,
	errno.EPERM: PermissionDeniedError,
	errno.EEXIST: ExistError,
	errno.ENOTEMPTY: ExistError,
	errno.EINVAL: InvalidError,
}


def fsError(op: str, path: str, error: OSError) -> FSError:
	"""Translates an OS error into its `FSError` counterpart."""
	kind = ERRNO_ERRORS.get(error.errno or 0, InternalError)
	return kind(op, path, error.strerror or str(error))


# -----------------------------------------------------------------------------
#
# DATA MODEL
#
# -----------------------------------------------------------------------------


class Capability(Enum):
	Enumerate = "readdir"
	Stat = "stat"
	Write = "write"
	Rename = "rename"
	Remove = "remove"
	MakeDir = "mkdir"


class FileInfo(NamedTuple):
	name: str
	size: int
	modTime: float
	isDirectory: bool
	isRegular: bool
	isSymlink: bool
	mode: int

	@staticmethod
	def FromStat(name: str, st: os.stat_result) -> "FileInfo":
		return FileInfo(
			name=name,
			size=st.st_size,
			modTime=st.st_mtime,
			isDirectory=statmod.S_ISDIR(st.st_mode),
			isRegular=statmod.S_ISREG(st.st_mode),
			isSymlink=statmod.S_ISLNK(st.st_mode),
			mode=st.st_mode,
		)


class DirEntry(NamedTuple):
	"""A directory entry as enumerated, symlinks are not resolved."""

	name: str
	isDirectory: bool
	isSymlink: bool


def validPath(name: str) -> bool:
	"""Tells if `name` is a slash-separated, unrooted path without empty,
	`.` or `..` elements, `.` alone designating the root."""
	if name == ".":
		return True
	if not name or "\x00" in name:
		return False
	return all(_ not in ("", ".", "..") for _ in name.split("/"))


def require(value: T, capability: Capability, name: str = ".") -> T:
	"""Returns `value` when it supports the given capability, raising an
	`InvalidError` otherwise."""
	if capability not in getattr(value, "capabilities", ()):
		raise InvalidError(capability.value, name, "unsupported operation")
	return value


# -----------------------------------------------------------------------------
#
# FILES
#
# -----------------------------------------------------------------------------


class File(ABC):
	"""An open handle, closed on context exit."""

	capabilities: frozenset[Capability] = frozenset((Capability.Stat,))

	def __init__(self, name: str):
		self.name: str = name
		self.isClosed: bool = False

	@abstractmethod
	def fileno(self) -> int: ...

	def stat(self) -> FileInfo:
		try:
			return FileInfo.FromStat(
				posixpath.basename(self.name) or self.name, os.fstat(self.fileno())
			)
		except OSError as e:
			raise fsError("stat", self.name, e) from e

	@abstractmethod
	def _close(self) -> None: ...

	def close(self) -> None:
		if not self.isClosed:
			self.isClosed = True
			self._close()

	def __enter__(self: T) -> T:
		return self

	def __exit__(self, *args: Any) -> None:
		self.close()

	def __repr__(self) -> str:
		return f"({self.__class__.__name__} {self.name!r}{' :closed' if self.isClosed else ''})"


class RegularFile(File):
	"""A handle on a non-directory entry, exposing its `stream`."""

	def __init__(self, name: str, stream: BinaryIO, *, writable: bool = False):
		super().__init__(name)
		self.stream: BinaryIO = stream
		if writable:
			self.capabilities = File.capabilities | {Capability.Write}

	def fileno(self) -> int:
		return self.stream.fileno()

	def read(self, size: int = -1) -> bytes:
		return self.stream.read(size)

	def write(self, data: bytes) -> int:
		try:
			return require(self, Capability.Write, self.name).stream.write(data)
		except OSError as e:
			raise fsError("write", self.name, e) from e

	def _close(self) -> None:
		self.stream.close()


class DirectoryFile(File):
	"""A handle on a directory, which can be enumerated."""

	capabilities = frozenset((Capability.Stat, Capability.Enumerate))

	def __init__(self, name: str, fd: int):
		super().__init__(name)
		self.fd: int = fd

	def fileno(self) -> int:
		return self.fd

	def readDir(self) -> list[DirEntry]:
		"""Lists the entries of the directory, in no particular order."""
		res: list[DirEntry] = []
		try:
			with os.scandir(self.fd) as entries:
				for entry in entries:
					is_link = entry.is_symlink()
					res.append(
						DirEntry(
							entry.name,
							not is_link and entry.is_dir(follow_symlinks=False),
							is_link,
						)
					)
		except OSError as e:
			raise fsError("readdir", self.name, e) from e
		return res

	def _close(self) -> None:
		os.close(self.fd)


# -----------------------------------------------------------------------------
#
# FILESYSTEMS
#
# -----------------------------------------------------------------------------


class FS(ABC):
	capabilities: frozenset[Capability] = frozenset()

	@abstractmethod
	def open(self, name: str) -> File: ...


class DirFS(FS):
	"""A filesystem rooted at the given host directory, supporting every
	capability."""

	capabilities = frozenset(Capability)

	def __init__(self, root: str):
		self.root: str = root

	def path(self, op: str, name: str) -> str:
		"""Returns the host path for the given name."""
		if not self.root:
			raise InvalidError(op, name, "filesystem with empty root")
		if not validPath(name):
			raise InvalidError(op, name, "invalid argument")
		return self.root if name == "." else os.path.join(self.root, *name.split("/"))

	def open(self, name: str) -> File:
		"""Opens the given entry for reading, as a `DirectoryFile` or
		a `RegularFile`."""
		path = self.path("open", name)
		try:
			fd = os.open(path, os.O_RDONLY | getattr(os, "O_CLOEXEC", 0))
		except OSError as e:
			raise fsError("open", name, e) from e
		try:
			if statmod.S_ISDIR(os.fstat(fd).st_mode):
				return DirectoryFile(name, fd)
			else:
				return RegularFile(name, cast(BinaryIO, os.fdopen(fd, "rb")))
		except OSError as e:
			os.close(fd)
			raise fsError("open", name, e) from e

	def openFile(self, name: str, flags: int = os.O_RDONLY, perm: int = 0o666) -> File:
		"""Opens the given file with explicit `os.O_*` flags, which can create
		it and open it for writing."""
		path = self.path("open", name)
		try:
			fd = os.open(path, flags | getattr(os, "O_CLOEXEC", 0), perm)
		except OSError as e:
			raise fsError("open", name, e) from e
		access = flags & (os.O_RDONLY | os.O_WRONLY | os.O_RDWR)
		if statmod.S_ISDIR(os.fstat(fd).st_mode):
			return DirectoryFile(name, fd)
		elif access == os.O_RDONLY:
			return RegularFile(name, cast(BinaryIO, os.fdopen(fd, "rb")))
		else:
			mode = "ab" if flags & os.O_APPEND else "wb" if access == os.O_WRONLY else "r+b"
			# NOTE: `fdopen` never truncates, `O_TRUNC` already did if given
			return RegularFile(
				name, cast(BinaryIO, os.fdopen(fd, mode)), writable=True
			)

	def stat(self, name: str) -> FileInfo:
		"""Returns the information of the given entry, following symlinks."""
		path = self.path("stat", name)
		try:
			return FileInfo.FromStat(posixpath.basename(name) or name, os.stat(path))
		except OSError as e:
			raise fsError("stat", name, e) from e

	def lstat(self, name: str) -> FileInfo:
		"""Like `stat`, but describes symlinks themselves."""
		path = self.path("lstat", name)
		try:
			return FileInfo.FromStat(posixpath.basename(name) or name, os.lstat(path))
		except OSError as e:
			raise fsError("lstat", name, e) from e

	def writeFile(self, name: str, data: bytes, perm: int = 0o666) -> None:
		"""Writes the data to the named file, truncating it when it exists."""
		with self.openFile(
			name, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, perm
		) as f:
			cast(RegularFile, require(f, Capability.Write, name)).write(data)

	def makeDir(self, name: str, perm: int = 0o777) -> None:
		path = self.path("mkdir", name)
		try:
			os.mkdir(path, perm)
		except OSError as e:
			raise fsError("mkdir", name, e) from e

	def rename(self, oldName: str, newName: str) -> None:
		old = self.path("rename", oldName)
		new = self.path("rename", newName)
		try:
			os.rename(old, new)
		except OSError as e:
			raise fsError("rename", f"{oldName} {newName}", e) from e

	def remove(self, name: str) -> None:
		"""Removes the given file or empty directory."""
		path = self.path("remove", name)
		try:
			if os.path.isdir(path) and not os.path.islink(path):
				os.rmdir(path)
			else:
				os.unlink(path)
		except OSError as e:
			raise fsError("remove", name, e) from e

	def removeAll(self, name: str) -> None:
		removeAll(self, name)

	def __repr__(self) -> str:
		return f"(DirFS {self.root!r})"


# -----------------------------------------------------------------------------
#
# HELPERS
#
# -----------------------------------------------------------------------------
#
# These functions look up the capability on the filesystem before
# delegating, failing with an `InvalidError` when it is not supported.


def stat(fs: FS, name: str) -> FileInfo:
	return cast(DirFS, require(fs, Capability.Stat, name)).stat(name)


def readDir(fs: FS, name: str) -> list[DirEntry]:
	with fs.open(name) as f:
		return cast(DirectoryFile, require(f, Capability.Enumerate, name)).readDir()


def writeFile(fs: FS, name: str, data: bytes, perm: int = 0o666) -> None:
	cast(DirFS, require(fs, Capability.Write, name)).writeFile(name, data, perm)


def makeDir(fs: FS, name: str, perm: int = 0o777) -> None:
	cast(DirFS, require(fs, Capability.MakeDir, name)).makeDir(name, perm)


def rename(fs: FS, oldName: str, newName: str) -> None:
	cast(DirFS, require(fs, Capability.Rename, oldName)).rename(oldName, newName)


def remove(fs: FS, name: str) -> None:
	cast(DirFS, require(fs, Capability.Remove, name)).remove(name)


def removeAll(fs: FS, name: str) -> None:
	"""Removes the named entry and everything it contains. A missing entry
	is not an error, otherwise everything that can be removed is, and the
	first error encountered is raised."""
	try:
		info = cast(DirFS, require(fs, Capability.Stat, name)).lstat(name)
	except NotExistError:
		return
	first: FSError | None = None
	if info.isDirectory and not info.isSymlink:
		for entry in readDir(fs, name):
			child = entry.name if name == "." else posixpath.join(name, entry.name)
			try:
				removeAll(fs, child)
			except FSError as e:
				first = first or e
	if first:
		raise first
	remove(fs, name)


# EOF
