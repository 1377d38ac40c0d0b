from typing import Any, Literal, NamedTuple, Iterable

from . import paths
from .access import AccessPatterns
from .fs import DirFS, DirEntry, DirectoryFile, FileInfo, FSError
from .utils.logging import LogLevel, debug, logged

# --
# == Listing
#
# Enumerates a directory into listing entries, resolving symlinks and
# filtering hidden and denied entries. A directory may instead designate
# an index entry to be served in its place.

TSortKey = Literal["name", "size", "date"]


class ListingEntry(NamedTuple):
	"""An entry of a listing, where directory names end with a slash and
	`size` is only meaningful for regular files."""

	name: str
	size: int
	modTime: float

	@property
	def isDirectory(self) -> bool:
		return self.name.endswith("/")

	@property
	def date(self) -> int:
		"""The modification time in whole seconds since the epoch."""
		return int(self.modTime)

	def asPrimitive(self) -> dict[str, Any]:
		"""Returns the entry as JSON. Names that aren't valid UTF-8 are given
		in printable form, with their exact `href` alongside."""
		name = paths.printable(self.name)
		res: dict[str, Any] = {"name": name, "size": self.size, "date": self.date}
		if name != self.name:
			res["href"] = paths.href(self.name)
		return res


class IndexEntry(NamedTuple):
	"""The entry to serve in place of a directory listing."""

	path: str
	name: str
	info: FileInfo


def resolve(fs: DirFS, name: str, entry: DirEntry) -> FileInfo | None:
	"""Returns the information on the entry, following symlinks, or `None`
	when it can't be obtained, as with broken links."""
	try:
		return fs.stat(name) if entry.isSymlink else fs.lstat(name)
	except FSError as e:
		logged(LogLevel.Debug) and debug(
			"Dropped unresolvable entry", Name=name, Error=str(e)
		)
		return None


def enumerateDirectory(
	fs: DirFS,
	directory: DirectoryFile,
	path: str,
	patterns: AccessPatterns,
) -> list[ListingEntry] | IndexEntry:
	"""Lists the entries of the `directory` open at the request `path`. Entries
	are visited by name so that, when more than one matches the index
	pattern, the first one in name order is returned."""
	res: list[ListingEntry] = []
	parent = paths.fsName(path)
	for entry in sorted(directory.readDir(), key=lambda _: _.name):
		name = entry.name if parent == "." else f"{parent}/{entry.name}"
		info = resolve(fs, name, entry)
		if info is None:
			continue
		url = paths.join(path, entry.name)
		if patterns.isHidden(url):
			continue
		if not info.isDirectory and patterns.isIndex(url):
			return IndexEntry(url, name, info)
		res.append(
			ListingEntry(
				f"{entry.name}/" if info.isDirectory else entry.name,
				info.size if info.isRegular else 0,
				info.modTime,
			)
		)
	return res


def sortEntries(
	entries: Iterable[ListingEntry], by: TSortKey = "name", order: int = 1
) -> list[ListingEntry]:
	"""Sorts the entries by name, size or date, where equal sizes and dates
	fall back to the name order. A negative order sorts descending."""
	if by == "size":
		key: Any = lambda _: (_.size, _.name)
	elif by == "date":
		key = lambda _: (_.date, _.name)
	else:
		key = lambda _: _.name
	return sorted(entries, key=key, reverse=order < 0)


class Ordering(NamedTuple):
	"""The sort state of a listing, as changed by clicking column headers."""

	by: TSortKey | None = None
	order: int = 0

	def click(self, column: TSortKey) -> "Ordering":
		"""Clicking the current column flips the order, clicking another
		column sorts it ascending."""
		if column == self.by:
			return Ordering(column, -self.order)
		else:
			return Ordering(column, 1)

	def apply(self, entries: Iterable[ListingEntry]) -> list[ListingEntry]:
		return (
			sortEntries(entries, self.by, self.order) if self.by else list(entries)
		)


# EOF
