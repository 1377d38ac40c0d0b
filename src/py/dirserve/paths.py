from urllib.parse import quote

# --
# == Request Paths
#
# Request paths are absolute, slash-separated and clean (no `.`, `..` or
# repeated separators). A trailing slash marks a directory and is kept
# through cleaning.

# Characters that don't need escaping in a URL path
PATH_SAFE: str = "/!$&'()*+,;=:@"


def clean(path: str) -> str:
	"""Lexically cleans the path as an absolute path, resolving `.` and `..`
	and collapsing repeated separators. The result never ends with a slash,
	except for the root."""
	segments: list[str] = []
	for segment in path.split("/"):
		if not segment or segment == ".":
			continue
		elif segment == "..":
			if segments:
				segments.pop()
		else:
			segments.append(segment)
	return "/" + "/".join(segments)


def normalize(path: str) -> str:
	"""Returns the request path for the given (decoded) URL path, preserving
	its trailing slash."""
	res = clean(path)
	return f"{res}/" if path.endswith("/") and not res.endswith("/") else res


def isDirectoryPath(path: str) -> bool:
	return path.endswith("/")


def base(path: str) -> str:
	"""Returns the last element of the path, ignoring trailing slashes. The
	root is `/` and the empty path is `.`."""
	if not path:
		return "."
	stripped = path.rstrip("/")
	return stripped.rsplit("/", 1)[-1] if stripped else "/"


def fsName(path: str) -> str:
	"""Returns the filesystem name of a request path, relative to the root."""
	return path.strip("/") or "."


def join(path: str, name: str) -> str:
	"""Joins a directory request path and an entry name."""
	return f"{path}{name}" if path.endswith("/") else f"{path}/{name}"


def printable(name: str) -> str:
	"""Returns the name for display. Names read from the filesystem carry the
	bytes that aren't UTF-8 as surrogate escapes, which are replaced here."""
	return name.encode("utf8", "surrogateescape").decode("utf8", "replace")


def href(name: str) -> str:
	"""Returns the relative URL for the given name, where the bytes of the
	name are percent-encoded as they are on disk. A name whose first
	segment contains a colon is prefixed with `./` so that it is not taken
	for a scheme."""
	url = quote(name.encode("utf8", "surrogateescape"), safe=PATH_SAFE)
	return f"./{url}" if ":" in url.split("/", 1)[0] else url


def redirection(path: str, isDirectory: bool) -> str:
	"""Returns the relative URL that fixes the trailing slash of `path`:
	directories always have one, files never do."""
	name = href(base(path))
	return f"{name}/" if isDirectory else f"../{name}"


def breadcrumbs(path: str) -> list[tuple[str, str]]:
	"""Returns the `(url, label)` of each ancestor of the path, down to the
	path itself, where URLs are relative to the path."""
	names = (path[:-1] if path.endswith("/") else path).split("/")
	is_dir = path.endswith("/")
	count = len(names)
	res: list[tuple[str, str]] = []
	for i, name in enumerate(names):
		label = f"{printable(name)}/"
		url = "." + "/.." * (count - 1 - i)
		if not is_dir:
			if i == count - 1:
				label = printable(name)
				url = href(base(path))
			elif url.endswith("/.."):
				url = url[:-3]
		res.append((url, label))
	return res


# EOF
