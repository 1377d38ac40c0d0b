import os
import re
from dataclasses import dataclass, field
from os import getenv
from typing import ClassVar, Literal

from .access import AccessPatterns, compilePattern

PORT: int = int(getenv("PORT", 8080))

# The server is meant to be reachable from the network by default
HOST: str = getenv("HOST", "0.0.0.0")  # nosec: B104

ROOT: str = getenv("DIRSERVE_ROOT", ".")

# Dot-files and dot-directories are hidden from listings
HIDE: str = getenv("DIRSERVE_HIDE", "/[.][^/]+/?$")
DENY: str = getenv("DIRSERVE_DENY", "")
INDEX: str = getenv("DIRSERVE_INDEX", "")

SENDFILE: bool = getenv("DIRSERVE_SENDFILE", "1") == "1"
VERBOSE: bool = getenv("DIRSERVE_VERBOSE", "0") == "1"

TListing = Literal["script", "html"]
LISTING: str = getenv("DIRSERVE_LISTING", "script")


@dataclass(frozen=True, slots=True)
class ServeConfig:
	"""The configuration of a file service, built once at startup and shared
	read-only by every request."""

	LISTINGS: ClassVar[tuple[str, ...]] = ("script", "html")

	root: str = "."
	patterns: AccessPatterns = field(default_factory=AccessPatterns)
	sendfile: bool = True
	verbose: bool = False
	listing: TListing = "script"

	@classmethod
	def Make(
		cls,
		root: str = ROOT,
		*,
		hide: str | None = HIDE,
		deny: str | None = DENY,
		index: str | None = INDEX,
		sendfile: bool = SENDFILE,
		verbose: bool = VERBOSE,
		listing: str = LISTING,
	) -> "ServeConfig":
		"""Validates and compiles the given options, raising a `ValueError`
		naming the first invalid one."""
		compiled: dict[str, re.Pattern[str] | None] = {}
		for name, expr in (("hide", hide), ("deny", deny), ("index", index)):
			try:
				compiled[name] = compilePattern(expr)
			except re.error as e:
				raise ValueError(f"Invalid {name} pattern: {expr!r} ({e})") from e
		if not os.path.isdir(root):
			raise ValueError(f"Invalid root directory: {root!r}")
		if listing not in cls.LISTINGS:
			raise ValueError(
				f"Invalid listing: {listing!r}, pick one of {', '.join(cls.LISTINGS)}"
			)
		return cls(
			root=root,
			patterns=AccessPatterns(**compiled),
			sendfile=sendfile,
			verbose=verbose,
			listing="html" if listing == "html" else "script",
		)


# EOF
