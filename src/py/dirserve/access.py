import re
from typing import NamedTuple, Pattern

# --
# == Access Patterns
#
# Three optional regular expressions evaluated against URL paths (the
# directory path plus the entry name). An unset pattern never matches.
# `hide` removes entries from listings, `deny` removes them from listings
# and forbids direct access, and `index` designates the file served in place
# of a directory listing.


def matches(pattern: Pattern[str] | None, path: str) -> bool:
	"""Like `pattern.search(path)`, but `False` when there is no pattern."""
	return pattern is not None and pattern.search(path) is not None


def compilePattern(expression: str | None) -> Pattern[str] | None:
	"""Compiles the given expression, where an empty one means no pattern.
	Raises `re.error` when the expression is malformed."""
	return re.compile(expression) if expression else None


class AccessPatterns(NamedTuple):
	hide: Pattern[str] | None = None
	deny: Pattern[str] | None = None
	index: Pattern[str] | None = None

	@staticmethod
	def Make(
		hide: str | None = None, deny: str | None = None, index: str | None = None
	) -> "AccessPatterns":
		return AccessPatterns(
			compilePattern(hide), compilePattern(deny), compilePattern(index)
		)

	def isHidden(self, path: str) -> bool:
		"""Tells if the path is excluded from listings."""
		return matches(self.hide, path) or matches(self.deny, path)

	def isDenied(self, path: str) -> bool:
		"""Tells if direct access to the path is forbidden."""
		return matches(self.deny, path)

	def isIndex(self, path: str) -> bool:
		return matches(self.index, path)


# EOF
