import time
from datetime import datetime
from typing import Iterable, Iterator

from . import paths
from .assets import FILES_JS, FORMAT_JS, MAIN_CSS, OPERATIONS_JS
from .http.status import HTTP_STATUS
from .listing import ListingEntry, sortEntries
from .utils.htmpl import H, Node, html
from .utils.json import json

# --
# == Rendering
#
# Listing and error pages. Every link is relative to the page, so that pages
# work the same behind a proxy that mounts them under another path.

SIZE_UNITS: str = "=KMGTPEZY"
MONTHS: tuple[str, ...] = (
	"Jan Feb Mar Apr May Jun Jul Aug Sep Oct Nov Dec".split()
)
# Timestamps closer than this to now are shown as a time of the day
RECENT: float = 12 * 60 * 60


def formatSize(size: int) -> str:
	"""Formats the size with IEC binary prefixes, like `77.8MiB`."""
	n: float = size
	units = SIZE_UNITS
	while n >= 1024 and len(units) > 1:
		n /= 1024
		units = units[1:]
	return f"{int(n)}B" if units[0] == "=" else f"{n:0.1f}{units[0]}iB"


def formatTime(timestamp: float, now: float | None = None) -> str:
	"""Formats the timestamp in local time as `3:04 PM` when it is within 12
	hours of now, or as `Jan 2, 2006` otherwise."""
	delta = timestamp - (time.time() if now is None else now)
	t = datetime.fromtimestamp(timestamp)
	if -RECENT < delta < RECENT:
		return f"{t.hour % 12 or 12}:{t.minute:02d} {'PM' if t.hour >= 12 else 'AM'}"
	else:
		return f"{MONTHS[t.month - 1]} {t.day}, {t.year}"


def header(path: str) -> Node:
	crumbs: list[Node | str] = []
	for i, (url, label) in enumerate(paths.breadcrumbs(path)):
		if i:
			crumbs.append(" ")
		crumbs.append(H.a(label, href=url))
	return H.h1(crumbs)


def page(path: str, *body: Node | str) -> Iterator[str]:
	"""Renders a page for the given request path, with a breadcrumb header
	and the given body."""
	return html(
		H.html(
			H.head(
				H.meta(charset="utf-8"),
				H.meta(name="viewport", content="width=device-width, initial-scale=1"),
				H.title(paths.printable(paths.base(path))),
				H.style(MAIN_CSS),
			),
			H.body(header(path), H.hr(), *body),
			lang="en",
		),
		doctype="html",
	)


# -----------------------------------------------------------------------------
#
# LISTINGS
#
# -----------------------------------------------------------------------------


def rows(entries: Iterable[ListingEntry], now: float | None = None) -> list[Node]:
	"""Renders the table rows of the entries, sorted by name."""
	now = time.time() if now is None else now
	return [
		H.tr(
			H.td(H.a(paths.printable(_.name), href=paths.href(_.name))),
			H.td("" if _.isDirectory else formatSize(_.size), _="size"),
			H.td(formatTime(_.modTime, now)),
		)
		for _ in sortEntries(entries)
	]


def renderRows(
	path: str, entries: Iterable[ListingEntry], now: float | None = None
) -> Iterator[str]:
	"""Renders the listing as a server-side table."""
	return page(
		path,
		H.table(
			H.thead(H.tr(H.th("Name"), H.th("Size"), H.th("Last Modified"))),
			H.tbody(rows(entries, now)),
			id="file-list",
		),
	)


def payload(entries: Iterable[ListingEntry]) -> list[dict[str, object]]:
	return [_.asPrimitive() for _ in sortEntries(entries)]


def script(entries: Iterable[ListingEntry]) -> str:
	"""Returns the script that sets and sorts the listing data."""
	# NOTE: `<` is escaped so that names can't close the script element
	data = json(payload(entries)).decode("utf8").replace("<", "\\u003c")
	return f"fileInfos = {data};\nreorderFiles(compareNames);\n"


def renderScript(path: str, entries: Iterable[ListingEntry]) -> Iterator[str]:
	"""Renders the listing as a table populated and sorted by scripts."""
	return page(
		path,
		H.div(
			H.table(
				H.thead(
					H.tr(
						H.th(
							H.input(
								type="checkbox",
								id="select-all-operations",
								onclick="selectAllOperations()",
							)
						),
						H.th("Operation"),
						H.th("Status"),
					)
				),
				H.tbody(),
				id="operations-list",
			),
			H.button("Hide", onclick="hideSelectedOperations()"),
			id="operations-div",
			style="display: none",
		),
		H.table(
			H.thead(
				H.tr(
					H.th(
						H.input(
							type="checkbox",
							id="select-all-files",
							onclick="selectAllFiles()",
						)
					),
					H.th(
						"Name",
						id="name-column-header",
						_="sortable",
						onclick="reorderFiles(compareNames)",
					),
					H.th(
						"Size",
						id="size-column-header",
						_="sortable",
						onclick="reorderFiles(compareSizes)",
					),
					H.th(
						"Last Modified",
						id="date-column-header",
						_="sortable",
						onclick="reorderFiles(compareDates)",
					),
				)
			),
			H.tbody(),
			id="file-list",
		),
		H.button(
			"Download selected",
			id="download-selected",
			onclick="downloadSelected()",
			disabled=True,
		),
		H.noscript(
			H.p(
				"Scripts are disabled, the listing is available as ",
				H.a("JSON", href="?format=json"),
				".",
			)
		),
		H.script(FILES_JS),
		H.script(OPERATIONS_JS + FORMAT_JS),
		H.script(script(entries)),
	)


# -----------------------------------------------------------------------------
#
# ERRORS
#
# -----------------------------------------------------------------------------


def renderError(path: str, status: int, message: str) -> Iterator[str]:
	"""Renders an error page, where the message is escaped."""
	return page(
		path, f"{HTTP_STATUS.get(status, 'Error')}: {paths.printable(message)}"
	)


# EOF
