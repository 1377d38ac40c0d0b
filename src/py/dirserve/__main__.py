import argparse
import os
import sys
from typing import NoReturn

from . import config
from .config import ServeConfig
from .server import run
from .services.files import FileService
from .utils.logging import info

USAGE: str = "%(prog)s [OPTION]..."


class CLIParser(argparse.ArgumentParser):
	"""Exits with status 1 on invalid arguments, printing the usage."""

	def error(self, message: str) -> NoReturn:
		sys.stderr.write(f"{message}\n\n")
		self.print_help(sys.stderr)
		self.exit(1)


def parser() -> CLIParser:
	p = CLIParser(
		prog="dirserve",
		usage=USAGE,
		description="Serves the files and directory listings of a directory over HTTP.",
	)
	p.add_argument(
		"--addr",
		default=f":{config.PORT}",
		help="The network address to listen on, as HOST:PORT (default: %(default)s).",
	)
	p.add_argument(
		"--root",
		default=config.ROOT,
		help="Directory to serve files from (default: %(default)s).",
	)
	p.add_argument(
		"--hide",
		default=config.HIDE,
		help="Regular expression of file paths to hide. Paths matching this pattern "
		"are excluded from directory listings, but direct requests for this path "
		"are still resolved (default: %(default)s).",
	)
	p.add_argument(
		"--deny",
		default=config.DENY,
		help="Regular expression of file paths to deny. Paths matching this pattern "
		"are excluded from directory listings and direct requests for this path "
		"report 403 Forbidden.",
	)
	p.add_argument(
		"--index",
		default=config.INDEX,
		help="Regular expression of file paths to treat as index pages "
		"(e.g. '/index[.]html$', default none).",
	)
	p.add_argument(
		"--sendfile",
		action=argparse.BooleanOptionalAction,
		default=config.SENDFILE,
		help="Allow the use of the sendfile syscall.",
	)
	p.add_argument(
		"--listing",
		choices=ServeConfig.LISTINGS,
		default=config.LISTING,
		help="Render listings with scripts (sortable) or as plain HTML.",
	)
	p.add_argument(
		"--verbose",
		action="store_true",
		default=config.VERBOSE,
		help="Log every HTTP request.",
	)
	return p


def parseAddress(address: str) -> tuple[str, int]:
	"""Parses `HOST:PORT`, where an empty host listens on all interfaces."""
	host, sep, port = address.rpartition(":")
	if not sep or not port.isdigit() or int(port) > 65535:
		raise ValueError(f"Invalid address: {address!r}")
	return host.strip("[]") or config.HOST, int(port)


def main(args: list[str] | None = None) -> int:
	p = parser()
	options, rest = p.parse_known_args(args)
	if rest:
		p.error(f"Invalid argument: {rest[0]}")
	try:
		host, port = parseAddress(options.addr)
		serve = ServeConfig.Make(
			options.root,
			hide=options.hide,
			deny=options.deny,
			index=options.index,
			sendfile=options.sendfile,
			verbose=options.verbose,
			listing=options.listing,
		)
	except ValueError as e:
		p.error(str(e))
	info(
		"Serving directory",
		icon="📂",
		Root=os.path.abspath(serve.root),
		Host=host,
		Port=port,
	)
	run(FileService(serve), host=host, port=port)
	return 0


if __name__ == "__main__":
	sys.exit(main())

# EOF
