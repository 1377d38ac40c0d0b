import mimetypes

mimetypes.init()

# Overrides for extensions that `mimetypes` gets wrong or does not know
MIME_TYPES: dict[str, str] = dict(
	bz2="application/x-bzip",
	gz="application/x-gzip",
	md="text/markdown; charset=utf-8",
	mjs="text/javascript; charset=utf-8",
	wasm="application/wasm",
)

TEXT_TYPES: tuple[str, ...] = (
	"text/",
	"application/javascript",
	"application/json",
	"application/xml",
)

SNIFF_LENGTH: int = 512


def isText(data: bytes) -> bool:
	"""Tells if the given prefix of a file looks like text."""
	if b"\x00" in data:
		return False
	try:
		data.decode("utf-8")
		return True
	except UnicodeDecodeError as e:
		# The prefix may end in the middle of a multi-byte sequence
		return e.start >= len(data) - 3 and e.reason == "unexpected end of data"


def charset(contentType: str) -> str:
	"""Adds a UTF-8 charset to textual content types that lack one."""
	if "charset=" in contentType or not contentType.startswith(TEXT_TYPES):
		return contentType
	else:
		return f"{contentType}; charset=utf-8"


def contentType(name: str) -> str | None:
	"""Guesses the content type from the extension of the given name, returning
	`None` when it is unknown."""
	ext = name.rsplit("/", 1)[-1].rsplit(".", 1)
	if len(ext) == 2 and (res := MIME_TYPES.get(ext[1].lower())):
		return res
	guessed, _ = mimetypes.guess_type(name, strict=False)
	return charset(guessed) if guessed else None


def sniffContentType(data: bytes) -> str:
	"""Detects the content type from the first bytes of a file."""
	return (
		"text/plain; charset=utf-8"
		if isText(data[:SNIFF_LENGTH])
		else "application/octet-stream"
	)


# EOF
