from ..http.model import HTTPRequest, HTTPResponse
from ..decorators import post

# Listings and files may change at any time, so nothing is ever cached
NO_CACHE: str = (
	"no-cache, no-store, no-transform, must-revalidate, private, max-age=0"
)


@post
def nocache(request: HTTPRequest, response: HTTPResponse) -> HTTPResponse:
	"""A post decorator that ensures that responses are never cached."""
	return setNoCacheHeaders(response)


def setNoCacheHeaders(response: HTTPResponse) -> HTTPResponse:
	return response.setHeader("Cache-Control", NO_CACHE)


# EOF
