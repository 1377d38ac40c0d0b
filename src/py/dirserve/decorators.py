from typing import ClassVar, Union, Callable, NamedTuple, TypeVar, Any, cast

from .http.model import HTTPRequest, HTTPResponse

T = TypeVar("T")


class Transform(NamedTuple):
	"""Represents a transformation to be applied to a request handler"""

	transform: Callable[..., Any]
	args: tuple[Any, ...]
	kwargs: dict[str, Any]


class Extra:
	"""Defines the attributes used by decorators"""

	ON: ClassVar[str] = "_extra_on"
	ON_PRIORITY: ClassVar[str] = "_extra_on_priority"
	POST: ClassVar[str] = "_extra_post"
	# When using MyPy, we can't dynamically patch values, so instead we're
	# collecting annotations by object id.
	Annotations: ClassVar[dict[int, dict[str, Any]]] = {}

	@staticmethod
	def Meta(scope: Any, *, strict: bool = False) -> dict[str, Any]:
		"""Returns the dictionary of meta attributes for the given value."""
		if isinstance(scope, type):
			if not hasattr(scope, "__extra__"):
				setattr(scope, "__extra__", {})
			return cast(dict[str, Any], getattr(scope, "__extra__"))
		elif hasattr(scope, "__dict__"):
			return cast(dict[str, Any], scope.__dict__)
		elif strict:
			raise RuntimeError(f"Metadata cannot be attached to object: {scope}")
		else:
			return Extra.Annotations.setdefault(id(scope), {})


def on(
	priority: int = 0, **methods: Union[str, list[str], tuple[str, ...]]
) -> Callable[[T], T]:
	"""The @on decorator marks a method as processing the HTTP requests
	whose method and path match. It takes arguments named after the HTTP
	methods (`GET`, or `GET_HEAD` for both), which take either a string or a
	list of strings, each describing an URI pattern (see `Route`).

	The decorated method must take a `request` argument, as well as the same
	arguments as those used in the pattern.

	>    @on(GET_HEAD=("/", "/{path:any}"))
	>    def read(self, request, path="") -> HTTPResponse:
	>        ...
	"""

	def decorator(function: T) -> T:
		meta = Extra.Meta(function)
		v = meta.setdefault(Extra.ON, [])
		meta.setdefault(Extra.ON_PRIORITY, priority)
		for http_methods, url in list(methods.items()):
			urls = (url,) if isinstance(url, str) else url
			for http_method in http_methods.upper().split("_"):
				for _ in urls:
					v.append((http_method, _))
		return function

	return decorator


def post(
	transform: Callable[..., HTTPResponse],
) -> Callable[[T], T]:
	"""Registers the given `transform` as a post-processing step of the
	decorated function. The transform is given the request and the
	response."""

	def decorator(function: T, *args: Any, **kwargs: Any) -> T:
		v = Extra.Meta(function).setdefault(Extra.POST, [])
		v.append(Transform(transform, args, kwargs))
		return function

	return decorator


def postprocess(
	request: HTTPRequest, response: HTTPResponse, transforms: list[Transform]
) -> HTTPResponse:
	for t in transforms:
		response = t.transform(request, response, *t.args, **t.kwargs) or response
	return response


# EOF
