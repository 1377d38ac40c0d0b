from typing import (
	LiteralString,
	Optional,
	Iterable,
	Iterator,
	Union,
	Callable,
	cast,
)
from mypy_extensions import KwArg, VarArg

# --
# HTMPL defines functions to create HTML templates, used to render directory
# listings and error pages.

HTML_EMPTY: list[LiteralString] = (
	"area base br col embed hr img input link meta param source track wbr".split()
)
# Elements whose text content is emitted verbatim
HTML_RAW_TEXT: list[LiteralString] = ["script", "style"]
HTML_ESCAPED = str.maketrans(
	{"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#x27;"}
)

HTML_QUOTED = str.maketrans({"&": "&amp;", '"': "&quot;"})


def escape(text: str) -> str:
	return text.translate(HTML_ESCAPED)


def quoted(text: Optional[str]) -> str:
	return text.translate(HTML_QUOTED) if text else ""


TNodeContent = Union["Node", str, bool, float, int, None]
TAttributeContent = str | bool | float | int | None


class Node:
	__slots__ = ["name", "attributes", "children"]

	def __init__(
		self,
		name: str,
		children: Optional[Iterable[TNodeContent]] = None,
		attributes: Optional[dict[str, TAttributeContent]] = None,
	):
		self.name = name
		self.attributes: dict[str, TAttributeContent] = attributes or {}
		self.children: list[TNodeContent] = [_ for _ in children] if children else []

	def iterHTML(self) -> Iterator[str]:
		if self.name == "#text":
			yield escape(str(self.attributes.get("#value") or ""))
		else:
			yield f"<{self.name}"
			for k, v in (self.attributes or {}).items():
				if v is False or v is None:
					continue
				elif v is True:
					yield f" {k}"
				else:
					yield f' {k}="{quoted(str(v))}"'
			if self.name in HTML_EMPTY:
				yield ">"
			else:
				yield ">"
				verbatim = self.name in HTML_RAW_TEXT
				for _ in self.children:
					if isinstance(_, Node):
						if verbatim and _.name == "#text":
							yield str(_.attributes.get("#value") or "")
						else:
							yield from _.iterHTML()
					elif _ is None:
						pass
					else:
						yield str(_) if verbatim else escape(str(_))
				yield f"</{self.name}>"

	def __call__(self, *content: Union[str, "Node"]) -> "Node":
		for _ in content:
			self.children.append(text(_) if isinstance(_, str) else _)
		return self

	def __str__(self) -> str:
		return "".join(self.iterHTML())


def text(text: str) -> Node:
	return Node("#text", attributes={"#value": text})


def node(
	name: str,
	children: Optional[Iterable[TNodeContent]] = None,
	attributes: Optional[dict[str, TAttributeContent]] = None,
) -> Node:
	return Node(
		name,
		children=[text(_) if isinstance(_, str) else _ for _ in children or ()],
		attributes=dict(attributes) if attributes else {},
	)


NodeFactory = Callable[
	[
		VarArg(TNodeContent | list[TNodeContent]),
		KwArg(TAttributeContent),
	],
	Node,
]


def nodeFactory(name: str) -> NodeFactory:
	def f(
		*children: TNodeContent | list[TNodeContent],
		**attributes: TAttributeContent,
	) -> Node:
		content: list[TNodeContent] = []
		for _ in children:
			if isinstance(_, (list, tuple)):
				content += list(_)
			else:
				content.append(_)
		attrs: dict[str, TAttributeContent] = {}
		for k, v in attributes.items():
			# `_` stands for `class`, and `data_x` for `data-x`
			if k == "_":
				attrs["class"] = v
			else:
				attrs[k.replace("_", "-")] = v
		return node(name, content, attrs)

	f.__name__ = name
	return cast(NodeFactory, f)


HTML_TAGS: list[LiteralString] = (
	"""\
a body br button caption col colgroup div footer h1 h2 head header hr html
input label li link main meta nav noscript p pre script section small span
style table tbody td tfoot th thead title tr ul\
""".split()
)


class Markup:
	__slots__ = ["_factories", "_name"]

	def __init__(self, name: str, factories: dict[str, NodeFactory]):
		self._name: str = name
		self._factories: dict[str, NodeFactory] = factories

	def __getattr__(self, name: str) -> NodeFactory:
		factories = self._factories
		if name not in factories:
			raise AttributeError(
				f"No tag {name}, pick one of {','.join(factories.keys())}"
			)
		return factories[name]


def markup(name: str, tags: list[LiteralString]) -> Markup:
	return Markup(name, {_: nodeFactory(_) for _ in tags})


H: Markup = markup("html", HTML_TAGS)


def html(*nodes: Node, doctype: str | None = None) -> Iterator[str]:
	if doctype:
		yield f"{doctype}\n" if doctype.startswith("<!") else f"<!DOCTYPE {doctype}>\n"
	for _ in nodes:
		yield from _.iterHTML()


# EOF
