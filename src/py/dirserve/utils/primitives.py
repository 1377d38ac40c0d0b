from typing import Any
from datetime import date, datetime
from dataclasses import is_dataclass
from pathlib import Path
from enum import Enum


TLiteral = bool | int | float | str | bytes
TComposite = (
	list[TLiteral] | dict[TLiteral, TLiteral] | set[TLiteral] | tuple[TLiteral, ...]
)
TComposite2 = (
	list[TLiteral | TComposite]
	| dict[TLiteral, TLiteral | TComposite]
	| tuple[TLiteral | TComposite, ...]
)
TPrimitive = TLiteral | TComposite | TComposite2


def asPrimitive(value: Any) -> Any:
	"""Converts the given value to a primitive value, that can be converted
	to JSON. Named tuples may define their own `asPrimitive` method."""
	if value is None or type(value) in (bool, float, int, str):
		return value
	elif isinstance(value, tuple) and hasattr(value, "_fields"):
		f = getattr(value, "asPrimitive", None)
		return (
			f()
			if f
			else {k: asPrimitive(getattr(value, k)) for k in value._fields}
		)
	elif isinstance(value, (list, tuple, set)):
		return [asPrimitive(v) for v in value]
	elif is_dataclass(value) and not isinstance(value, type):
		return {k: asPrimitive(getattr(value, k)) for k in value.__annotations__}
	elif isinstance(value, Enum):
		return asPrimitive(value.value)
	elif isinstance(value, dict):
		return {asPrimitive(k): asPrimitive(v) for k, v in value.items()}
	elif isinstance(value, Path):
		return str(value)
	elif isinstance(value, datetime) or isinstance(value, date):
		return value.isoformat()
	else:
		return value


# EOF
