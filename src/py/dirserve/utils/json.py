import json as basejson
from typing import Any

from .primitives import asPrimitive


def json(value: Any) -> bytes:
	"""Serializes the value (converted to primitives) as UTF-8 JSON."""
	return basejson.dumps(asPrimitive(value), ensure_ascii=False).encode("utf8")


# EOF
