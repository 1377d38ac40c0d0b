from typing import NamedTuple
from enum import Enum
import resource


class LimitType(Enum):
	Files = resource.RLIMIT_NOFILE


# Each connection holds a socket and, while a file is being sent, its handle.
REASONABLE_LIMITS: dict[LimitType, int] = {
	LimitType.Files: 10 * 10240,
}


class Limit(NamedTuple):
	type: LimitType
	soft: int
	hard: int


def limit(scope: LimitType) -> Limit:
	return Limit(scope, *resource.getrlimit(scope.value))


def unlimit(
	scope: LimitType, ratio: float = 1.0, *, maximum: int | None = 0
) -> int | bool:
	"""Raises the soft limit of the given scope towards the hard limit,
	capped to a reasonable maximum. Returns the new soft limit, or `False`
	when the limit could not be changed."""
	lm = limit(scope)
	if lm.soft == resource.RLIM_INFINITY:
		return lm.soft
	# Darwin reports really high limits that lead to OverflowErrors.
	maximum = REASONABLE_LIMITS.get(scope) if maximum == 0 else maximum
	try:
		hard = lm.hard if lm.hard != resource.RLIM_INFINITY else (maximum or lm.soft)
		target = int(lm.soft + ratio * max(0, hard - lm.soft))
		if maximum:
			target = max(lm.soft, min(maximum, target))
		resource.setrlimit(scope.value, (target, lm.hard))
		return target
	except ValueError:
		return False
	except OSError:
		return False


# EOF
