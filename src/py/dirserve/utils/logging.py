import sys
from enum import Enum
from typing import NamedTuple, Any, TextIO
from .primitives import TPrimitive
from .term import Term

# --
# == Logging
#
# Structured entries written to a colored text stream, where the context is
# given as keyword fields, like `info("Serving", Port=8080)`.

LOG_ORIGIN: str = "dirserve"


class LogType(Enum):
	Message = 0
	Event = 20  # A served request


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40


LOG_LEVEL_COLOR = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
}


class LogEntry(NamedTuple):
	type: LogType = LogType.Message
	level: LogLevel = LogLevel.Info
	message: str | None = None
	name: str | None = None
	value: TPrimitive | None = None
	context: dict[str, TPrimitive] | None = None
	icon: str | None = None


class LogSettings:
	"""Process-wide sink settings, shared by every logger."""

	level: LogLevel = LogLevel.Info
	stream: TextIO = sys.stderr


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.NORMAL}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, list) or isinstance(value, tuple):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def send(entry: LogEntry) -> LogEntry:
	if entry.level.value < LogSettings.level.value:
		return entry
	out = LogSettings.stream
	icon: str = f" {entry.icon}" if entry.icon else ""
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	if entry.type == LogType.Event:
		out.write(
			f"{clr}{Term.BOLD}[{LOG_ORIGIN}] {entry.name}{Term.RESET} {formatData(entry.value)} {formatData(entry.context)}{Term.RESET}\n"
		)
	else:
		out.write(
			f"{clr}{Term.BOLD}[{LOG_ORIGIN}]{Term.RESET}{icon} {entry.message} {formatData(entry.context)}{Term.RESET}\n"
		)
	out.flush()
	return entry


def debug(message: str, **context: TPrimitive) -> LogEntry:
	return send(LogEntry(message=message, level=LogLevel.Debug, context=context))


def info(message: str, *, icon: str | None = None, **context: TPrimitive) -> LogEntry:
	return send(LogEntry(message=message, context=context, icon=icon))


def warning(message: str, **context: TPrimitive) -> LogEntry:
	return send(LogEntry(message=message, level=LogLevel.Warning, context=context))


def error(message: str, **context: TPrimitive) -> LogEntry:
	return send(LogEntry(message=message, level=LogLevel.Error, context=context))


def event(event: str, value: Any = None, **context: TPrimitive) -> LogEntry:
	return send(LogEntry(name=event, value=value, type=LogType.Event, context=context))


def exception(
	exception: BaseException,
	message: str | None = None,
) -> BaseException:
	try:
		stream = LogSettings.stream
		stream.write(
			f"!!! EXCP {f'{message}: [{exception.__class__.__name__}] {exception}' if message else f'[{exception.__class__.__name__}] {exception}'}\n"
		)
		tb = exception.__traceback__
		while tb:
			code = tb.tb_frame.f_code
			stream.write(
				f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n",
			)
			tb = tb.tb_next
		stream.flush()
	except Exception:  # nosec: B110
		# Swallow all exceptions so that this function can be called from an exception
		# handler safely, such as in the implementation of logging/logging sinks.
		pass
	# Return the exception so that this function can be called like:
	#   raise exception(e)
	return exception


def logged(level: LogLevel) -> bool:
	"""Tells if entries of the given level are currently emitted. This is used
	to guard against building entries when not necessary."""
	return level.value >= LogSettings.level.value


# EOF
