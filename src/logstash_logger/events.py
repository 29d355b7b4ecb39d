"""Log levels, formats and the log-event builder.

A log call is turned into one flat, insertion-ordered record.  Sources are
merged lowest to highest precedence; a later source overwrites an earlier
key in place:

1. ``@timestamp`` and ``@version``
2. ``level``
3. the global context (read at call time)
4. the logger context
5. the message (``message`` key) or structured payload (spread)
6. the context mapping (spread) or error (``stackTrace``)
7. the trailing error (``stackTrace``), only when 6 was not an error

All timestamps use UTC ISO-8601 with millisecond precision and a ``Z``
suffix.
"""

from __future__ import annotations

import traceback
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any, Protocol, Union, runtime_checkable


SCHEMA_VERSION = 1

TIMESTAMP_FIELD = "@timestamp"
VERSION_FIELD = "@version"
LEVEL_FIELD = "level"
MESSAGE_FIELD = "message"
STACK_TRACE_FIELD = "stackTrace"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


_LEVEL_ALIASES = {"WARNING": "WARN"}


class LogLevel(IntEnum):
    """Ordered severity; the rank drives admission, the name is emitted."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    OFF = 5

    @classmethod
    def parse(cls, value: Any) -> LogLevel:
        """Coerce a member, an integer rank or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            name = value.strip().upper()
            name = _LEVEL_ALIASES.get(name, name)
            try:
                return cls[name]
            except KeyError:
                pass
        raise ValueError(f"Unknown log level: {value!r}")


class LogFormat(str, Enum):
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def parse(cls, value: Any) -> LogFormat:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Unknown log format: {value!r}")


# ---------------------------------------------------------------------------
# Error capability
# ---------------------------------------------------------------------------


@runtime_checkable
class Traceable(Protocol):
    """Anything that can describe itself as a stack trace."""

    def trace_text(self) -> str: ...


def format_exception_trace(exc: BaseException) -> str:
    """Render *exc* the way the interpreter prints an uncaught exception.

    Frames are only present when the exception has been raised.
    """
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


# ---------------------------------------------------------------------------
# Argument variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Message:
    text: str


@dataclass(frozen=True)
class Payload:
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class Context:
    fields: Mapping[str, Any]


@dataclass(frozen=True)
class ErrorValue:
    trace: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorValue:
        return cls(format_exception_trace(exc))

    @classmethod
    def from_traceable(cls, value: Traceable) -> ErrorValue:
        return cls(value.trace_text())


MessageOrPayload = Union[Message, Payload]
ContextOrError = Union[Context, ErrorValue, None]


def as_error(value: Any) -> ErrorValue | None:
    """Classify a trailing error argument."""
    if value is None or isinstance(value, ErrorValue):
        return value
    # Traceable wins so exception subclasses can supply their own trace text.
    if isinstance(value, Traceable):
        return ErrorValue.from_traceable(value)
    if isinstance(value, BaseException):
        return ErrorValue.from_exception(value)
    raise TypeError(
        f"Expected an exception or an object with trace_text(), got {type(value).__name__}"
    )


def as_message(value: Any) -> MessageOrPayload:
    """Classify the first log argument as a message or a structured payload."""
    if isinstance(value, (Message, Payload)):
        return value
    if isinstance(value, str):
        return Message(value)
    if isinstance(value, Mapping):
        return Payload(value)
    raise TypeError(f"Expected a message string or a mapping, got {type(value).__name__}")


def as_context(value: Any) -> ContextOrError:
    """Classify the second log argument as a context mapping or an error."""
    if value is None or isinstance(value, (Context, ErrorValue)):
        return value
    if isinstance(value, Mapping):
        return Context(value)
    return as_error(value)


# ---------------------------------------------------------------------------
# Event builder
# ---------------------------------------------------------------------------


def _utc_now() -> datetime:
    """Return the current UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Format *moment* as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def build_event(
    level: LogLevel,
    message_or_payload: Any,
    context_or_error: Any = None,
    error: Any = None,
    *,
    global_context: Mapping[str, Any] | None = None,
    logger_context: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build one flat log record.

    Args:
        level: Severity, recorded by name.
        message_or_payload: A message string, a mapping spread into the
            record, or a :class:`Message` / :class:`Payload`.
        context_or_error: A mapping spread into the record, an exception
            or :class:`Traceable` recorded as ``stackTrace``, or ``None``.
        error: Trailing exception, consulted only when *context_or_error*
            is not itself an error.
        global_context: Process-wide fields, lowest precedence after the
            fixed ones.
        logger_context: Fields bound to the emitting logger.

    Returns:
        The record as an insertion-ordered dict.
    """
    head = as_message(message_or_payload)
    second = as_context(context_or_error)

    record: dict[str, Any] = {
        TIMESTAMP_FIELD: format_timestamp(_utc_now()),
        VERSION_FIELD: SCHEMA_VERSION,
        LEVEL_FIELD: LogLevel(level).name,
    }
    if global_context:
        record.update(global_context)
    if logger_context:
        record.update(logger_context)

    if isinstance(head, Message):
        record[MESSAGE_FIELD] = head.text
    else:
        record.update(head.fields)

    if isinstance(second, ErrorValue):
        record[STACK_TRACE_FIELD] = second.trace
    else:
        if second is not None:
            record.update(second.fields)
        trailing = as_error(error)
        if trailing is not None:
            record[STACK_TRACE_FIELD] = trailing.trace

    return record
