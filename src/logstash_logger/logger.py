"""Loggers: level admission, record building and emission.

Each admitted call is resolved synchronously: build the record, render it
in the configured format, and hand the text to the configured write
function in a single call.  Calls below the threshold return before any
record is built.  Write failures propagate to the caller.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from logstash_logger.config import LoggerConfig
from logstash_logger.events import LogLevel, build_event
from logstash_logger.sink import render


def _admits(level: LogLevel, threshold: LogLevel) -> bool:
    # OFF is a threshold, never a call level.
    return level is not LogLevel.OFF and level >= threshold


class Logger:
    """Emits records carrying a fixed logger context.

    Args:
        context: Fields bound to every record from this logger.  Copied
            on construction and never mutated afterwards.
        config: Shared configuration handle, read on every call.
    """

    def __init__(self, context: Mapping[str, Any] | None, config: LoggerConfig) -> None:
        self._context: Mapping[str, Any] = MappingProxyType(dict(context or {}))
        self._config = config

    @property
    def context(self) -> Mapping[str, Any]:
        return self._context

    @property
    def config(self) -> LoggerConfig:
        return self._config

    def trace(self, message: Any, context_or_error: Any = None, error: Any = None) -> None:
        self.log(LogLevel.TRACE, message, context_or_error, error)

    def debug(self, message: Any, context_or_error: Any = None, error: Any = None) -> None:
        self.log(LogLevel.DEBUG, message, context_or_error, error)

    def info(self, message: Any, context_or_error: Any = None, error: Any = None) -> None:
        self.log(LogLevel.INFO, message, context_or_error, error)

    def warn(self, message: Any, context_or_error: Any = None, error: Any = None) -> None:
        self.log(LogLevel.WARN, message, context_or_error, error)

    warning = warn

    def error(self, message: Any, context_or_error: Any = None, error: Any = None) -> None:
        self.log(LogLevel.ERROR, message, context_or_error, error)

    def is_enabled(self, level: LogLevel | str | int) -> bool:
        """Return whether a call at *level* would be written."""
        return _admits(LogLevel.parse(level), self._config.level)

    def log(
        self,
        level: LogLevel | str | int,
        message: Any,
        context_or_error: Any = None,
        error: Any = None,
    ) -> None:
        """Build, render and write one record if *level* is admitted."""
        level = LogLevel.parse(level)
        config = self._config
        if not _admits(level, config.level):
            return
        record = self.create_log_event(level, message, context_or_error, error)
        config.write(render(record, config.format))

    def create_log_event(
        self,
        level: LogLevel,
        message: Any,
        context_or_error: Any = None,
        error: Any = None,
    ) -> dict[str, Any]:
        """Build the record for a call without admission or output."""
        return build_event(
            level,
            message,
            context_or_error,
            error,
            global_context=self._config.context,
            logger_context=self._context,
        )

    def __repr__(self) -> str:
        return f"Logger(context={dict(self._context)!r})"


def create_logger(
    file_or_context: str | os.PathLike[str] | Mapping[str, Any] | None = None,
    context: Mapping[str, Any] | None = None,
    *,
    config: LoggerConfig | None = None,
) -> Logger:
    """Create a logger bound to the shared configuration.

    Args:
        file_or_context: A source file path, recorded as ``file`` relative
            to the working directory, or a mapping used as the whole
            logger context.
        context: Extra fields merged after ``file``.  Ignored when
            *file_or_context* is a mapping.
        config: Configuration handle; defaults to the process-wide
            ``LOGGER_CONFIG``.

    Example::

        logger = create_logger(__file__, {"loggerType": "request-logs"})
        logger.info("Received request", {"path": "/hello"})
    """
    if config is None:
        from logstash_logger import LOGGER_CONFIG

        config = LOGGER_CONFIG

    if not file_or_context:
        bound: dict[str, Any] = {}
    elif isinstance(file_or_context, Mapping):
        bound = dict(file_or_context)
    elif isinstance(file_or_context, (str, os.PathLike)):
        bound = {"file": os.path.relpath(os.fspath(file_or_context))}
        if context:
            bound.update(context)
    else:
        raise TypeError(
            f"Expected a file path or a mapping, got {type(file_or_context).__name__}"
        )
    return Logger(bound, config)
