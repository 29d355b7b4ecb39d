"""Process-wide logger configuration.

A single :class:`LoggerConfig` instance (``logstash_logger.LOGGER_CONFIG``)
is created with defaults at import time and shared by every logger that
``create_logger()`` hands out.  It may be mutated at any point; loggers
read the level, format, global context and write function afresh on every
call, so changes take effect immediately for existing loggers.

There is no locking.  Concurrent mutation while other threads log is
last-writer-wins.
"""

from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from logstash_logger.events import LogFormat, LogLevel
from logstash_logger.sink import write_stdout


DEFAULT_LEVEL = LogLevel.INFO
DEFAULT_FORMAT = LogFormat.JSON


class LoggerConfig(BaseModel):
    """Threshold level, output format, global context and write function."""

    model_config = ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)

    level: LogLevel = DEFAULT_LEVEL
    format: LogFormat = DEFAULT_FORMAT
    context: dict[str, Any] = Field(default_factory=dict)
    write: Callable[[str], Any] = write_stdout

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> LogLevel:
        return LogLevel.parse(value)

    @field_validator("format", mode="before")
    @classmethod
    def _parse_format(cls, value: Any) -> LogFormat:
        return LogFormat.parse(value)

    def reset(self) -> None:
        """Restore every setting to its default, in place."""
        self.level = DEFAULT_LEVEL
        self.format = DEFAULT_FORMAT
        self.context = {}
        self.write = write_stdout
