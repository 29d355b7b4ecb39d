"""logstash-logger -- structured JSON/YAML event logging with Logstash fields.

Typical use::

    from logstash_logger import LOGGER_CONFIG, LogFormat, create_logger

    LOGGER_CONFIG.context = {"application": "my-application"}
    logger = create_logger(__file__)
    logger.info("Hello World")

``LOGGER_CONFIG`` is the process-wide configuration handle shared by every
logger returned from :func:`create_logger`.
"""

from logstash_logger.config import LoggerConfig
from logstash_logger.events import (
    Context,
    ErrorValue,
    LogFormat,
    LogLevel,
    Message,
    Payload,
    Traceable,
    build_event,
)
from logstash_logger.logger import Logger, create_logger
from logstash_logger.sink import render, render_json, render_yaml, write_stdout

__version__ = "1.0.0"

LOGGER_CONFIG = LoggerConfig()

__all__ = [
    "Context",
    "ErrorValue",
    "LOGGER_CONFIG",
    "LogFormat",
    "LogLevel",
    "Logger",
    "LoggerConfig",
    "Message",
    "Payload",
    "Traceable",
    "build_event",
    "create_logger",
    "render",
    "render_json",
    "render_yaml",
    "write_stdout",
]
