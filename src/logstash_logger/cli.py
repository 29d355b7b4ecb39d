"""Command-line interface for logstash-logger."""

from __future__ import annotations

import time
from typing import Any

import click
import yaml

from logstash_logger import __version__
from logstash_logger.config import LoggerConfig
from logstash_logger.events import LogFormat, LogLevel
from logstash_logger.logger import create_logger

_LEVEL_CHOICES = [lvl.name.lower() for lvl in LogLevel]
_CALL_LEVEL_CHOICES = [name for name in _LEVEL_CHOICES if name != "off"]
_FORMAT_CHOICES = [fmt.value for fmt in LogFormat]


@click.group()
@click.version_option(version=__version__, prog_name="logstash-logger")
def main() -> None:
    """logstash-logger -- structured JSON/YAML log records from the shell."""


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _parse_fields(items: tuple[str, ...], option: str) -> dict[str, Any]:
    """Parse ``key=value`` pairs; values are read as YAML scalars."""
    fields: dict[str, Any] = {}
    for item in items:
        if "=" not in item:
            raise click.ClickException(f"Invalid {option} format: {item!r}. Use key=value.")
        k, v = item.split("=", 1)
        if not k:
            raise click.ClickException(f"Invalid {option} format: {item!r}. Key is empty.")
        try:
            fields[k] = yaml.safe_load(v) if v else ""
        except yaml.YAMLError:
            fields[k] = v
    return fields


def _echo(text: str) -> None:
    click.echo(text, nl=False)


# ---------------------------------------------------------------------------
# Emit
# ---------------------------------------------------------------------------


@main.command()
@click.argument("message")
@click.option("--level", "level", type=click.Choice(_CALL_LEVEL_CHOICES, case_sensitive=False), default="info", show_default=True, help="Level of the record.")
@click.option("--threshold", "threshold", type=click.Choice(_LEVEL_CHOICES, case_sensitive=False), default="trace", show_default=True, help="Lowest level that is written.")
@click.option("--format", "fmt", type=click.Choice(_FORMAT_CHOICES, case_sensitive=False), default="json", show_default=True, help="Output format.")
@click.option("--file", "file_path", default=None, help="Source file recorded as the `file` field.")
@click.option("--context", "context_items", multiple=True, help="Record field as key=value.")
@click.option("--global", "global_items", multiple=True, help="Global context field as key=value.")
def emit(
    message: str,
    level: str,
    threshold: str,
    fmt: str,
    file_path: str | None,
    context_items: tuple[str, ...],
    global_items: tuple[str, ...],
) -> None:
    """Write one log record carrying MESSAGE to stdout."""
    config = LoggerConfig(
        level=threshold,
        format=fmt,
        context=_parse_fields(global_items, "--global"),
        write=_echo,
    )
    logger = create_logger(file_path, config=config)
    logger.log(level, message, _parse_fields(context_items, "--context") or None)


# ---------------------------------------------------------------------------
# Bench
# ---------------------------------------------------------------------------


@main.command()
@click.option("--count", default=100_000, show_default=True, type=click.IntRange(min=1), help="Number of records to log.")
@click.option("--format", "fmt", type=click.Choice(_FORMAT_CHOICES, case_sensitive=False), default="json", show_default=True, help="Output format.")
def bench(count: int, fmt: str) -> None:
    """Measure logging throughput with a discarding write function."""
    written = 0

    def _discard(text: str) -> None:
        nonlocal written
        written += 1

    config = LoggerConfig(format=fmt, write=_discard)
    logger = create_logger(__file__, config=config)

    before = time.perf_counter()
    for _ in range(count):
        logger.info("Hello World")
    elapsed = time.perf_counter() - before

    rate = written / elapsed if elapsed > 0 else float("inf")
    click.echo(f"Throughput: {rate:.0f} logs/s ({written} records, {elapsed:.3f}s)", err=True)
