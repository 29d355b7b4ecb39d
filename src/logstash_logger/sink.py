"""Record rendering and the default stdout write function.

Two wire formats:

- ``json``  -- one compact JSON object per line
- ``yaml``  -- a YAML document introduced by a ``---`` marker line

Rendering is lenient: values the encoder cannot represent are stringified
(JSON) or skipped (YAML) so the rest of the record still gets written.
Circular references are never followed.
"""

from __future__ import annotations

import json
import logging
import math
import os
from collections.abc import Mapping
from typing import Any, Callable

import yaml

from logstash_logger.events import LogFormat

CIRCULAR_MARKER = "[Circular]"

_STDOUT_FD = 1


def _json_default(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    return str(value)


_JSON_KWARGS: dict[str, Any] = {
    "ensure_ascii": False,
    "separators": (",", ":"),
    "default": _json_default,
    "allow_nan": False,
}

# Exact types the safe dumper has a representer for (``None`` is its
# catch-all that raises).
_YAML_TYPES = frozenset(t for t in yaml.SafeDumper.yaml_representers if t is not None)
_YAML_CONTAINERS = frozenset({dict, list, tuple, set})

_SKIP = object()


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------


def render_json(record: Mapping[str, Any]) -> str:
    """Render *record* as a single JSON line terminated by ``\\n``."""
    try:
        text = json.dumps(record, **_JSON_KWARGS)
    except (TypeError, ValueError):
        # Circular reference, NaN/Infinity or a non-string key.
        logging.getLogger(__name__).debug(
            "Record not directly JSON-encodable, sanitizing", exc_info=True
        )
        text = json.dumps(_json_safe(record, ()), **_JSON_KWARGS)
    return text + "\n"


def _json_safe(value: Any, ancestors: tuple[int, ...]) -> Any:
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, Mapping) or isinstance(value, (list, tuple)):
        if id(value) in ancestors:
            return CIRCULAR_MARKER
        inner = ancestors + (id(value),)
        if isinstance(value, Mapping):
            return {_json_key(k): _json_safe(v, inner) for k, v in value.items()}
        return [_json_safe(v, inner) for v in value]
    return value


def _json_key(key: Any) -> Any:
    if key is None or isinstance(key, (str, int, float, bool)):
        return key
    return str(key)


# ---------------------------------------------------------------------------
# YAML
# ---------------------------------------------------------------------------


def render_yaml(record: Mapping[str, Any]) -> str:
    """Render *record* as a ``---``-prefixed YAML document."""
    body = yaml.safe_dump(
        _yaml_safe(record, ()),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return "---\n" + body


def _yaml_safe(value: Any, ancestors: tuple[int, ...]) -> Any:
    """Return a copy of *value* without anything the safe dumper rejects.

    Unrepresentable entries are dropped from their mapping or sequence;
    ``_SKIP`` is returned for an unrepresentable top-level value.
    """
    if isinstance(value, Mapping) or isinstance(value, (list, tuple)):
        if id(value) in ancestors:
            logging.getLogger(__name__).debug("Skipping circular reference in YAML record")
            return _SKIP
        inner = ancestors + (id(value),)
        if isinstance(value, Mapping):
            out: dict[Any, Any] = {}
            for k, v in value.items():
                if type(k) not in _YAML_TYPES:
                    logging.getLogger(__name__).debug("Skipping YAML key %r", k)
                    continue
                safe = _yaml_safe(v, inner)
                if safe is not _SKIP:
                    out[k] = safe
            return out
        items = (_yaml_safe(v, inner) for v in value)
        return [item for item in items if item is not _SKIP]
    if isinstance(value, (set, frozenset)):
        # Members become mapping keys, so only plain scalars are kept.
        kept = {v for v in value if type(v) in _YAML_TYPES and type(v) not in _YAML_CONTAINERS}
        if len(kept) != len(value):
            logging.getLogger(__name__).debug(
                "Skipping %d set members in YAML record", len(value) - len(kept)
            )
        return kept
    if type(value) not in _YAML_TYPES:
        logging.getLogger(__name__).debug(
            "Skipping value of type %s in YAML record", type(value).__name__
        )
        return _SKIP
    return value


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


_RENDERERS: dict[LogFormat, Callable[[Mapping[str, Any]], str]] = {
    LogFormat.JSON: render_json,
    LogFormat.YAML: render_yaml,
}


def render(record: Mapping[str, Any], fmt: LogFormat | str) -> str:
    """Render *record* in the wire format *fmt*."""
    return _RENDERERS[LogFormat.parse(fmt)](record)


# ---------------------------------------------------------------------------
# Default write function
# ---------------------------------------------------------------------------


def write_stdout(text: str) -> None:
    """Write *text* to standard output as UTF-8, bypassing Python's buffers.

    Lone surrogates (undecodable bytes from ``os.fsdecode`` and the like)
    are written back as the original bytes; any other lone surrogate is
    replaced with ``?``.
    """
    try:
        encoded = text.encode("utf-8", "surrogateescape")
    except UnicodeEncodeError:
        encoded = text.encode("utf-8", "replace")
    data = memoryview(encoded)
    while data:
        written = os.write(_STDOUT_FD, data)
        data = data[written:]
