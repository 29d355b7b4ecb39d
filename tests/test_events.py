"""Tests for log levels, argument classification and the event builder."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

FROZEN = datetime(2018, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def frozen_clock(monkeypatch):
    import logstash_logger.events as mod

    monkeypatch.setattr(mod, "_utc_now", lambda: FROZEN)
    return FROZEN


@pytest.fixture
def caught_error() -> ValueError:
    try:
        raise ValueError("An unexpected exception")
    except ValueError as exc:
        return exc


class _TracedFailure:
    def trace_text(self) -> str:
        return "TracedFailure: custom trace\n  at somewhere"


# ---------------------------------------------------------------------------
# A) Levels and formats
# ---------------------------------------------------------------------------


class TestLogLevel:
    def test_ranks_are_ordered(self):
        from logstash_logger.events import LogLevel

        ranks = [lvl.value for lvl in LogLevel]
        assert ranks == [0, 1, 2, 3, 4, 5]
        assert LogLevel.TRACE < LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARN
        assert LogLevel.WARN < LogLevel.ERROR < LogLevel.OFF

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("info", "INFO"),
            ("  Debug ", "DEBUG"),
            ("warning", "WARN"),
            (4, "ERROR"),
        ],
    )
    def test_parse(self, raw, expected):
        from logstash_logger.events import LogLevel

        assert LogLevel.parse(raw).name == expected

    @pytest.mark.parametrize("raw", ["verbose", 9, None, True])
    def test_parse_rejects_unknown(self, raw):
        from logstash_logger.events import LogLevel

        with pytest.raises(ValueError):
            LogLevel.parse(raw)

    def test_format_parse(self):
        from logstash_logger.events import LogFormat

        assert LogFormat.parse("YAML") is LogFormat.YAML
        assert LogFormat.parse(LogFormat.JSON) is LogFormat.JSON
        with pytest.raises(ValueError):
            LogFormat.parse("xml")


# ---------------------------------------------------------------------------
# B) Argument classification
# ---------------------------------------------------------------------------


class TestArgumentVariants:
    def test_message_and_payload(self):
        from logstash_logger.events import Message, Payload, as_message

        assert as_message("hi") == Message("hi")
        assert as_message({"a": 1}) == Payload({"a": 1})

    def test_message_rejects_other_types(self):
        from logstash_logger.events import as_message

        with pytest.raises(TypeError):
            as_message(42)

    def test_context_variants(self, caught_error):
        from logstash_logger.events import Context, ErrorValue, as_context

        assert as_context(None) is None
        assert as_context({"path": "/x"}) == Context({"path": "/x"})
        assert isinstance(as_context(caught_error), ErrorValue)

    def test_context_rejects_plain_values(self):
        from logstash_logger.events import as_context

        with pytest.raises(TypeError):
            as_context("not a mapping")

    def test_exception_trace_includes_frames(self, caught_error):
        from logstash_logger.events import ErrorValue

        trace = ErrorValue.from_exception(caught_error).trace
        assert trace.startswith("Traceback (most recent call last):")
        assert "ValueError: An unexpected exception" in trace

    def test_unraised_exception_has_summary_only(self):
        from logstash_logger.events import format_exception_trace

        assert format_exception_trace(KeyError("k")) == "KeyError: 'k'\n"

    def test_traceable_object(self):
        from logstash_logger.events import Traceable, as_error

        failure = _TracedFailure()
        assert isinstance(failure, Traceable)
        assert as_error(failure).trace == failure.trace_text()


# ---------------------------------------------------------------------------
# C) Timestamps
# ---------------------------------------------------------------------------


class TestTimestamp:
    def test_millisecond_precision_with_z(self):
        from logstash_logger.events import format_timestamp

        assert format_timestamp(FROZEN) == "2018-01-02T03:04:05.678Z"

    def test_converts_to_utc(self):
        from logstash_logger.events import format_timestamp

        local = FROZEN.astimezone(timezone(timedelta(hours=2)))
        assert format_timestamp(local) == "2018-01-02T03:04:05.678Z"

    def test_truncates_microseconds(self):
        from logstash_logger.events import format_timestamp

        moment = datetime(2020, 5, 6, 7, 8, 9, 999999, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2020-05-06T07:08:09.999Z"


# ---------------------------------------------------------------------------
# D) Event builder
# ---------------------------------------------------------------------------


class TestBuildEvent:
    def test_message_only(self, frozen_clock):
        from logstash_logger.events import LogLevel, build_event

        record = build_event(LogLevel.INFO, "Hello World")
        assert record == {
            "@timestamp": "2018-01-02T03:04:05.678Z",
            "@version": 1,
            "level": "INFO",
            "message": "Hello World",
        }
        assert list(record) == ["@timestamp", "@version", "level", "message"]

    def test_error_as_second_argument(self, frozen_clock, caught_error):
        from logstash_logger.events import LogLevel, build_event, format_exception_trace

        record = build_event(LogLevel.ERROR, "Caught unexpected exception", caught_error)
        assert record["stackTrace"] == format_exception_trace(caught_error)
        assert record["message"] == "Caught unexpected exception"
        assert record["level"] == "ERROR"

    def test_context_and_trailing_error(self, frozen_clock, caught_error):
        from logstash_logger.events import LogLevel, build_event, format_exception_trace

        record = build_event(LogLevel.ERROR, "msg", {"path": "/test"}, caught_error)
        assert record["path"] == "/test"
        assert record["stackTrace"] == format_exception_trace(caught_error)

    def test_second_argument_error_wins_over_trailing(self, frozen_clock, caught_error):
        from logstash_logger.events import LogLevel, build_event

        record = build_event(LogLevel.ERROR, "msg", _TracedFailure(), caught_error)
        assert record["stackTrace"] == _TracedFailure().trace_text()

    def test_trailing_error_ignored_without_validation(self, frozen_clock, caught_error):
        from logstash_logger.events import LogLevel, build_event

        # The trailing argument is never classified when the second is an error.
        record = build_event(LogLevel.ERROR, "msg", caught_error, "not an error")
        assert "stackTrace" in record

    def test_trailing_error_without_context(self, frozen_clock, caught_error):
        from logstash_logger.events import LogLevel, build_event

        record = build_event(LogLevel.WARN, "msg", None, caught_error)
        assert "stackTrace" in record

    def test_no_stack_trace_without_error(self, frozen_clock):
        from logstash_logger.events import LogLevel, build_event

        record = build_event(LogLevel.INFO, "msg", {"pages": [1, 2, 3]})
        assert "stackTrace" not in record
        assert record["pages"] == [1, 2, 3]

    def test_payload_is_spread_without_message(self, frozen_clock):
        from logstash_logger.events import LogLevel, build_event

        record = build_event(LogLevel.INFO, {"event": "login", "user": {"id": 7}})
        assert "message" not in record
        assert record["event"] == "login"
        assert record["user"] == {"id": 7}

    def test_payload_message_key_kept_as_is(self, frozen_clock):
        from logstash_logger.events import LogLevel, build_event

        record = build_event(LogLevel.INFO, {"message": ["not", "a", "string"]})
        assert record["message"] == ["not", "a", "string"]

    def test_payload_overrides_fixed_fields(self, frozen_clock):
        from logstash_logger.events import LogLevel, build_event

        record = build_event(LogLevel.INFO, {"@timestamp": "custom", "level": "CUSTOM"})
        assert record["@timestamp"] == "custom"
        assert record["level"] == "CUSTOM"

    def test_precedence(self, frozen_clock):
        from logstash_logger.events import LogLevel, build_event

        record = build_event(
            LogLevel.INFO,
            {"shared": "payload", "p": 1},
            {"shared": "context", "c": 1},
            global_context={"shared": "global", "g": 1, "l": 0},
            logger_context={"shared": "logger", "l": 1, "m": 0},
        )
        assert record["shared"] == "context"
        assert record["g"] == 1
        assert record["l"] == 1
        assert record["p"] == 1
        assert record["c"] == 1

    def test_logger_context_overrides_global(self, frozen_clock):
        from logstash_logger.events import LogLevel, build_event

        record = build_event(
            LogLevel.INFO,
            "Hello World",
            global_context={"application": "my-application", "file": "global"},
            logger_context={"file": "src/foobar.py"},
        )
        assert record["application"] == "my-application"
        assert record["file"] == "src/foobar.py"

    def test_message_overrides_contexts(self, frozen_clock):
        from logstash_logger.events import LogLevel, build_event

        record = build_event(
            LogLevel.INFO,
            "real",
            global_context={"message": "g"},
            logger_context={"message": "l"},
        )
        assert record["message"] == "real"

    def test_overwritten_key_keeps_position(self, frozen_clock):
        from logstash_logger.events import LogLevel, build_event

        record = build_event(LogLevel.INFO, "m", {"level": "X"}, global_context={"app": "a"})
        assert list(record)[:4] == ["@timestamp", "@version", "level", "app"]
        assert record["level"] == "X"

    def test_values_pass_through_unchanged(self, frozen_clock):
        from logstash_logger.events import LogLevel, build_event

        nested = {"a": [1, {"b": None}], "flag": True}
        record = build_event(LogLevel.DEBUG, "m", nested)
        assert record["a"] is nested["a"]
        assert record["flag"] is True

    def test_identical_inputs_differ_only_in_timestamp(self, monkeypatch):
        import logstash_logger.events as mod
        from logstash_logger.events import LogLevel, build_event

        moments = iter([FROZEN, FROZEN + timedelta(seconds=1)])
        monkeypatch.setattr(mod, "_utc_now", lambda: next(moments))

        first = build_event(LogLevel.INFO, "m", {"k": "v"}, global_context={"g": 1})
        second = build_event(LogLevel.INFO, "m", {"k": "v"}, global_context={"g": 1})
        assert first["@timestamp"] != second["@timestamp"]
        first.pop("@timestamp")
        second.pop("@timestamp")
        assert first == second

    def test_does_not_mutate_sources(self, frozen_clock):
        from logstash_logger.events import LogLevel, build_event

        global_ctx = {"g": 1}
        context = {"c": 1}
        build_event(LogLevel.INFO, "m", context, global_context=global_ctx)
        assert global_ctx == {"g": 1}
        assert context == {"c": 1}
