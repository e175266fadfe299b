"""Tests for keepsake.lib.logging and the logging provider."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest

from keepsake.core import LoggingProvider
from keepsake.lib.logging import ExtraFormatter


def make_record(msg: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("keepsake.test", logging.INFO, __file__, 1, msg, None, None)
    record.__dict__.update(extra)
    return record


class TestExtraFormatter(object):
    def test_plain_message(self) -> None:
        formatter = ExtraFormatter("logging.Formatter", "%(levelname)s %(message)s")

        assert formatter.format(make_record("hello")) == "INFO hello"

    def test_extra_fields_are_appended_as_json(self) -> None:
        formatter = ExtraFormatter(logging.Formatter, "%(message)s", indent=False)

        out = formatter.format(make_record("uploaded", key="videos/a.mp4", path=Path("/tmp/a"), data=b"\x01\x02"))

        assert out.startswith("uploaded {")
        assert '"key": "videos/a.mp4"' in out
        assert '"path": "/tmp/a"' in out
        assert "01 02" in out

    def test_multiline_messages_are_indented(self) -> None:
        formatter = ExtraFormatter("logging.Formatter", "%(levelname)s %(message)s")

        out = formatter.format(make_record("first\nsecond"))

        assert out == "INFO first\n     second"

    def test_unencodable_values_fall_back_to_repr(self) -> None:
        formatter = ExtraFormatter("logging.Formatter", "%(message)s", indent=False)

        out = formatter.format(make_record("x", thing=object()))

        assert "<object object at" in out


class TestLoggingProvider(object):
    @pytest.fixture
    def provider(self) -> LoggingProvider:
        stream = io.StringIO()
        config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"plain": {"format": "%(levelname)s %(name)s %(message)s"}},
            "handlers": {"memory": {"class": "logging.StreamHandler", "formatter": "plain", "stream": stream}},
            "root": {"handlers": ["memory"], "level": "TRACE"},
        }
        LoggingProvider.create_trace_loglevel()
        provider = LoggingProvider(config, debug=False)
        provider.stream = stream  # pyright: ignore [reportAttributeAccessIssue]
        return provider

    def test_trace_level(self, provider: LoggingProvider) -> None:
        logger = provider.get_logger(name="keepsake.test")

        logger.trace("very detailed")

        assert "TRACE keepsake.test very detailed" in provider.stream.getvalue()  # pyright: ignore

    def test_module_scope(self, provider: LoggingProvider) -> None:
        assert provider.get_logger().name == __name__

    def test_function_scope(self, provider: LoggingProvider) -> None:
        logger = provider.get_logger(LoggingProvider.Function)

        assert logger.name == f"{__name__}.TestLoggingProvider.test_function_scope"
