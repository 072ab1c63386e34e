"""Tests for structured logging and the request logging context."""

from __future__ import annotations

import json
import logging

import pytest

from context_adapter.core.logging import (
    LogContextFilter,
    bind_log_context,
    configure_logging,
    get_log_context,
    reset_log_context,
)


def _record(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord("context_adapter.test", logging.INFO, __file__, 1, message, None, None)


class TestLogContext:
    def test_default(self) -> None:
        context = get_log_context()
        assert (context.corr, context.trans, context.op) == ("NA", "NA", "NA")

    def test_bind_and_reset(self) -> None:
        token = bind_log_context(corr="corr-1", method="post")
        try:
            context = get_log_context()
            assert context.corr == "corr-1"
            assert context.op == "OP_CA_POST"
            assert len(context.trans) == 32
        finally:
            reset_log_context(token)
        assert get_log_context().corr == "NA"

    def test_each_bind_gets_new_transaction(self) -> None:
        first = bind_log_context(corr="c")
        trans = get_log_context().trans
        reset_log_context(first)
        second = bind_log_context(corr="c")
        try:
            assert get_log_context().trans != trans
        finally:
            reset_log_context(second)


class TestLogContextFilter:
    def test_injects_fields(self) -> None:
        token = bind_log_context(corr="corr-9", method="GET")
        try:
            record = _record()
            assert LogContextFilter("context-adapter").filter(record)
        finally:
            reset_log_context(token)
        assert record.corr == "corr-9"
        assert record.op == "OP_CA_GET"
        assert record.service == "context-adapter"


class TestConfigureLogging:
    def setup_method(self) -> None:
        self._root = logging.getLogger()
        self._handlers = list(self._root.handlers)
        self._level = self._root.level

    def teardown_method(self) -> None:
        self._root.handlers = self._handlers
        self._root.setLevel(self._level)

    def test_invalid_level(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="LOUD")

    def test_json_output(self) -> None:
        configure_logging(level="info", log_format="json", service_name="ca-test")
        [handler] = self._root.handlers
        record = _record("structured")
        handler.filter(record)
        line = json.loads(handler.format(record))
        assert line["message"] == "structured"
        assert line["level"] == "INFO"
        assert line["logger"] == "context_adapter.test"
        assert line["service"] == "ca-test"
        assert line["corr"] == "NA"

    def test_text_output(self) -> None:
        configure_logging(level="DEBUG", log_format="text")
        [handler] = self._root.handlers
        record = _record("plain")
        handler.filter(record)
        assert "[corr=NA trans=NA op=NA] plain" in handler.format(record)
        assert self._root.level == logging.DEBUG
