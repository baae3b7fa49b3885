"""Tests for structured logging configuration."""

import json
import logging
import sys

from dosewatch.logging_config import (
    JsonFormatter,
    TextFormatter,
    correlation_id_ctx,
    get_logger,
    setup_logging,
)


def _record(level: int = logging.INFO, msg: str = "Test", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="dosewatch.test",
        level=level,
        pathname="/app/engine.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=extra.pop("exc_info", None),
    )
    if extra:
        record.extra_fields = extra
    return record


class TestJsonFormatter:
    def test_basic_fields(self):
        parsed = json.loads(JsonFormatter(service_name="svc").format(_record()))
        assert parsed["level"] == "INFO"
        assert parsed["service"] == "svc"
        assert parsed["logger"] == "dosewatch.test"
        assert parsed["message"] == "Test"
        assert "timestamp" in parsed
        assert "correlation_id" not in parsed

    def test_correlation_id(self):
        token = correlation_id_ctx.set("req-123")
        try:
            parsed = json.loads(JsonFormatter().format(_record()))
        finally:
            correlation_id_ctx.reset(token)
        assert parsed["correlation_id"] == "req-123"

    def test_extra_fields_merged(self):
        record = _record(msg="Logged intake", user_id="u1", amount_ml=2.0)
        parsed = json.loads(JsonFormatter().format(record))
        assert parsed["user_id"] == "u1"
        assert parsed["amount_ml"] == 2.0

    def test_error_includes_location_and_exception(self):
        try:
            raise ValueError("bad record")
        except ValueError:
            exc_info = sys.exc_info()

        record = _record(level=logging.ERROR, exc_info=exc_info)
        record.funcName = "restore"
        parsed = json.loads(JsonFormatter().format(record))

        assert parsed["location"] == {
            "file": "/app/engine.py",
            "line": 42,
            "function": "restore",
        }
        assert "ValueError" in parsed["exception"]


class TestTextFormatter:
    def test_basic(self):
        output = TextFormatter(service_name="svc").format(_record(msg="Hello"))
        assert "svc" in output
        assert "INFO" in output
        assert "[-]" in output
        assert "Hello" in output

    def test_extra_fields_as_pairs(self):
        output = TextFormatter().format(_record(kind="safe_reached"))
        assert output.endswith("kind=safe_reached")

    def test_correlation_id(self):
        token = correlation_id_ctx.set("abc-123")
        try:
            output = TextFormatter().format(_record())
        finally:
            correlation_id_ctx.reset(token)
        assert "[abc-123]" in output


class TestStructuredLogger:
    def test_info_with_fields(self, caplog):
        logger = get_logger("dosewatch.test")
        with caplog.at_level(logging.INFO):
            logger.info("Risk transition", kind="unsafe_now")

        assert "Risk transition" in caplog.text
        assert caplog.records[-1].extra_fields == {"kind": "unsafe_now"}

    def test_error_with_exc_info(self, caplog):
        logger = get_logger("dosewatch.test")
        with caplog.at_level(logging.ERROR):
            try:
                raise RuntimeError("store down")
            except RuntimeError:
                logger.error("Failed to persist record", exc_info=True, key="users")

        record = caplog.records[-1]
        assert record.exc_info is not None
        assert record.extra_fields == {"key": "users"}


class TestSetupLogging:
    def test_json(self):
        setup_logging(log_format="json", log_level="DEBUG", service_name="custom")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        formatter = root.handlers[0].formatter
        assert isinstance(formatter, JsonFormatter)
        assert formatter.service_name == "custom"

    def test_text(self):
        setup_logging(log_format="text", log_level="INFO")
        root = logging.getLogger()
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_scheduler_logs_quieted(self):
        setup_logging()
        assert logging.getLogger("apscheduler").level == logging.WARNING
