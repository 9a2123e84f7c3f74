"""Tests for structured logging configuration."""

from __future__ import annotations

import json
import logging
import sys

from swimcore.logging_config import JSONFormatter, setup_logging


def _record(msg="hello %s", args=("world",), level=logging.INFO, exc_info=None, name="test"):
    return logging.LogRecord(
        name=name, level=level, pathname="test.py",
        lineno=1, msg=msg, args=args, exc_info=exc_info
    )


def test_json_formatter_outputs_valid_json():
    parsed = json.loads(JSONFormatter().format(_record()))
    assert parsed["message"] == "hello world"
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "test"
    assert parsed["service"] == "swimgen"
    assert parsed["where"].endswith(":1")
    assert "timestamp" in parsed
    assert "context" not in parsed
    assert "request_id" not in parsed


def test_json_formatter_includes_exception():
    try:
        raise ValueError("test error")
    except ValueError:
        exc_info = sys.exc_info()
    parsed = json.loads(JSONFormatter().format(_record(msg="fail", args=(), level=logging.ERROR, exc_info=exc_info)))
    assert parsed["exception"]["type"] == "ValueError"
    assert parsed["exception"]["message"] == "test error"


def test_json_formatter_groups_context_and_request_id():
    record = _record(msg="reroll exhausted", args=(), name="swimcore.services.set_generator")
    record.ctx_label = "Main"
    record.ctx_attempts = 10
    record.request_id = "req-1"
    parsed = json.loads(JSONFormatter().format(record))
    assert parsed["context"] == {"label": "Main", "attempts": 10}
    assert parsed["request_id"] == "req-1"


def test_json_formatter_service_name_is_configurable():
    parsed = json.loads(JSONFormatter(service="swimgen-worker").format(_record()))
    assert parsed["service"] == "swimgen-worker"


def test_setup_logging_idempotent():
    root = logging.getLogger()
    initial_count = len(root.handlers)
    setup_logging()
    setup_logging()
    # Should not add duplicate handlers
    assert len(root.handlers) <= initial_count + 1
