"""Unit tests for structured logging utilities in ``observability``.

Validates the null handler, trace binding, and the event shape that codecs
and the composition root rely on.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from lib_tree_config import InvalidFormat, bind_trace_id, create_from_data, get_logger, write_data
from lib_tree_config.observability import TRACE_ID, log_event


def test_null_handler_present() -> None:
    """Package logger should always include a NullHandler to avoid surprises."""

    logger = get_logger()
    assert any(isinstance(handler, logging.NullHandler) for handler in logger.handlers)


def test_trace_id_in_log(caplog: pytest.LogCaptureFixture) -> None:
    """Structured logs should include the bound trace identifier and contextual fields."""

    caplog.set_level(logging.INFO, logger="lib_tree_config")
    token = bind_trace_id("trace-123")
    try:
        log_event("config_written", "json", None, level=logging.INFO, size=12)
    finally:
        TRACE_ID.reset(token)
    record = caplog.records[-1]
    assert record.getMessage() == "config_written"
    assert record.levelno == logging.INFO
    assert getattr(record, "context") == {"trace_id": "trace-123", "format": "json", "path": None, "size": 12}


def test_bind_trace_id_token_restores_previous_value() -> None:
    outer = bind_trace_id("outer")
    inner = bind_trace_id("inner")
    TRACE_ID.reset(inner)
    assert TRACE_ID.get() == "outer"
    TRACE_ID.reset(outer)
    assert TRACE_ID.get() is None


def test_bind_trace_id_clears_context() -> None:
    token = bind_trace_id("trace-temp")
    bind_trace_id(None)
    assert TRACE_ID.get() is None
    TRACE_ID.reset(token)


def test_events_default_to_debug_and_skip_disabled_levels(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="lib_tree_config")
    log_event("config_rendered", "yaml", None, size=3)
    assert caplog.records == []
    caplog.set_level(logging.DEBUG, logger="lib_tree_config")
    log_event("config_rendered", "yaml", None, size=3)
    assert caplog.records[-1].levelno == logging.DEBUG
    assert getattr(caplog.records[-1], "context")["size"] == 3


def test_writing_logs_at_info_level(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="lib_tree_config")
    target = write_data({"a": 1}, tmp_path / "out.yaml")
    records = [record for record in caplog.records if record.getMessage() == "config_written"]
    assert records and records[-1].levelno == logging.INFO
    assert getattr(records[-1], "context")["path"] == str(target)
    assert getattr(records[-1], "context")["format"] == "yaml"


def test_loading_emits_lifecycle_events(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Reading a file should narrate the read and the successful decode."""

    path = tmp_path / "config.json"
    path.write_text('{"a": 1}', encoding="utf-8")
    caplog.set_level(logging.DEBUG, logger="lib_tree_config")
    create_from_data(path)
    messages = [record.getMessage() for record in caplog.records]
    assert "config_file_read" in messages
    assert "config_file_loaded" in messages


def test_invalid_file_is_logged_at_error_level(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "config.json"
    path.write_text("{broken", encoding="utf-8")
    caplog.set_level(logging.DEBUG, logger="lib_tree_config")
    with pytest.raises(InvalidFormat):
        create_from_data(path)
    errors = [record for record in caplog.records if record.levelno == logging.ERROR]
    assert errors and errors[-1].getMessage() == "config_file_invalid"
    assert getattr(errors[-1], "context")["path"] == str(path)
