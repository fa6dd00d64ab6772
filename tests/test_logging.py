"""Tests for structured logging functionality."""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

import pytest

from finboard.config import TestConfig
from finboard.logging_config import (
    JSONFormatter,
    SessionBufferHandler,
    get_logger,
    session_log_path,
    setup_logging,
)


def _record(level=logging.INFO, msg="Test message", exc_info=None, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test.logger",
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    record.module = "test_module"
    record.funcName = "test_function"
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter():
    """JSONFormatter emits the standard fields."""
    log_data = json.loads(JSONFormatter().format(_record()))

    assert log_data["level"] == "INFO"
    assert log_data["logger"] == "test.logger"
    assert log_data["message"] == "Test message"
    assert log_data["module"] == "test_module"
    assert log_data["function"] == "test_function"
    assert log_data["line"] == 42
    assert "timestamp" in log_data
    assert "extra" not in log_data


def test_json_formatter_with_extra_fields():
    log_data = json.loads(JSONFormatter().format(_record(transaction_id="id-1", amount=50.0)))
    assert log_data["extra"] == {"transaction_id": "id-1", "amount": 50.0}


def test_json_formatter_ignores_console_timestamp():
    """A record already rendered by the console formatter carries no bogus extras."""
    record = _record(action="test")
    logging.Formatter("%(asctime)s %(message)s", "%H:%M:%S").format(record)

    log_data = json.loads(JSONFormatter().format(record))

    assert log_data["extra"] == {"action": "test"}


def test_json_formatter_with_exception():
    """JSONFormatter includes exception details."""
    try:
        raise ValueError("Test error")
    except ValueError:
        exc_info = sys.exc_info()

    log_data = json.loads(JSONFormatter().format(_record(logging.ERROR, "Error occurred", exc_info)))

    assert log_data["exception"]["type"] == "ValueError"
    assert "Test error" in log_data["exception"]["message"]
    assert log_data["exception"]["traceback"] is not None


def test_setup_logging(tmp_path):
    """Logging setup creates the rotating JSON log file."""
    config = TestConfig(tmp_path)

    logger = setup_logging(config)

    assert logger.name == "finboard"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 3  # Console + File + Session buffer
    assert any(isinstance(h, SessionBufferHandler) for h in logger.handlers)

    log_file = tmp_path / "logs" / "finboard.log"
    assert log_file.exists()

    get_logger("store").warning("Test warning message", extra={"action": "test"})
    for handler in logger.handlers:
        handler.flush()

    lines = [line for line in log_file.read_text(encoding="utf-8").splitlines() if line.strip()]
    entries = [json.loads(line) for line in lines]
    assert entries[0]["message"] == "Logging initialized"
    assert entries[-1]["logger"] == "finboard.store"
    assert entries[-1]["extra"] == {"action": "test"}


def test_setup_logging_twice_does_not_duplicate_handlers(tmp_path):
    config = TestConfig(tmp_path)
    setup_logging(config)
    logger = setup_logging(config)
    assert len(logger.handlers) == 3
    assert session_log_path().parent == tmp_path.resolve() / "logs"


def test_get_logger():
    """get_logger returns loggers namespaced under finboard."""
    logger1 = get_logger("store")
    logger2 = get_logger("interpreter")

    assert logger1.name == "finboard.store"
    assert logger2.name == "finboard.interpreter"
    assert logger1 != logger2


@pytest.mark.parametrize("dev_mode", [True, False])
def test_logging_levels_by_mode(tmp_path, dev_mode):
    """Console logging level adjusts based on dev mode."""
    config = TestConfig(tmp_path)
    config.DEV_MODE = dev_mode

    logger = setup_logging(config)

    console_handler = next(
        h
        for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.handlers.RotatingFileHandler)
    )
    expected_level = logging.INFO if dev_mode else logging.WARNING
    assert console_handler.level == expected_level
