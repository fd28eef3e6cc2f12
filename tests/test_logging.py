"""Tests for logging setup."""

import logging

from directory_link.config.models import LoggingConfig
from directory_link.core.logging import get_logger, log_session_event, setup_logging


def test_setup_logging(tmp_path):
    """Console and file handlers are installed."""
    log_file = tmp_path / "logs" / "directory.log"
    
    logger = setup_logging(LoggingConfig(level="DEBUG", file=str(log_file)))
    
    assert logger.name == "directory_link"
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    assert log_file.exists()
    
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()


def test_get_logger_is_namespaced():
    """Loggers live below the package logger."""
    assert get_logger("audit").name == "directory_link.audit"


def test_log_session_event(caplog):
    """Audit lines record success and failure."""
    with caplog.at_level(logging.INFO, logger="directory_link.audit"):
        log_session_event("bind", "example.com", True, "user=alice")
        log_session_event("bind", "example.com", False)
    
    assert "SESSION BIND SUCCESS: example.com - user=alice" in caplog.text
    assert "SESSION BIND FAILED: example.com" in caplog.text
