"""Tests for the application logger utility."""

from __future__ import annotations

import logging
import logging.handlers

from focuscycle_cli.utils.logger import get_logger


def test_get_logger_creates_log_file(isolated_dirs):
    """Logger creates the log file inside user_log_dir."""
    logger = get_logger()

    assert (isolated_dirs / "log" / "focuscycle.log").exists()
    assert isinstance(logger, logging.Logger)
    assert logger.name == "focuscycle_cli"


def test_get_logger_returns_singleton():
    assert get_logger() is get_logger()


def test_uses_rotating_handler():
    handlers = get_logger().handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.handlers.RotatingFileHandler)
    assert handlers[0].maxBytes == 5 * 1024 * 1024


def test_does_not_propagate_to_root():
    assert get_logger().propagate is False


def test_module_loggers_share_the_file(isolated_dirs):
    get_logger()
    logging.getLogger("focuscycle_cli.models.session.state").warning("snapshot ignored")
    for handler in get_logger().handlers:
        handler.flush()

    text = (isolated_dirs / "log" / "focuscycle.log").read_text()
    assert "WARNING" in text
    assert "[focuscycle_cli.models.session.state] snapshot ignored" in text
