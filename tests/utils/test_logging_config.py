# tests/utils/test_logging_config.py
"""Unit tests for logging configuration utility.
=================================================

Tests for the logging setup utility in `kilo.utils.logging_config`.

This module verifies that `setup_logging`:
- Creates rotating file handlers for the main log and a separate error log
  when `separate_error_log` is enabled.
- Honors the configured levels for each handler.
- Keeps the console quiet unless `log_to_console` is set.
- Enables key tracing only when the KILO_KEYTRACE variable asks for it.

Each test runs in a temporary working directory to avoid touching real files,
and the root logger's handlers are restored afterwards.
"""

import logging
import logging.handlers

import pytest

from kilo.utils import logging_config


@pytest.fixture(autouse=True)
def isolated_logging(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(logging_config.KEYTRACE_ENV, raising=False)
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    for handler in logging_config.KEY_LOGGER.handlers:
        handler.close()
    root.handlers = saved_handlers
    root.setLevel(saved_level)


def test_setup_logging_creates_handlers(tmp_path) -> None:
    """Main and error rotating handlers are attached with their levels."""
    logging_config.setup_logging(
        {
            "logging": {
                "file_level": "INFO",
                "console_level": "ERROR",
                "log_to_console": False,
                "separate_error_log": True,
            }
        }
    )

    root = logging.getLogger()
    assert len(root.handlers) == 2
    assert all(isinstance(h, logging.handlers.RotatingFileHandler) for h in root.handlers)

    levels = sorted(h.level for h in root.handlers)
    assert levels == [logging.INFO, logging.ERROR]
    assert root.level == logging.INFO
    assert (tmp_path / "editor.log").exists()
    assert (tmp_path / "error.log").exists()


def test_default_setup_has_only_file_handler() -> None:
    logging_config.setup_logging()

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.handlers[0].level == logging.DEBUG


def test_console_handler_when_enabled() -> None:
    logging_config.setup_logging({"logging": {"log_to_console": True, "console_level": "error"}})

    stream_handlers = [
        h
        for h in logging.getLogger().handlers
        if type(h) is logging.StreamHandler
    ]
    assert len(stream_handlers) == 1
    assert stream_handlers[0].level == logging.ERROR


def test_custom_log_file_location(tmp_path) -> None:
    target = tmp_path / "logs" / "kilo.log"

    logging_config.setup_logging({"logging": {"file": str(target)}})

    assert target.exists()


def test_repeated_setup_does_not_duplicate_handlers() -> None:
    logging_config.setup_logging()
    logging_config.setup_logging()
    assert len(logging.getLogger().handlers) == 1


def test_key_logger_disabled_by_default() -> None:
    logging_config.setup_logging()

    assert logging_config.KEY_LOGGER.disabled
    assert not logging_config.KEY_LOGGER.propagate
    assert isinstance(logging_config.KEY_LOGGER.handlers[0], logging.NullHandler)


def test_key_trace_enabled_by_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(logging_config.KEYTRACE_ENV, "yes")

    logging_config.setup_logging()

    assert not logging_config.KEY_LOGGER.disabled
    assert (tmp_path / "keytrace.log").exists()
