"""
Unit tests for structlog configuration.
"""

import json
import logging

import pytest
import structlog

from capture_flow.logging_config import (
    app_context,
    configure_logging,
    configure_logging_from_settings,
)


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def last_json_line(capsys) -> dict:
    return json.loads(capsys.readouterr().out.strip().splitlines()[-1])


def test_app_context_stamps_identity():
    processor = app_context("capture-flow", "1.2.3", "production")

    event = processor(None, "info", {"event": "hello"})

    assert event == {"event": "hello", "app": "capture-flow", "version": "1.2.3", "env": "production"}


def test_app_context_without_version():
    event = app_context("capture-flow", None, "development")(None, "info", {"event": "x"})

    assert "version" not in event


def test_configure_sets_level_and_single_handler():
    configure_logging("WARNING", "development")

    root = logging.getLogger()
    assert root.level == logging.WARNING
    assert len(root.handlers) == 1
    assert logging.getLogger("httpx").level == logging.WARNING


def test_unknown_level_falls_back_to_info():
    configure_logging("LOUD", "development")

    assert logging.getLogger().level == logging.INFO


def test_production_renders_json_with_bound_run_context(capsys):
    configure_logging("INFO", "production", app_name="capture-flow", app_version="0.1.0")
    capsys.readouterr()

    with structlog.contextvars.bound_contextvars(run_id="abc123", attempt=2):
        structlog.get_logger("capture_flow.test").info("Cached artifact", size_bytes=10)

    payload = last_json_line(capsys)
    assert payload["event"] == "Cached artifact"
    assert payload["run_id"] == "abc123"
    assert payload["attempt"] == 2
    assert payload["app"] == "capture-flow"
    assert payload["version"] == "0.1.0"
    assert payload["env"] == "production"
    assert payload["level"] == "info"


def test_configure_from_settings(test_settings, capsys):
    test_settings.DEBUG = False
    test_settings.LOG_LEVEL = "WARNING"
    test_settings.ENVIRONMENT = "production"
    test_settings.APP_NAME = "Capture Flow (Test)"
    test_settings.APP_VERSION = "9.9.9"

    configure_logging_from_settings(test_settings)
    structlog.get_logger("capture_flow.test").warning("Cache write timed out (non-fatal)")

    assert logging.getLogger().level == logging.WARNING
    payload = last_json_line(capsys)
    assert payload["app"] == "Capture Flow (Test)"
    assert payload["version"] == "9.9.9"


def test_debug_setting_forces_debug_level(test_settings):
    test_settings.DEBUG = True
    test_settings.LOG_LEVEL = "ERROR"

    configure_logging_from_settings(test_settings)

    assert logging.getLogger().level == logging.DEBUG
