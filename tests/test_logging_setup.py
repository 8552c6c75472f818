"""Tests for structured logging setup."""

import json
import logging

import pytest
import structlog

from src.config.models import LogFormat, LoggingConfig, LogLevel
from src.logging_setup import setup_logging


@pytest.fixture
def root_logger():
    """Route the root logger to a plain stream handler for the test only."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    root.handlers = saved_handlers
    root.setLevel(saved_level)
    structlog.reset_defaults()


def test_json_logging(capsys, root_logger):
    setup_logging(LoggingConfig(format=LogFormat.JSON, level=LogLevel.DEBUG))
    root_logger.handlers = [logging.StreamHandler()]
    root_logger.setLevel(logging.DEBUG)

    structlog.get_logger("test").info("uex_markets_loaded", markets=3)

    line = capsys.readouterr().err.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "uex_markets_loaded"
    assert event["markets"] == 3
    assert event["level"] == "info"
    assert event["logger"] == "test"


def test_text_logging_respects_level(capsys, root_logger):
    setup_logging(LoggingConfig(format=LogFormat.TEXT, level=LogLevel.WARNING))
    root_logger.handlers = [logging.StreamHandler()]
    root_logger.setLevel(logging.WARNING)

    structlog.get_logger("test").info("hidden_event")
    structlog.get_logger("test").warning("shown_event", code="4")

    err = capsys.readouterr().err
    assert "hidden_event" not in err
    assert "shown_event" in err
