"""
memocache - Logging Setup Tests
"""

import json
import logging
import sys

import pytest

from memocache.config import LogLevel, load_settings
from memocache.observability import JSONFormatter, configure_logging


class TestJSONFormatter:
    def test_formats_extra_fields(self) -> None:
        record = logging.LogRecord("memocache.operations", logging.INFO, __file__, 10, "Cache hit", None, None)
        record.key = "user:1"

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "memocache.operations"
        assert data["message"] == "Cache hit"
        assert data["key"] == "user:1"
        assert data["timestamp"].endswith("Z")

    def test_includes_exception(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("memocache", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))

        assert "RuntimeError: boom" in data["exception"]


class TestConfigureLogging:
    def test_installs_single_handler(self) -> None:
        logger = configure_logging(LogLevel.DEBUG)
        configure_logging("warning")

        try:
            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0].formatter, JSONFormatter)
            assert logger.level == logging.WARNING
        finally:
            logger.handlers.clear()
            logger.setLevel(logging.NOTSET)

    def test_level_defaults_to_settings(self, monkeypatch: pytest.MonkeyPatch, empty_env_file: str) -> None:
        monkeypatch.setenv("MEMOCACHE_LOG_LEVEL", "ERROR")
        load_settings(env_file=empty_env_file)

        logger = configure_logging()
        try:
            assert logger.level == logging.ERROR
        finally:
            logger.handlers.clear()
            logger.setLevel(logging.NOTSET)
