"""Tests for logging setup."""

from __future__ import annotations

import logging

from flowbuddy.config.settings import LoggingConfig
from flowbuddy.utils.logging import setup_logging


class TestSetupLogging:
    def test_repeated_setup_does_not_duplicate_handlers(self) -> None:
        setup_logging(LoggingConfig())
        logger = setup_logging(LoggingConfig(level="DEBUG"))
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_http_libraries_quieted(self) -> None:
        setup_logging(LoggingConfig(library_level="ERROR"))
        assert logging.getLogger("httpx").level == logging.ERROR
        assert logging.getLogger("openai").level == logging.ERROR

    def test_file_handler(self, tmp_path) -> None:
        path = tmp_path / "logs" / "flowbuddy.log"
        logger = setup_logging(LoggingConfig(file=str(path)))
        logger.warning("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in path.read_text()
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
