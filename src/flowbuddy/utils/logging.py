"""Logging setup for flowbuddy.

The monitor issues a vision request every few seconds, so request-level
chatter from the HTTP client libraries is held at a separate, quieter
level than the application's own loggers.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from flowbuddy.config.settings import LoggingConfig

# Third-party loggers that log one line per request at INFO.
CHATTY_LOGGERS = ("httpx", "httpcore", "openai")


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure the 'flowbuddy' logger and quiet the HTTP libraries.

    Safe to call more than once: handlers installed by an earlier call
    are replaced rather than duplicated.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).
    """
    if config is None:
        config = LoggingConfig()

    app_logger = logging.getLogger("flowbuddy")
    app_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if config.file:
        path = Path(config.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)

    library_level = getattr(logging, config.library_level.upper(), logging.WARNING)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    app_logger.debug("Logging initialized at %s level", config.level)
    return app_logger
