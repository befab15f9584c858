"""Logger module for versionnumber

Usage:
    from versionnumber.logger import session_logger as logger

    logger.info("Version number computed", job="app", version="1.0.3")

    # Or implement your own
    class MyCustomLogger(Logger):
        def info(self, message: str, **kwargs):
            # Your custom implementation
            pass
"""

import logging
import os

from .console_logger import ConsoleLogger, Logger


def _level_from_env() -> int:
    level = logging.getLevelName(os.environ.get("VERSIONNUMBER_LOG_LEVEL", "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


# Shared logger instance for modules that just need basic console logging
session_logger: ConsoleLogger = ConsoleLogger(level=_level_from_env())

__all__ = [
    "Logger",
    "ConsoleLogger",
    "session_logger",
]
