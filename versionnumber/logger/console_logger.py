"""Structured logger interface and a console implementation.

Messages carry a short human description plus keyword fields, rendered as
``message key=value key=value`` through the standard logging module.
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from typing import Any, TextIO


class Logger(ABC):
    """Minimal structured logging interface used across versionnumber."""

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None: ...

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None: ...

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None: ...

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None: ...

    @abstractmethod
    def critical(self, message: str, **kwargs: Any) -> None: ...


def _render_fields(fields: dict[str, Any]) -> str:
    parts = []
    for key in sorted(fields):
        value = fields[key]
        if isinstance(value, str) and value and " " not in value:
            parts.append(f"{key}={value}")
        else:
            parts.append(f"{key}={value!r}")
    return " ".join(parts)


class ConsoleLogger(Logger):
    """Logger writing key=value lines to a stream (stderr by default)."""

    def __init__(
        self,
        name: str = "versionnumber",
        level: int = logging.INFO,
        stream: TextIO | None = None,
    ) -> None:
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False
        if not self._logger.handlers:
            handler = logging.StreamHandler(stream or sys.stderr)
            handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
            )
            self._logger.addHandler(handler)

    @property
    def level(self) -> int:
        return self._logger.level

    def set_level(self, level: int | str) -> None:
        self._logger.setLevel(level)

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if kwargs:
            message = f"{message} {_render_fields(kwargs)}"
        self._logger.log(level, message)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, **kwargs)
