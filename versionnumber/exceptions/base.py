"""Base exception classes for versionnumber.

Every error carries a machine-readable code, a human-readable message and an
optional details dict so that the CLI, MCP and web surfaces can map it to a
structured response with a recovery strategy.
"""

from typing import Any, Dict, Optional


class VersionNumberError(Exception):
    """Root of the versionnumber exception hierarchy."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details: Dict[str, Any] = details or {}
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"


class ValidationError(VersionNumberError):
    """Input failed validation (bad argument, malformed template, ...)."""

    pass


class ResourceNotFoundError(VersionNumberError):
    """A requested job or build does not exist."""

    pass


class ConfigurationError(VersionNumberError):
    """Environment configuration is missing or invalid."""

    pass
