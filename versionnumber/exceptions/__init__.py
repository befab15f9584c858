"""Custom exceptions for version number computation and build history."""

from versionnumber.exceptions.base import (
    VersionNumberError,
    ValidationError,
    ResourceNotFoundError,
    ConfigurationError,
)
from versionnumber.exceptions.version_number import (
    InvalidArgumentError,
    TemplateFormatError,
    DateFormatError,
    BuildNotFoundError,
    HistoryCorruptError,
)

__all__ = [
    # Base exceptions
    "VersionNumberError",
    "ValidationError",
    "ResourceNotFoundError",
    "ConfigurationError",
    # Specific exceptions
    "InvalidArgumentError",
    "TemplateFormatError",
    "DateFormatError",
    "BuildNotFoundError",
    "HistoryCorruptError",
]
