"""Version number exceptions.

Each exception includes root cause context and remediation guidance
to support structured error handling and actionable diagnostics.
"""

from typing import Any

from versionnumber.exceptions.base import ResourceNotFoundError, ValidationError, VersionNumberError


class InvalidArgumentError(ValidationError):
    """Raised when a step is configured with an unusable argument.

    Root cause: the version number template is None or empty.
    Remediation: pass a non-empty template such as "1.0.${BUILDS_ALL_TIME}".
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(code="INVALID_ARGUMENT", message=message, details=details)


class TemplateFormatError(ValidationError):
    """Raised when a template token cannot be rendered.

    Root cause: a token received an argument it does not understand, e.g. a
    width modifier that is not made of X characters, or an unknown timezone.
    Remediation: check the token syntax, e.g. ${BUILD_MONTH, XX} or
    ${BUILD_DATE_FORMATTED, "yyyyMMdd", "UTC"}.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(code="TEMPLATE_FORMAT", message=message, details=details)


class DateFormatError(ValidationError):
    """Raised when a date pattern contains an unsupported letter.

    Root cause: SimpleDateFormat style patterns reserve all ASCII letters.
    Remediation: quote literal text, e.g. "yyyy'T'HHmm".
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(code="DATE_FORMAT", message=message, details=details)


class BuildNotFoundError(ResourceNotFoundError):
    """Raised when a job has no build with the requested number."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(code="BUILD_NOT_FOUND", message=message, details=details)


class HistoryCorruptError(VersionNumberError):
    """Raised when a job's builds.json cannot be decoded.

    Root cause: the file was edited by hand or truncated by a crash.
    Remediation: restore the file from backup or delete it to restart counting.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(code="HISTORY_CORRUPT", message=message, details=details)
