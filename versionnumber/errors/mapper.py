"""Error response mapping for CLI, MCP and web interfaces.

Converts structured VersionNumberError exceptions into standardized error
responses with machine-readable error codes and recovery strategies.
"""

from dataclasses import dataclass, field
from typing import Any, Dict

from versionnumber.exceptions import (
    ConfigurationError,
    ResourceNotFoundError,
    ValidationError,
    VersionNumberError,
)


@dataclass
class ErrorResponse:
    error_code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    recovery_strategy: str = ""


# Recovery strategy templates for common error codes
RECOVERY_STRATEGIES: Dict[str, str] = {
    # Step configuration
    "INVALID_ARGUMENT": "Provide a non-empty version number template, e.g. '1.0.${BUILDS_ALL_TIME}'.",
    "MISSING_ARGUMENT": "Supply every required argument listed in the tool or command help.",
    # Template rendering
    "TEMPLATE_FORMAT": "Check token arguments: width modifiers are X characters (e.g. ${BUILD_MONTH, XX}).",
    "DATE_FORMAT": "Quote literal letters in date patterns, e.g. \"yyyy'T'HHmm\".",
    # Build history
    "BUILD_NOT_FOUND": "List the job's builds with the history command and pick an existing build number.",
    "JOB_NOT_FOUND": "Run a version number step for the job first; jobs are created on their first build.",
    "HISTORY_CORRUPT": "Restore builds.json from backup or delete it to restart counting from 1.",
    # Tools
    "UNKNOWN_TOOL": "Call list_tools to see the supported tool names.",
    # Configuration errors
    "CONFIGURATION_ERROR": "Check the VERSIONNUMBER_* environment variables.",
}


def get_error_code(error: VersionNumberError) -> str:
    """Return the error's code, or derive one from the class name.

    Converts class names like BuildNotFoundError to BUILD_NOT_FOUND.
    """
    code = getattr(error, "code", None)
    if code:
        return code

    name = error.__class__.__name__
    if name.endswith("Error"):
        name = name[:-5]
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.upper())
    return "".join(result)


def get_recovery_strategy(error_code: str, error: VersionNumberError) -> str:
    """Get recovery strategy for an error.

    Returns specific strategy if available, otherwise a generic one.
    """
    if error_code in RECOVERY_STRATEGIES:
        return RECOVERY_STRATEGIES[error_code]

    if isinstance(error, ResourceNotFoundError):
        return "Verify the job name and build number and check that the build exists."
    elif isinstance(error, ValidationError):
        return "Review the validation error details and correct the input."
    elif isinstance(error, ConfigurationError):
        return RECOVERY_STRATEGIES["CONFIGURATION_ERROR"]

    return "Review the error message and try again."


def create_error_response(error: VersionNumberError) -> ErrorResponse:
    """Create a structured error response from a VersionNumberError."""
    error_code = get_error_code(error)
    return ErrorResponse(
        error_code=error_code,
        message=getattr(error, "message", str(error)),
        details=dict(getattr(error, "details", None) or {}),
        recovery_strategy=get_recovery_strategy(error_code, error),
    )


def error_to_mcp_response(error: VersionNumberError) -> Dict[str, Any]:
    """Convert error to MCP-compatible response format."""
    response = create_error_response(error)
    return {
        "success": False,
        "error_code": response.error_code,
        "message": response.message,
        "details": response.details,
        "recovery_strategy": response.recovery_strategy,
    }


def error_to_web_response(error: VersionNumberError) -> Dict[str, Any]:
    """Convert error to web API response format."""
    response = create_error_response(error)
    return {
        "error": {
            "code": response.error_code,
            "message": response.message,
            "details": response.details,
            "recovery": response.recovery_strategy,
        }
    }


def error_to_cli_response(error: VersionNumberError) -> Dict[str, Any]:
    """Convert error to the JSON document the CLI writes to stderr."""
    response = create_error_response(error)
    return {
        "error_code": response.error_code,
        "message": response.message,
        "details": response.details,
        "recovery": response.recovery_strategy,
    }
