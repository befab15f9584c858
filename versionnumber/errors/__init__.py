"""Error handling utilities for versionnumber."""

from versionnumber.errors.mapper import (
    RECOVERY_STRATEGIES,
    ErrorResponse,
    create_error_response,
    error_to_cli_response,
    error_to_mcp_response,
    error_to_web_response,
    get_error_code,
    get_recovery_strategy,
)

__all__ = [
    "RECOVERY_STRATEGIES",
    "ErrorResponse",
    "create_error_response",
    "error_to_cli_response",
    "error_to_mcp_response",
    "error_to_web_response",
    "get_error_code",
    "get_recovery_strategy",
]
