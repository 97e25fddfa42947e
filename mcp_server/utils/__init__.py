# ============================================================================
# CHANGELOG (recent first, max 5 entries)
# 10/18/2026 - Created utils package for the archive MCP server
# ============================================================================
"""
MCP Server Utilities

Shared validation, response formatting, and error handling utilities
for the iMessage archive MCP server.
"""

from .validation import (
    validate_positive_int,
    validate_limit,
    validate_offset,
    validate_non_empty_string,
    validate_optional_string,
    validate_iso_datetime,
    MAX_LIMIT,
    MAX_RECENT_LIMIT,
    MIN_LIMIT,
)

from .responses import (
    text_response,
    json_response,
    error_response,
    validation_error,
)

from .errors import handle_archive_error

__all__ = [
    # Validation
    "validate_positive_int",
    "validate_limit",
    "validate_offset",
    "validate_non_empty_string",
    "validate_optional_string",
    "validate_iso_datetime",
    "MAX_LIMIT",
    "MAX_RECENT_LIMIT",
    "MIN_LIMIT",
    # Responses
    "text_response",
    "json_response",
    "error_response",
    "validation_error",
    # Errors
    "handle_archive_error",
]
