# ============================================================================
# CHANGELOG (recent first, max 5 entries)
# 10/18/2026 - Reject non-finite floats as limits
# 10/18/2026 - ISO 8601 date validation via dateutil, naive values as UTC
# 10/18/2026 - Made limit cap configurable via IMESSAGE_MAX_LIMIT
# ============================================================================
"""
Validation utilities for MCP tool arguments.

Provides standardized validation functions that return (value, error) tuples.
"""

import os
from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as date_parser

# Upper bound for page sizes - set IMESSAGE_MAX_LIMIT to override
MAX_LIMIT = int(os.getenv("IMESSAGE_MAX_LIMIT", "200"))
MAX_RECENT_LIMIT = 100
MIN_LIMIT = 1


def validate_positive_int(
    value,
    name: str,
    min_val: int = MIN_LIMIT,
    max_val: int = MAX_LIMIT
) -> tuple[int | None, str | None]:
    """
    Validate that a value is an integer within bounds.

    Args:
        value: Value to validate
        name: Parameter name for error messages
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        Tuple of (validated_value, error_message). If valid, error_message is None.
    """
    if value is None:
        return None, None

    # JSON numbers may arrive as floats; bools are ints in Python but not here
    if isinstance(value, bool):
        return None, f"Invalid {name}: must be an integer, got bool"

    try:
        int_value = int(value)
    except (TypeError, ValueError, OverflowError):
        return None, f"Invalid {name}: must be an integer, got {type(value).__name__}"

    if int_value != value and not isinstance(value, str):
        return None, f"Invalid {name}: must be a whole number, got {value}"

    if int_value < min_val:
        return None, f"Invalid {name}: must be at least {min_val}, got {int_value}"

    if int_value > max_val:
        return None, f"Invalid {name}: must be at most {max_val}, got {int_value}"

    return int_value, None


def validate_limit(value, default: int, max_val: int = MAX_LIMIT) -> tuple[int | None, str | None]:
    """Validate a page size, falling back to default when absent."""
    if value is None:
        return default, None
    return validate_positive_int(value, "limit", MIN_LIMIT, max_val)


def validate_offset(value) -> tuple[int | None, str | None]:
    """Validate a pagination offset (non-negative, default 0)."""
    if value is None:
        return 0, None
    return validate_positive_int(value, "offset", 0, 2**31 - 1)


def validate_non_empty_string(value, name: str) -> tuple[str | None, str | None]:
    """
    Validate that a value is a non-empty string.

    Args:
        value: Value to validate
        name: Parameter name for error messages

    Returns:
        Tuple of (validated_value, error_message). If valid, error_message is None.
    """
    if value is None:
        return None, f"Missing required parameter: {name}"

    if not isinstance(value, str):
        return None, f"Invalid {name}: must be a string, got {type(value).__name__}"

    stripped = value.strip()
    if not stripped:
        return None, f"Invalid {name}: cannot be empty"

    return stripped, None


def validate_optional_string(value, name: str) -> tuple[str | None, str | None]:
    """Validate an optional string; blank values are treated as absent."""
    if value is None:
        return None, None

    if not isinstance(value, str):
        return None, f"Invalid {name}: must be a string, got {type(value).__name__}"

    return value.strip() or None, None


def validate_iso_datetime(value, name: str) -> tuple[Optional[datetime], str | None]:
    """
    Parse an optional ISO 8601 datetime. Naive values are taken as UTC.

    Returns:
        Tuple of (datetime, error_message)
    """
    if value is None or value == "":
        return None, None

    if not isinstance(value, str):
        return None, f"Invalid {name}: must be a string, got {type(value).__name__}"

    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        return None, (
            f"Invalid {name}: cannot parse '{value}' as datetime. "
            "Use ISO 8601 format (e.g., '2025-08-04T07:37:39.000Z')"
        )

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed, None
