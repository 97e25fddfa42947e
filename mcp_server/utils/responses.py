# ============================================================================
# CHANGELOG (recent first, max 5 entries)
# 10/18/2026 - json_response serializes results with to_dict()
# ============================================================================
"""
Response formatting utilities for MCP tool handlers.

Provides standardized response builders for common scenarios.
"""

import json
from typing import Any

from mcp import types


def text_response(text: str) -> list[types.TextContent]:
    """Create a simple text response."""
    return [types.TextContent(type="text", text=text)]


def json_response(payload: Any) -> list[types.TextContent]:
    """
    Serialize a result for the caller.

    Args:
        payload: Anything with to_dict(), or a JSON-serializable value
    """
    if hasattr(payload, "to_dict"):
        payload = payload.to_dict()
    return text_response(json.dumps(payload, indent=2, ensure_ascii=False))


def error_response(error: str, prefix: str = "Error") -> list[types.TextContent]:
    """
    Create a standardized error response.

    Args:
        error: Error message
        prefix: Prefix for the error (default: "Error")
    """
    return [types.TextContent(type="text", text=f"{prefix}: {error}")]


def validation_error(error: str) -> list[types.TextContent]:
    """Create a validation error response."""
    return error_response(error, "Validation error")
