# ============================================================================
# CHANGELOG (recent first, max 5 entries)
# 10/18/2026 - Single operation prefix for QueryError responses
# 10/18/2026 - Full Disk Access help for store and permission failures
# ============================================================================
"""
Error handling utilities for MCP tool handlers.

Turns archive failures into responses that name the failing operation and,
for macOS privacy denials, tell the user how to grant access.
"""

import logging

from mcp import types

from imessage_archive.errors import QueryError, StoreUnavailableError

logger = logging.getLogger(__name__)

# Common error patterns for permission issues
PERMISSION_ERROR_PATTERNS = [
    "unable to open database",
    "permission denied",
    "operation not permitted",
    "authorization denied",
    "file not found",
]

FULL_DISK_ACCESS_HELP = """
To grant Full Disk Access:

1. Open System Settings (or System Preferences on older macOS)
2. Go to Privacy & Security → Full Disk Access
3. Add the application running this server (Terminal, your IDE, ...)
4. Toggle it ON and restart that application

The Messages and Contacts databases are protected by macOS privacy controls.
"""


def is_permission_error(e: Exception) -> bool:
    """Check if an error looks like a macOS privacy denial."""
    message = str(e).lower()
    return any(pattern in message for pattern in PERMISSION_ERROR_PATTERNS)


def handle_archive_error(e: Exception, operation: str) -> list[types.TextContent]:
    """
    Build the error response for a failed archive operation.

    Args:
        e: The exception that was raised
        operation: What was being done, e.g. "searching messages"

    Returns:
        Formatted error response
    """
    # QueryError already names the operation it failed in
    error_msg = str(e) if isinstance(e, QueryError) else f"Error {operation}: {e}"
    logger.error(error_msg, exc_info=True)

    if isinstance(e, StoreUnavailableError) or is_permission_error(e):
        error_msg += "\n" + FULL_DISK_ACCESS_HELP

    return [types.TextContent(type="text", text=error_msg)]
