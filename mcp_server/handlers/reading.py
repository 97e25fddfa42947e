# ============================================================================
# CHANGELOG (recent first, max 5 entries)
# 10/18/2026 - Paginated chat, handle and chat message listings
# 10/18/2026 - search_messages with text, handle and date filters
# ============================================================================
"""
Reading Handlers

Handles tools for reading the Messages archive:
- search_messages: Filter by text, handle and date range
- get_recent_messages: Newest messages across all conversations
- get_chats: Conversations ordered by recent activity
- get_handles: Every phone number / email that has exchanged messages
- get_messages_from_chat: Messages in one conversation
"""

import logging

from mcp import types

from imessage_archive import ArchiveError, MessagesInterface, MessageSearch
from mcp_server.utils.errors import handle_archive_error
from mcp_server.utils.responses import json_response, validation_error
from mcp_server.utils.validation import (
    MAX_LIMIT,
    MAX_RECENT_LIMIT,
    validate_iso_datetime,
    validate_limit,
    validate_non_empty_string,
    validate_offset,
    validate_optional_string,
)

logger = logging.getLogger(__name__)


def _pagination_args(arguments: dict, default_limit: int, max_limit: int = MAX_LIMIT):
    """Validate limit/offset, returning (limit, offset, error)."""
    limit, error = validate_limit(arguments.get("limit"), default_limit, max_limit)
    if error:
        return None, None, error

    offset, error = validate_offset(arguments.get("offset"))
    return limit, offset, error


async def handle_search_messages(
    arguments: dict,
    messages: MessagesInterface
) -> list[types.TextContent]:
    """
    Handle search_messages tool call.

    Args:
        arguments: {"query": str?, "handle": str?, "startDate": str?,
                    "endDate": str?, "limit": int?, "offset": int?}
        messages: MessagesInterface instance

    Returns:
        Paginated messages as JSON
    """
    query, error = validate_optional_string(arguments.get("query"), "query")
    if error:
        return validation_error(error)

    handle, error = validate_optional_string(arguments.get("handle"), "handle")
    if error:
        return validation_error(error)

    start_date, error = validate_iso_datetime(arguments.get("startDate"), "startDate")
    if error:
        return validation_error(error)

    end_date, error = validate_iso_datetime(arguments.get("endDate"), "endDate")
    if error:
        return validation_error(error)

    limit, offset, error = _pagination_args(arguments, default_limit=100)
    if error:
        return validation_error(error)

    filters = MessageSearch(
        query=query,
        handle=handle,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )

    try:
        result = messages.search_messages(filters)
    except ArchiveError as e:
        return handle_archive_error(e, "searching messages")

    return json_response(result)


async def handle_get_recent_messages(
    arguments: dict,
    messages: MessagesInterface
) -> list[types.TextContent]:
    """Handle get_recent_messages tool call."""
    limit, offset, error = _pagination_args(arguments, default_limit=20, max_limit=MAX_RECENT_LIMIT)
    if error:
        return validation_error(error)

    try:
        result = messages.get_recent_messages(limit=limit, offset=offset)
    except ArchiveError as e:
        return handle_archive_error(e, "getting recent messages")

    return json_response(result)


async def handle_get_chats(
    arguments: dict,
    messages: MessagesInterface
) -> list[types.TextContent]:
    """Handle get_chats tool call."""
    limit, offset, error = _pagination_args(arguments, default_limit=50)
    if error:
        return validation_error(error)

    try:
        result = messages.get_chats(limit=limit, offset=offset)
    except ArchiveError as e:
        return handle_archive_error(e, "getting chats")

    return json_response(result)


async def handle_get_handles(
    arguments: dict,
    messages: MessagesInterface
) -> list[types.TextContent]:
    """Handle get_handles tool call."""
    limit, offset, error = _pagination_args(arguments, default_limit=100)
    if error:
        return validation_error(error)

    try:
        result = messages.get_handles(limit=limit, offset=offset)
    except ArchiveError as e:
        return handle_archive_error(e, "getting handles")

    return json_response(result)


async def handle_get_messages_from_chat(
    arguments: dict,
    messages: MessagesInterface
) -> list[types.TextContent]:
    """
    Handle get_messages_from_chat tool call.

    Args:
        arguments: {"chatGuid": str, "limit": int?, "offset": int?}
        messages: MessagesInterface instance
    """
    chat_guid, error = validate_non_empty_string(arguments.get("chatGuid"), "chatGuid")
    if error:
        return validation_error(error)

    limit, offset, error = _pagination_args(arguments, default_limit=50)
    if error:
        return validation_error(error)

    try:
        result = messages.get_messages_from_chat(chat_guid, limit=limit, offset=offset)
    except ArchiveError as e:
        return handle_archive_error(e, "getting messages from chat")

    return json_response(result)
