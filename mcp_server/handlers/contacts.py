# ============================================================================
# CHANGELOG (recent first, max 5 entries)
# 10/18/2026 - lookup_contact_by_handle reports unreadable contact stores
# 10/18/2026 - search_contacts over every AddressBook source
# ============================================================================
"""
Contacts Handlers

Handles tools for resolving people to handles and back:
- search_contacts: Name search returning phone numbers and emails
- lookup_contact_by_handle: Reverse lookup of a phone number or email
"""

import logging

from mcp import types

from imessage_archive import ArchiveError, ContactResolver
from imessage_archive.pagination import create_pagination_metadata
from mcp_server.utils.errors import handle_archive_error
from mcp_server.utils.responses import json_response, validation_error
from mcp_server.utils.validation import (
    validate_limit,
    validate_non_empty_string,
    validate_offset,
    validate_optional_string,
)

logger = logging.getLogger(__name__)


async def handle_search_contacts(
    arguments: dict,
    contacts: ContactResolver
) -> list[types.TextContent]:
    """
    Handle search_contacts tool call.

    Args:
        arguments: {"firstName": str, "lastName": str?, "limit": int?, "offset": int?}
        contacts: ContactResolver instance

    Returns:
        Paginated {name, phone} entries as JSON
    """
    first_name = arguments.get("firstName")
    if first_name is None:
        return validation_error("Missing required parameter: firstName")
    if not isinstance(first_name, str):
        return validation_error(f"Invalid firstName: must be a string, got {type(first_name).__name__}")

    last_name, error = validate_optional_string(arguments.get("lastName"), "lastName")
    if error:
        return validation_error(error)

    limit, error = validate_limit(arguments.get("limit"), default=50)
    if error:
        return validation_error(error)

    offset, error = validate_offset(arguments.get("offset"))
    if error:
        return validation_error(error)

    try:
        result = contacts.search_by_name(first_name.strip(), last_name, limit=limit, offset=offset)
    except ArchiveError as e:
        return handle_archive_error(e, "searching contacts")

    return json_response(result)


async def handle_lookup_contact_by_handle(
    arguments: dict,
    contacts: ContactResolver
) -> list[types.TextContent]:
    """
    Handle lookup_contact_by_handle tool call.

    Args:
        arguments: {"handle": str}
        contacts: ContactResolver instance

    Returns:
        Single-entry page with found=true/false as JSON
    """
    handle, error = validate_non_empty_string(arguments.get("handle"), "handle")
    if error:
        return validation_error(error)

    try:
        lookup = contacts.lookup_by_handle(handle)
    except ArchiveError as e:
        return handle_archive_error(e, "looking up contact")

    pagination = create_pagination_metadata(1 if lookup.found else 0, limit=1, offset=0)
    return json_response({
        "data": [lookup.to_dict()],
        "pagination": pagination.to_dict(),
    })
