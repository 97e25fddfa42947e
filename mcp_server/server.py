#!/usr/bin/env python3
# ============================================================================
# CHANGELOG (recent first, max 5 entries)
# 10/18/2026 - Startup probe opens every contact store
# 10/18/2026 - Tool registry with dispatch table and stdio transport
# ============================================================================
"""
iMessage Archive MCP Server - read-only, paginated access to Messages and Contacts.

Tools:
- search_messages, get_recent_messages, get_messages_from_chat
- get_chats, get_handles
- search_contacts, lookup_contact_by_handle

Usage:
    python -m mcp_server.server
"""

import asyncio
import logging
import sqlite3

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from imessage_archive import ArchiveError, ArchiveStores, ContactResolver, MessagesInterface
from imessage_archive.store import CONTACTS_TABLES
from mcp_server.config import load_config, resolve_path, setup_logging
from mcp_server.handlers import contacts as contact_handlers
from mcp_server.handlers import reading
from mcp_server.utils.responses import text_response
from mcp_server.utils.validation import MAX_LIMIT, MAX_RECENT_LIMIT

logger = logging.getLogger(__name__)

PAGINATION_NOTE = (
    "CRITICAL: Results are paginated - for summaries, analysis, or complete history, "
    "you MUST page through ALL results by checking 'hasMore' and increasing 'offset' "
    "until hasMore=false."
)


def _pagination_schema(default_limit: int, max_limit: int = MAX_LIMIT) -> dict:
    return {
        "limit": {
            "type": "number",
            "minimum": 1,
            "maximum": max_limit,
            "description": f"Maximum number of results to return (1-{max_limit}, default: {default_limit})",
            "default": default_limit
        },
        "offset": {
            "type": "number",
            "minimum": 0,
            "description": "Number of results to skip for pagination (default: 0)",
            "default": 0
        },
    }


def tool_definitions() -> list[types.Tool]:
    """Tool list advertised to the client."""
    return [
        types.Tool(
            name="search_messages",
            description=(
                "Search iMessage messages by text, contact handle and date range. "
                "Use 'search_contacts' to find a person's handle, or "
                "'lookup_contact_by_handle' to identify an unknown one. " + PAGINATION_NOTE
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Text to find in message content"
                    },
                    "handle": {
                        "type": "string",
                        "description": "Phone number (e.g., '+15551234567') or email to filter by"
                    },
                    "startDate": {
                        "type": "string",
                        "description": "ISO datetime - only messages on or after this instant"
                    },
                    "endDate": {
                        "type": "string",
                        "description": "ISO datetime - only messages on or before this instant"
                    },
                    **_pagination_schema(100),
                },
                "required": []
            }
        ),
        types.Tool(
            name="get_recent_messages",
            description=(
                "Get the most recent iMessages across all conversations, newest first. "
                + PAGINATION_NOTE
            ),
            inputSchema={
                "type": "object",
                "properties": _pagination_schema(20, MAX_RECENT_LIMIT),
                "required": []
            }
        ),
        types.Tool(
            name="get_chats",
            description=(
                "List conversations ordered by most recent activity. Returns chat GUIDs "
                "for 'get_messages_from_chat'. " + PAGINATION_NOTE
            ),
            inputSchema={
                "type": "object",
                "properties": _pagination_schema(50),
                "required": []
            }
        ),
        types.Tool(
            name="get_handles",
            description=(
                "List every phone number and email that has sent or received iMessages. "
                + PAGINATION_NOTE
            ),
            inputSchema={
                "type": "object",
                "properties": _pagination_schema(100),
                "required": []
            }
        ),
        types.Tool(
            name="get_messages_from_chat",
            description=(
                "Get messages from one conversation by chat GUID (from 'get_chats'), "
                "newest first. " + PAGINATION_NOTE
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "chatGuid": {
                        "type": "string",
                        "description": "Chat GUID identifier"
                    },
                    **_pagination_schema(50),
                },
                "required": ["chatGuid"]
            }
        ),
        types.Tool(
            name="search_contacts",
            description=(
                "Search contacts by first name and optional last name. Returns one entry per "
                "phone number and email, usable as 'handle' in 'search_messages'. Without "
                "lastName the name is also matched against last name, organization and "
                "nickname. " + PAGINATION_NOTE
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "firstName": {
                        "type": "string",
                        "description": "First name to search for (e.g., 'John')"
                    },
                    "lastName": {
                        "type": "string",
                        "description": "Optional last name (e.g., 'Smith')"
                    },
                    **_pagination_schema(50),
                },
                "required": ["firstName"]
            }
        ),
        types.Tool(
            name="lookup_contact_by_handle",
            description=(
                "Look up the contact behind a phone number or email address. "
                "Returns found=false when no contact matches."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "handle": {
                        "type": "string",
                        "description": "Phone number (e.g., '+15551234567') or email address"
                    }
                },
                "required": ["handle"]
            }
        ),
    ]


def create_server(
    name: str,
    messages: MessagesInterface,
    contacts: ContactResolver
) -> Server:
    """
    Build the MCP server around already constructed archive readers.

    Args:
        name: Server name reported to clients
        messages: Reader over chat.db
        contacts: Resolver over the AddressBook stores

    Returns:
        Configured mcp Server
    """
    app = Server(name)

    dispatch = {
        "search_messages": lambda args: reading.handle_search_messages(args, messages),
        "get_recent_messages": lambda args: reading.handle_get_recent_messages(args, messages),
        "get_chats": lambda args: reading.handle_get_chats(args, messages),
        "get_handles": lambda args: reading.handle_get_handles(args, messages),
        "get_messages_from_chat": lambda args: reading.handle_get_messages_from_chat(args, messages),
        "search_contacts": lambda args: contact_handlers.handle_search_contacts(args, contacts),
        "lookup_contact_by_handle": lambda args: contact_handlers.handle_lookup_contact_by_handle(args, contacts),
    }

    @app.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return tool_definitions()

    @app.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
        """
        Handle MCP tool calls.

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            List of TextContent responses
        """
        logger.info(f"Tool called: {name} with args: {arguments}")

        try:
            handler = dispatch.get(name)
            if handler is None:
                raise ValueError(f"Unknown tool: {name}")
            return await handler(arguments or {})

        except Exception as e:
            logger.error(f"Error executing tool {name}: {e}", exc_info=True)
            return text_response(f"Error: {str(e)}")

    return app


def probe_access(messages: MessagesInterface, contacts: ContactResolver) -> int:
    """
    Open every store once at startup so missing permissions show up in the log.

    Returns:
        Number of readable contact stores
    """
    permissions = messages.check_permissions()
    if not permissions["messages_db_accessible"]:
        logger.warning("Messages database not accessible - message tools will fail")
        logger.warning("Grant Full Disk Access in System Settings")

    if not contacts.stores:
        logger.warning("No AddressBook databases found - contact tools will return no results")
        return 0

    readable = 0
    for store in contacts.stores:
        try:
            if store.has_tables(CONTACTS_TABLES):
                readable += 1
        except (ArchiveError, sqlite3.Error) as e:
            logger.warning(f"Contacts store {store.name} not accessible: {e}")

    logger.info(f"{readable} of {len(contacts.stores)} AddressBook database(s) readable")
    if readable == 0:
        logger.warning("No AddressBook database is readable - contact tools will fail")
        logger.warning("Grant Full Disk Access in System Settings")

    return readable


async def main():
    """Run the MCP server."""
    setup_logging()
    config = load_config()

    logger.info("Starting iMessage Archive MCP Server...")
    logger.info(f"Server name: {config['server_name']}")
    logger.info(f"Version: {config['version']}")

    stores = ArchiveStores(
        messages_db_path=resolve_path(config["paths"]["messages_db"]),
        contacts_sources_dir=resolve_path(config["paths"]["contacts_sources"]),
    )

    try:
        messages = MessagesInterface(stores.messages)
        contacts = ContactResolver(
            stores.contacts,
            max_matches_per_source=config["contacts"].get("max_matches_per_source"),
        )
        probe_access(messages, contacts)

        app = create_server(config["server_name"], messages, contacts)

        async with stdio_server() as (read_stream, write_stream):
            await app.run(
                read_stream,
                write_stream,
                app.create_initialization_options()
            )
    finally:
        stores.close()
        logger.info("iMessage Archive MCP Server stopped")


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
