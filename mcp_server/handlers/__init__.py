# ============================================================================
# CHANGELOG (recent first, max 5 entries)
# 10/18/2026 - Created handlers package split into reading and contacts
# ============================================================================
"""
MCP Tool Handlers Package

Organized by domain:
- reading: search_messages, get_recent_messages, get_chats, get_handles,
  get_messages_from_chat
- contacts: search_contacts, lookup_contact_by_handle
"""

from . import reading
from . import contacts

__all__ = [
    "reading",
    "contacts",
]
