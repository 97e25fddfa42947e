"""
Read-only access to the macOS Messages archive and AddressBook contacts.

Usage:
    from imessage_archive import ArchiveStores, MessagesInterface, ContactResolver

    with ArchiveStores() as stores:
        messages = MessagesInterface(stores.messages)
        page = messages.get_recent_messages(limit=20)
"""

from imessage_archive.contacts import ContactResolver
from imessage_archive.errors import (
    ArchiveError,
    ContactsUnavailableError,
    QueryError,
    StoreUnavailableError,
)
from imessage_archive.messages import MessagesInterface
from imessage_archive.models import (
    Chat,
    ContactInfo,
    ContactLookup,
    Handle,
    Message,
    MessageSearch,
    PaginatedResult,
    PaginationMetadata,
)
from imessage_archive.store import ArchiveStores, SQLiteStore, find_contact_databases

__version__ = "1.0.0"

__all__ = [
    "ArchiveStores",
    "SQLiteStore",
    "find_contact_databases",
    "MessagesInterface",
    "ContactResolver",
    "Chat",
    "ContactInfo",
    "ContactLookup",
    "Handle",
    "Message",
    "MessageSearch",
    "PaginatedResult",
    "PaginationMetadata",
    "ArchiveError",
    "ContactsUnavailableError",
    "QueryError",
    "StoreUnavailableError",
]
