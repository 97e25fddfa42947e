"""
Read access to the macOS Messages database (chat.db).

Every listing is paginated: a COUNT(*) with the same predicates as the data
query gives the total, and the data query is bounded by LIMIT/OFFSET.
Message text falls back to the attributedBody blob when the text column is
empty (macOS Ventura+ often stores only the blob).
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, Dict, Optional

from imessage_archive.epoch import datetime_to_archive_nanos
from imessage_archive.errors import ArchiveError, QueryError
from imessage_archive.models import Chat, Handle, Message, MessageSearch, PaginatedResult
from imessage_archive.pagination import create_pagination_metadata
from imessage_archive.query import PredicateBuilder
from imessage_archive.rich_text import extract_text_from_attributed_body
from imessage_archive.store import MESSAGES_TABLES, SQLiteStore

logger = logging.getLogger(__name__)

MESSAGE_COLUMNS = """
    m.guid,
    m.text,
    m.attributedBody,
    m.handle_id,
    m.service,
    m.date,
    m.date_read,
    m.date_delivered,
    m.is_from_me,
    m.is_read,
    m.is_sent,
    m.is_delivered,
    m.cache_has_attachments,
    m.thread_originator_guid AS reply_to_guid,
    h.id AS handle_id_string,
    h.country AS handle_country,
    h.service AS handle_service
"""

# Newest first; ROWID keeps ties in a stable order between count and page
MESSAGE_ORDER = "ORDER BY m.date DESC, m.ROWID DESC"


@contextmanager
def _query(operation: str):
    """Translate driver and row-shape failures into QueryError."""
    try:
        yield
    except ArchiveError:
        raise
    except (sqlite3.Error, KeyError, TypeError, ValueError) as e:
        logger.error(f"Error {operation}: {e}")
        raise QueryError(operation, e) from e


class MessagesInterface:
    """Paginated, read-only queries over chat.db."""

    def __init__(self, store: SQLiteStore):
        """
        Initialize Messages interface.

        Args:
            store: Handle on chat.db, owned by the caller
        """
        self.store = store

    def check_permissions(self) -> dict:
        """
        Probe whether chat.db can be opened and has the expected schema.

        Returns:
            dict: {"messages_db_accessible": bool, "error": Optional[str]}
        """
        try:
            accessible = self.store.has_tables(MESSAGES_TABLES)
            error = None if accessible else "unexpected schema"
        except (ArchiveError, sqlite3.Error) as e:
            accessible = False
            error = str(e)

        if not accessible:
            logger.warning(f"Messages database not accessible: {error}")

        return {"messages_db_accessible": accessible, "error": error}

    def search_messages(self, filters: Optional[MessageSearch] = None) -> PaginatedResult[Message]:
        """
        Search messages by text, handle and date range.

        Args:
            filters: Optional text substring, exact handle id, start/end
                datetimes and pagination. Absent filters are not applied.

        Returns:
            PaginatedResult of Message, newest first

        Raises:
            StoreUnavailableError: If chat.db cannot be opened
            QueryError: If a query fails
        """
        filters = filters or MessageSearch()
        predicates = self._build_predicates(filters)

        logger.info(
            f"Searching messages ({len(predicates)} filters, "
            f"limit={filters.limit}, offset={filters.offset})"
        )

        with _query("searching messages"):
            total = self.store.count(
                f"""
                SELECT COUNT(*) AS total
                FROM message m
                LEFT JOIN handle h ON m.handle_id = h.ROWID
                {predicates.where_clause()}
                """,
                predicates.params
            )

            rows = self.store.execute(
                f"""
                SELECT {MESSAGE_COLUMNS}
                FROM message m
                LEFT JOIN handle h ON m.handle_id = h.ROWID
                {predicates.where_clause()}
                {MESSAGE_ORDER}
                LIMIT ? OFFSET ?
                """,
                predicates.params + (filters.limit, filters.offset)
            )
            messages = [self._row_to_message(row) for row in rows]

        return PaginatedResult(
            data=messages,
            pagination=create_pagination_metadata(total, filters.limit, filters.offset)
        )

    def get_recent_messages(self, limit: int = 20, offset: int = 0) -> PaginatedResult[Message]:
        """Most recent messages across all conversations."""
        return self.search_messages(MessageSearch(limit=limit, offset=offset))

    def get_messages_from_chat(
        self,
        chat_guid: str,
        limit: int = 50,
        offset: int = 0
    ) -> PaginatedResult[Message]:
        """
        Messages belonging to one conversation.

        Args:
            chat_guid: chat.guid of the conversation (from get_chats)
            limit: Page size
            offset: Messages to skip

        Returns:
            PaginatedResult of Message, newest first
        """
        predicates = PredicateBuilder().add("c.guid = ?", chat_guid)

        with _query("getting messages from chat"):
            total = self.store.count(
                f"""
                SELECT COUNT(*) AS total
                FROM message m
                JOIN chat_message_join cmj ON m.ROWID = cmj.message_id
                JOIN chat c ON cmj.chat_id = c.ROWID
                {predicates.where_clause()}
                """,
                predicates.params
            )

            rows = self.store.execute(
                f"""
                SELECT {MESSAGE_COLUMNS}
                FROM message m
                LEFT JOIN handle h ON m.handle_id = h.ROWID
                JOIN chat_message_join cmj ON m.ROWID = cmj.message_id
                JOIN chat c ON cmj.chat_id = c.ROWID
                {predicates.where_clause()}
                {MESSAGE_ORDER}
                LIMIT ? OFFSET ?
                """,
                predicates.params + (limit, offset)
            )
            messages = [self._row_to_message(row) for row in rows]

        logger.info(f"Retrieved {len(messages)} of {total} messages from chat {chat_guid}")
        return PaginatedResult(
            data=messages,
            pagination=create_pagination_metadata(total, limit, offset)
        )

    def get_chats(self, limit: int = 50, offset: int = 0) -> PaginatedResult[Chat]:
        """Conversations ordered by most recent read activity."""
        with _query("getting chats"):
            total = self.store.count("SELECT COUNT(*) AS total FROM chat")
            rows = self.store.execute(
                """
                SELECT
                    c.ROWID,
                    c.guid,
                    c.style,
                    c.state,
                    c.account_id,
                    c.chat_identifier,
                    c.service_name,
                    c.room_name,
                    c.display_name,
                    c.last_read_message_timestamp
                FROM chat c
                ORDER BY c.last_read_message_timestamp DESC, c.ROWID DESC
                LIMIT ? OFFSET ?
                """,
                (limit, offset)
            )
            chats = [Chat.from_row(row) for row in rows]

        return PaginatedResult(
            data=chats,
            pagination=create_pagination_metadata(total, limit, offset)
        )

    def get_handles(self, limit: int = 100, offset: int = 0) -> PaginatedResult[Handle]:
        """Every phone number and email that has exchanged messages."""
        with _query("getting handles"):
            total = self.store.count("SELECT COUNT(*) AS total FROM handle")
            rows = self.store.execute(
                """
                SELECT ROWID, id, country, service, uncanonicalized_id
                FROM handle
                ORDER BY id, ROWID
                LIMIT ? OFFSET ?
                """,
                (limit, offset)
            )
            handles = [Handle.from_row(row) for row in rows]

        return PaginatedResult(
            data=handles,
            pagination=create_pagination_metadata(total, limit, offset)
        )

    def _build_predicates(self, filters: MessageSearch) -> PredicateBuilder:
        predicates = PredicateBuilder()

        if filters.query:
            predicates.add("m.text LIKE ?", f"%{filters.query}%")

        if filters.handle:
            predicates.add("h.id = ?", filters.handle)

        if filters.start_date:
            predicates.add("m.date >= ?", datetime_to_archive_nanos(filters.start_date))

        if filters.end_date:
            predicates.add("m.date <= ?", datetime_to_archive_nanos(filters.end_date))

        return predicates

    def _row_to_message(self, row: Dict[str, Any]) -> Message:
        """Build a Message, decoding attributedBody when the text column is empty."""
        attributed_body = row.pop("attributedBody", None)

        text = None
        if not row["text"] and attributed_body:
            text = extract_text_from_attributed_body(attributed_body)

        return Message.from_row(row, text=text)
