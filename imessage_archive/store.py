"""
Read-only SQLite access to chat.db and the AddressBook stores.

Connections are opened lazily on first query and kept for the lifetime of
the owning object; close() releases them. Nothing here ever writes.
"""

import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from imessage_archive.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_MESSAGES_DB = Path.home() / "Library" / "Messages" / "chat.db"
DEFAULT_CONTACTS_SOURCES = (
    Path.home() / "Library" / "Application Support" / "AddressBook" / "Sources"
)
ADDRESS_BOOK_FILENAME = "AddressBook-v22.abcddb"

MESSAGES_TABLES = {"message", "handle", "chat", "chat_message_join"}
CONTACTS_TABLES = {"ZABCDRECORD", "ZABCDPHONENUMBER", "ZABCDEMAILADDRESS"}


class SQLiteStore:
    """
    A long-lived, read-only handle on one SQLite file.

    Usage:
        store = SQLiteStore("~/Library/Messages/chat.db", name="messages")
        rows = store.execute("SELECT id FROM handle WHERE service = ?", ("iMessage",))
        store.close()
    """

    def __init__(self, db_path: Union[str, Path], name: Optional[str] = None):
        self.db_path = Path(db_path).expanduser()
        self.name = name or self.db_path.name
        self._conn: Optional[sqlite3.Connection] = None

    def __repr__(self):
        return f"SQLiteStore(name='{self.name}', path='{self.db_path}')"

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def connection(self) -> sqlite3.Connection:
        """The shared connection, opened on first use."""
        if self._conn is None:
            self._conn = self._open()
        return self._conn

    def _open(self) -> sqlite3.Connection:
        if not self.db_path.exists():
            raise StoreUnavailableError(self.db_path, "file not found")

        try:
            conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
            conn.row_factory = sqlite3.Row
            # Fails here rather than on the first real query if access is denied
            conn.execute("SELECT 1 FROM sqlite_master LIMIT 1")
        except sqlite3.Error as e:
            raise StoreUnavailableError(self.db_path, str(e)) from e

        logger.info("Opened %s store at %s", self.name, self.db_path)
        return conn

    def execute(self, query: str, params: Tuple = ()) -> List[Dict[str, Any]]:
        """Run a SELECT and return every row as a dict."""
        cursor = self.connection.execute(query, params)
        return [dict(row) for row in cursor.fetchall()]

    def execute_one(self, query: str, params: Tuple = ()) -> Optional[Dict[str, Any]]:
        """Run a SELECT and return the first row as a dict, or None."""
        cursor = self.connection.execute(query, params)
        row = cursor.fetchone()
        return dict(row) if row else None

    def count(self, query: str, params: Tuple = ()) -> int:
        """Run a COUNT(*) query aliased as total."""
        row = self.execute_one(query, params)
        return int(row["total"]) if row else 0

    def get_table_names(self) -> List[str]:
        rows = self.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name")
        return [row["name"] for row in rows]

    def has_tables(self, required: Iterable[str]) -> bool:
        """Check that the store carries the expected schema."""
        tables = set(self.get_table_names())
        missing = set(required) - tables
        if missing:
            logger.warning("%s store missing tables: %s", self.name, ", ".join(sorted(missing)))
            return False
        return True

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Closed %s store", self.name)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def find_contact_databases(sources_dir: Union[str, Path] = DEFAULT_CONTACTS_SOURCES) -> List[Path]:
    """
    Locate every AddressBook database under the Sources directory.

    Each account synced into Contacts.app (iCloud, Exchange, local) keeps its
    own store in Sources/<uuid>/AddressBook-v22.abcddb.

    Args:
        sources_dir: The AddressBook Sources directory

    Returns:
        Sorted list of database paths. Empty if the directory is missing or
        unreadable.
    """
    sources_dir = Path(sources_dir).expanduser()
    if not sources_dir.is_dir():
        logger.warning(f"AddressBook sources directory not found: {sources_dir}")
        return []

    try:
        paths = sorted(p for p in sources_dir.glob(f"*/{ADDRESS_BOOK_FILENAME}") if p.is_file())
    except OSError as e:
        logger.warning(f"Cannot list AddressBook sources in {sources_dir}: {e}")
        return []

    logger.info(f"Found {len(paths)} AddressBook database(s) in {sources_dir}")
    return paths


class ArchiveStores:
    """
    Owns the Messages store and every contact store for one server process.

    Stores are created up front but each connects only when first queried.
    """

    def __init__(
        self,
        messages_db_path: Union[str, Path] = DEFAULT_MESSAGES_DB,
        contacts_sources_dir: Union[str, Path] = DEFAULT_CONTACTS_SOURCES,
        contact_db_paths: Optional[List[Union[str, Path]]] = None
    ):
        """
        Args:
            messages_db_path: Path to chat.db
            contacts_sources_dir: AddressBook Sources directory to scan
            contact_db_paths: Explicit contact store paths; skips the scan when given
        """
        self.messages = SQLiteStore(messages_db_path, name="messages")

        if contact_db_paths is None:
            contact_db_paths = find_contact_databases(contacts_sources_dir)

        self.contacts: List[SQLiteStore] = [
            SQLiteStore(path, name=f"contacts:{Path(path).parent.name}")
            for path in contact_db_paths
        ]

    def close(self) -> None:
        """Release every open handle."""
        self.messages.close()
        for store in self.contacts:
            store.close()
        logger.info("Closed all archive stores")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
