"""
Shared fixtures: real, temporary chat.db and AddressBook stores.

The schemas carry only the columns the readers touch, with the same table
and column names macOS uses.
"""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pytest

from imessage_archive.epoch import datetime_to_archive_nanos


CHAT_DB_SCHEMA = """
CREATE TABLE handle (
    ROWID INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL,
    country TEXT,
    service TEXT NOT NULL,
    uncanonicalized_id TEXT
);
CREATE TABLE message (
    ROWID INTEGER PRIMARY KEY AUTOINCREMENT,
    guid TEXT UNIQUE NOT NULL,
    text TEXT,
    attributedBody BLOB,
    handle_id INTEGER DEFAULT 0,
    service TEXT,
    date INTEGER,
    date_read INTEGER,
    date_delivered INTEGER,
    is_from_me INTEGER DEFAULT 0,
    is_read INTEGER DEFAULT 0,
    is_sent INTEGER DEFAULT 0,
    is_delivered INTEGER DEFAULT 0,
    cache_has_attachments INTEGER DEFAULT 0,
    thread_originator_guid TEXT
);
CREATE TABLE chat (
    ROWID INTEGER PRIMARY KEY AUTOINCREMENT,
    guid TEXT UNIQUE NOT NULL,
    style INTEGER,
    state INTEGER,
    account_id TEXT,
    chat_identifier TEXT,
    service_name TEXT,
    room_name TEXT,
    display_name TEXT,
    last_read_message_timestamp INTEGER DEFAULT 0
);
CREATE TABLE chat_message_join (
    chat_id INTEGER REFERENCES chat (ROWID) ON DELETE CASCADE,
    message_id INTEGER REFERENCES message (ROWID) ON DELETE CASCADE,
    message_date INTEGER DEFAULT 0,
    PRIMARY KEY (chat_id, message_id)
);
"""

ADDRESS_BOOK_SCHEMA = """
CREATE TABLE ZABCDRECORD (
    Z_PK INTEGER PRIMARY KEY,
    ZFIRSTNAME VARCHAR,
    ZLASTNAME VARCHAR,
    ZORGANIZATION VARCHAR,
    ZNICKNAME VARCHAR
);
CREATE TABLE ZABCDPHONENUMBER (
    Z_PK INTEGER PRIMARY KEY,
    ZOWNER INTEGER,
    ZFULLNUMBER VARCHAR,
    ZORDERINGINDEX INTEGER
);
CREATE TABLE ZABCDEMAILADDRESS (
    Z_PK INTEGER PRIMARY KEY,
    ZOWNER INTEGER,
    ZADDRESS VARCHAR,
    ZORDERINGINDEX INTEGER
);
"""


def archive_time(year: int, month: int = 1, day: int = 1, hour: int = 0) -> int:
    """Raw chat.db timestamp for a UTC wall-clock time."""
    return int(datetime_to_archive_nanos(datetime(year, month, day, hour, tzinfo=timezone.utc)))


def make_attributed_body(text: str) -> bytes:
    """Build a streamtyped NSAttributedString blob the way Messages writes it."""
    payload = text.encode("utf-8")
    length = bytes([len(payload) & 0x7f])
    return (
        b"\x04\x0bstreamtyped\x81\xe8\x03\x84\x01@\x84\x84\x84"
        b"\x12NSAttributedString\x00\x84\x84\x08NSObject\x00\x85\x92\x84\x84\x84"
        b"\x08NSString\x01\x94\x84\x01+" + length + payload +
        b"\x86\x84\x02iI\x01" + length +
        b"\x92\x84\x84\x84\x0cNSDictionary\x00\x94\x84\x01i\x01\x92\x84\x96\x96"
        b"\x1d__kIMMessagePartAttributeName\x86\x92\x84\x84\x84\x08NSNumber\x00"
        b"\x84\x84\x07NSValue\x00\x94\x84\x01*\x84\x99\x99\x00\x86\x86\x86"
    )


class ChatDbBuilder:
    """Writes fixture rows into a fresh chat.db."""

    def __init__(self, path: Path):
        self.path = path
        self.conn = sqlite3.connect(path)
        self.conn.executescript(CHAT_DB_SCHEMA)
        self.conn.commit()
        self._guid_counter = 0

    def add_handle(self, handle_id: str, service: str = "iMessage", country: Optional[str] = "us") -> int:
        cursor = self.conn.execute(
            "INSERT INTO handle (id, country, service, uncanonicalized_id) VALUES (?, ?, ?, ?)",
            (handle_id, country, service, None)
        )
        self.conn.commit()
        return cursor.lastrowid

    def add_message(
        self,
        text: Optional[str] = None,
        handle_rowid: int = 0,
        date: Optional[int] = None,
        attributed_body: Optional[bytes] = None,
        is_from_me: int = 0,
        guid: Optional[str] = None,
        reply_to_guid: Optional[str] = None,
        commit: bool = True
    ) -> int:
        self._guid_counter += 1
        guid = guid or f"MSG-{self._guid_counter:05d}"
        if date is None:
            date = archive_time(2024) + self._guid_counter * 1_000_000_000
        cursor = self.conn.execute(
            """
            INSERT INTO message (
                guid, text, attributedBody, handle_id, service, date, date_read,
                date_delivered, is_from_me, is_read, is_sent, is_delivered,
                cache_has_attachments, thread_originator_guid
            ) VALUES (?, ?, ?, ?, 'iMessage', ?, ?, ?, ?, 1, ?, 1, 0, ?)
            """,
            (guid, text, attributed_body, handle_rowid, date, date, date,
             is_from_me, is_from_me, reply_to_guid)
        )
        if commit:
            self.conn.commit()
        return cursor.lastrowid

    def add_chat(self, guid: str, display_name: Optional[str] = None, last_read: int = 0, style: int = 45) -> int:
        cursor = self.conn.execute(
            """
            INSERT INTO chat (guid, style, state, chat_identifier, service_name, display_name,
                              last_read_message_timestamp)
            VALUES (?, ?, 3, ?, 'iMessage', ?, ?)
            """,
            (guid, style, guid.split(";")[-1], display_name, last_read)
        )
        self.conn.commit()
        return cursor.lastrowid

    def link(self, chat_rowid: int, message_rowid: int) -> None:
        self.conn.execute(
            "INSERT INTO chat_message_join (chat_id, message_id) VALUES (?, ?)",
            (chat_rowid, message_rowid)
        )
        self.conn.commit()

    def commit(self) -> None:
        self.conn.commit()

    def close(self) -> None:
        self.conn.close()


class AddressBookBuilder:
    """Writes fixture contacts into a fresh AddressBook-v22.abcddb."""

    def __init__(self, path: Path):
        self.path = path
        path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(path)
        self.conn.executescript(ADDRESS_BOOK_SCHEMA)
        self.conn.commit()

    def add_contact(
        self,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        organization: Optional[str] = None,
        nickname: Optional[str] = None,
        phones: tuple = (),
        emails: tuple = ()
    ) -> int:
        cursor = self.conn.execute(
            "INSERT INTO ZABCDRECORD (ZFIRSTNAME, ZLASTNAME, ZORGANIZATION, ZNICKNAME) VALUES (?, ?, ?, ?)",
            (first_name, last_name, organization, nickname)
        )
        owner = cursor.lastrowid
        for index, phone in enumerate(phones):
            self.conn.execute(
                "INSERT INTO ZABCDPHONENUMBER (ZOWNER, ZFULLNUMBER, ZORDERINGINDEX) VALUES (?, ?, ?)",
                (owner, phone, index)
            )
        for index, email in enumerate(emails):
            self.conn.execute(
                "INSERT INTO ZABCDEMAILADDRESS (ZOWNER, ZADDRESS, ZORDERINGINDEX) VALUES (?, ?, ?)",
                (owner, email, index)
            )
        self.conn.commit()
        return owner

    def close(self) -> None:
        self.conn.close()


@pytest.fixture
def chat_db(tmp_path):
    """An empty chat.db with the Messages schema."""
    builder = ChatDbBuilder(tmp_path / "chat.db")
    yield builder
    builder.close()


@pytest.fixture
def contacts_sources(tmp_path):
    """The AddressBook Sources directory the address_book factory writes into."""
    sources = tmp_path / "Sources"
    sources.mkdir()
    return sources


@pytest.fixture
def address_book(contacts_sources):
    """Factory creating one AddressBook store per call, named like an account UUID."""
    builders = []

    def _create(source_name: str) -> AddressBookBuilder:
        builder = AddressBookBuilder(contacts_sources / source_name / "AddressBook-v22.abcddb")
        builders.append(builder)
        return builder

    yield _create

    for builder in builders:
        builder.close()


@pytest.fixture
def attributed_body():
    return make_attributed_body


@pytest.fixture
def to_archive_time():
    return archive_time
