"""
Data models for the Messages and Contacts archives.

Every entity is a read-only projection built from one query row. Row
schemas are checked in from_row() so call sites never touch raw
sqlite rows.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from imessage_archive.epoch import to_calendar_seconds

T = TypeVar("T")


def _calendar(raw: Optional[int]) -> Optional[float]:
    """Convert a nullable archive timestamp to Unix seconds."""
    if raw is None:
        return None
    return to_calendar_seconds(raw)


def _require(row: Dict[str, Any], *columns: str) -> None:
    missing = [c for c in columns if c not in row]
    if missing:
        raise KeyError(f"Row is missing expected columns: {', '.join(missing)}")


@dataclass(frozen=True)
class Message:
    """A message row joined with its sender handle."""
    guid: str
    text: Optional[str]
    handle_id: int
    service: Optional[str]
    date: Optional[float]
    date_read: Optional[float]
    date_delivered: Optional[float]
    is_from_me: int
    is_read: int
    is_sent: int
    is_delivered: int
    cache_has_attachments: int
    reply_to_guid: Optional[str] = None
    handle_id_string: Optional[str] = None
    handle_country: Optional[str] = None
    handle_service: Optional[str] = None

    COLUMNS = (
        "guid", "text", "handle_id", "service", "date", "date_read",
        "date_delivered", "is_from_me", "is_read", "is_sent", "is_delivered",
        "cache_has_attachments", "reply_to_guid",
    )

    @classmethod
    def from_row(cls, row: Dict[str, Any], text: Optional[str] = None) -> 'Message':
        """
        Build a Message from a raw message row.

        Args:
            row: Dict with the message columns (raw archive timestamps)
            text: Replacement text, used when the text column is empty

        Returns:
            Message with timestamps in Unix seconds
        """
        _require(row, *cls.COLUMNS)
        return cls(
            guid=row["guid"],
            text=text if text is not None else row["text"],
            handle_id=int(row["handle_id"] or 0),
            service=row["service"],
            date=_calendar(row["date"]),
            date_read=_calendar(row["date_read"]),
            date_delivered=_calendar(row["date_delivered"]),
            is_from_me=int(row["is_from_me"] or 0),
            is_read=int(row["is_read"] or 0),
            is_sent=int(row["is_sent"] or 0),
            is_delivered=int(row["is_delivered"] or 0),
            cache_has_attachments=int(row["cache_has_attachments"] or 0),
            reply_to_guid=row["reply_to_guid"],
            handle_id_string=row.get("handle_id_string"),
            handle_country=row.get("handle_country"),
            handle_service=row.get("handle_service"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Handle:
    """A messaging endpoint (phone number or email) known to chat.db."""
    rowid: int
    id: str
    country: Optional[str]
    service: Optional[str]
    uncanonicalized_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Handle':
        _require(row, "ROWID", "id", "country", "service", "uncanonicalized_id")
        return cls(
            rowid=int(row["ROWID"]),
            id=row["id"],
            country=row["country"],
            service=row["service"],
            uncanonicalized_id=row["uncanonicalized_id"],
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["ROWID"] = data.pop("rowid")
        return data


@dataclass(frozen=True)
class Chat:
    """A conversation from the chat table."""
    rowid: int
    guid: str
    style: int
    state: int
    account_id: Optional[str] = None
    chat_identifier: Optional[str] = None
    service_name: Optional[str] = None
    room_name: Optional[str] = None
    display_name: Optional[str] = None
    last_read_message_timestamp: Optional[float] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Chat':
        _require(row, "ROWID", "guid", "style", "state")
        return cls(
            rowid=int(row["ROWID"]),
            guid=row["guid"],
            style=int(row["style"] or 0),
            state=int(row["state"] or 0),
            account_id=row.get("account_id"),
            chat_identifier=row.get("chat_identifier"),
            service_name=row.get("service_name"),
            room_name=row.get("room_name"),
            display_name=row.get("display_name"),
            last_read_message_timestamp=_calendar(row.get("last_read_message_timestamp")),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["ROWID"] = data.pop("rowid")
        return data


def display_name(
    first_name: Optional[str],
    last_name: Optional[str],
    organization: Optional[str]
) -> str:
    """Pick the name to show for a contact: first+last, first, last, organization, "Unknown"."""
    if first_name and last_name:
        return f"{first_name} {last_name}"
    if first_name:
        return first_name
    if last_name:
        return last_name
    if organization:
        return organization
    return "Unknown"


@dataclass
class ContactRecord:
    """A contact from one AddressBook store, before flattening into handles."""
    id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    organization: Optional[str] = None
    phone_numbers: List[str] = field(default_factory=list)
    email_addresses: List[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'ContactRecord':
        _require(row, "id", "first_name", "last_name", "organization")
        return cls(
            id=int(row["id"]),
            first_name=row["first_name"],
            last_name=row["last_name"],
            organization=row["organization"],
        )

    @property
    def full_name(self) -> str:
        return display_name(self.first_name, self.last_name, self.organization)

    @property
    def dedup_key(self) -> tuple:
        """Identity used to merge the same person across AddressBook sources."""
        return (self.first_name, self.last_name, self.organization)


@dataclass(frozen=True)
class ContactInfo:
    """One messageable handle of a contact (phone number or email)."""
    name: str
    phone: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ContactLookup:
    """Result of resolving a single handle back to a contact."""
    handle: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    organization: Optional[str] = None
    display_name: Optional[str] = None
    found: bool = False

    @classmethod
    def not_found(cls, handle: str) -> 'ContactLookup':
        return cls(handle=handle)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "handle": self.handle,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "organization": self.organization,
            "displayName": self.display_name,
            "found": self.found,
        }


@dataclass(frozen=True)
class PaginationMetadata:
    total: int
    limit: int
    offset: int
    has_more: bool
    page: int
    total_pages: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "limit": self.limit,
            "offset": self.offset,
            "hasMore": self.has_more,
            "page": self.page,
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True)
class PaginatedResult(Generic[T]):
    """One page of results plus the metadata needed to fetch the next."""
    data: List[T]
    pagination: PaginationMetadata

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": [item.to_dict() if hasattr(item, "to_dict") else item for item in self.data],
            "pagination": self.pagination.to_dict(),
        }


@dataclass(frozen=True)
class MessageSearch:
    """Filters for a message search. Every filter is optional."""
    query: Optional[str] = None
    handle: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: int = 100
    offset: int = 0
