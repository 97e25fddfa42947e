"""
Contact resolution across the macOS AddressBook stores.

Contacts.app keeps one AddressBook-v22.abcddb per synced account. Searches
fan out over every store, merge people that appear in more than one account,
and flatten each person into one entry per phone number and email address,
since either can be used as an iMessage handle.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from imessage_archive.errors import ArchiveError, ContactsUnavailableError
from imessage_archive.models import ContactInfo, ContactLookup, ContactRecord, PaginatedResult, display_name
from imessage_archive.pagination import paginate_list
from imessage_archive.phone import normalize_phone_number
from imessage_archive.query import PredicateBuilder
from imessage_archive.store import SQLiteStore

logger = logging.getLogger(__name__)

RECORD_COLUMNS = """
    r.Z_PK AS id,
    r.ZFIRSTNAME AS first_name,
    r.ZLASTNAME AS last_name,
    r.ZORGANIZATION AS organization
"""

HAS_ANY_NAME = "(r.ZFIRSTNAME IS NOT NULL OR r.ZLASTNAME IS NOT NULL OR r.ZORGANIZATION IS NOT NULL)"


@dataclass
class SourceResult:
    """Outcome of scanning one contact store."""
    store: SQLiteStore
    records: List[ContactRecord] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ContactResolver:
    """
    Name search and reverse handle lookup over every AddressBook store.

    A failing store is logged and skipped so the others still contribute;
    only when every store fails is the scan reported as an error.
    """

    def __init__(self, stores: List[SQLiteStore], max_matches_per_source: Optional[int] = None):
        """
        Args:
            stores: Open-on-demand handles, one per AddressBook database
            max_matches_per_source: Optional cap on contacts matched per store.
                When set, totals can undercount for very broad searches.
        """
        self.stores = stores
        self.max_matches_per_source = max_matches_per_source

    def search_by_name(
        self,
        first_name: str,
        last_name: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> PaginatedResult[ContactInfo]:
        """
        Find contacts by name and return their messageable handles.

        Args:
            first_name: Name to search for. With no last_name it is also
                matched against last name, organization and nickname.
                Blank together with a blank last_name lists every contact.
            last_name: Optional last name; both parts must then match
            limit: Page size
            offset: Handles to skip

        Returns:
            PaginatedResult of ContactInfo, one entry per phone/email

        Raises:
            ContactsUnavailableError: If every contact store failed
        """
        results = [self._scan_source(store, first_name, last_name) for store in self.stores]

        failures = [r for r in results if not r.ok]
        if self.stores and len(failures) == len(self.stores):
            raise ContactsUnavailableError(
                f"All {len(failures)} contact stores failed; first error: {failures[0].error}"
            )

        contacts = self._deduplicate(r.records for r in results if r.ok)
        handles = self._flatten(contacts)

        logger.info(
            f"Contact search first={first_name!r} last={last_name!r} matched "
            f"{len(contacts)} contacts, {len(handles)} handles "
            f"({len(failures)} of {len(self.stores)} stores failed)"
        )
        return paginate_list(handles, limit, offset)

    def lookup_by_handle(self, handle: str) -> ContactLookup:
        """
        Resolve a phone number or email back to a contact.

        Stores are tried in order; phone numbers match ZFULLNUMBER exactly,
        and handles containing "@" fall back to an exact email match.

        Args:
            handle: Phone number or email as it appears in chat.db

        Returns:
            ContactLookup with found=True for the first hit, otherwise an
            empty not-found result

        Raises:
            ContactsUnavailableError: If every contact store failed
        """
        failures: List[Exception] = []
        for store in self.stores:
            try:
                row = self._lookup_in_store(store, handle)
            except (ArchiveError, sqlite3.Error) as e:
                logger.warning(f"Skipping {store.name} during handle lookup: {e}")
                failures.append(e)
                continue

            if row:
                return ContactLookup(
                    handle=handle,
                    first_name=row["first_name"] or None,
                    last_name=row["last_name"] or None,
                    organization=row["organization"] or None,
                    display_name=display_name(row["first_name"], row["last_name"], row["organization"]),
                    found=True,
                )

        if self.stores and len(failures) == len(self.stores):
            raise ContactsUnavailableError(
                f"All {len(failures)} contact stores failed; first error: {failures[0]}"
            )

        logger.info(f"No contact found for handle: {handle}")
        return ContactLookup.not_found(handle)

    def _scan_source(self, store: SQLiteStore, first_name: str, last_name: Optional[str]) -> SourceResult:
        try:
            records = self._match_records(store, first_name, last_name)
            for record in records:
                record.phone_numbers = self._phone_numbers(store, record.id)
                record.email_addresses = self._email_addresses(store, record.id)
            return SourceResult(store=store, records=records)
        except (ArchiveError, sqlite3.Error, KeyError) as e:
            logger.warning(f"Error searching contacts in {store.name}: {e}")
            return SourceResult(store=store, error=e)

    def _match_records(self, store: SQLiteStore, first_name: str, last_name: Optional[str]) -> List[ContactRecord]:
        first_name = (first_name or "").strip()
        last_name = (last_name or "").strip()
        predicates = PredicateBuilder()

        if last_name:
            predicates.add(
                "(r.ZFIRSTNAME LIKE ? AND r.ZLASTNAME LIKE ?)",
                f"%{first_name}%", f"%{last_name}%"
            )
        elif first_name:
            pattern = f"%{first_name}%"
            predicates.add(
                "(r.ZFIRSTNAME LIKE ? OR r.ZLASTNAME LIKE ? OR r.ZORGANIZATION LIKE ? OR r.ZNICKNAME LIKE ?)",
                pattern, pattern, pattern, pattern
            )
        # With both parts blank this alone selects every named contact
        predicates.add(HAS_ANY_NAME)

        sql = f"""
            SELECT DISTINCT {RECORD_COLUMNS}
            FROM ZABCDRECORD r
            {predicates.where_clause()}
            ORDER BY r.ZLASTNAME, r.ZFIRSTNAME, r.Z_PK
        """
        params = predicates.params
        if self.max_matches_per_source:
            sql += " LIMIT ?"
            params += (self.max_matches_per_source,)

        rows = store.execute(sql, params)
        if self.max_matches_per_source and len(rows) >= self.max_matches_per_source:
            logger.warning(
                f"{store.name}: contact matches capped at {self.max_matches_per_source}; "
                "totals may be incomplete"
            )

        return [ContactRecord.from_row(row) for row in rows if row["id"]]

    def _phone_numbers(self, store: SQLiteStore, owner_id: int) -> List[str]:
        rows = store.execute(
            "SELECT ZFULLNUMBER FROM ZABCDPHONENUMBER WHERE ZOWNER = ? ORDER BY ZORDERINGINDEX",
            (owner_id,)
        )
        return [row["ZFULLNUMBER"] for row in rows if row["ZFULLNUMBER"] is not None]

    def _email_addresses(self, store: SQLiteStore, owner_id: int) -> List[str]:
        rows = store.execute(
            "SELECT ZADDRESS FROM ZABCDEMAILADDRESS WHERE ZOWNER = ? ORDER BY ZORDERINGINDEX",
            (owner_id,)
        )
        return [row["ZADDRESS"] for row in rows if row["ZADDRESS"] is not None]

    def _lookup_in_store(self, store: SQLiteStore, handle: str) -> Optional[Dict]:
        row = store.execute_one(
            f"""
            SELECT {RECORD_COLUMNS}
            FROM ZABCDRECORD r
            JOIN ZABCDPHONENUMBER p ON r.Z_PK = p.ZOWNER
            WHERE p.ZFULLNUMBER = ?
            LIMIT 1
            """,
            (handle,)
        )

        if row is None and "@" in handle:
            row = store.execute_one(
                f"""
                SELECT {RECORD_COLUMNS}
                FROM ZABCDRECORD r
                JOIN ZABCDEMAILADDRESS e ON r.Z_PK = e.ZOWNER
                WHERE e.ZADDRESS = ?
                LIMIT 1
                """,
                (handle,)
            )

        return row

    @staticmethod
    def _deduplicate(record_lists) -> List[ContactRecord]:
        """Merge contacts by (first, last, organization); the first store scanned wins."""
        unique: Dict[tuple, ContactRecord] = {}
        for records in record_lists:
            for record in records:
                unique.setdefault(record.dedup_key, record)
        return list(unique.values())

    @staticmethod
    def _flatten(contacts: List[ContactRecord]) -> List[ContactInfo]:
        """One ContactInfo per phone number (normalized) and per email (verbatim)."""
        handles: List[ContactInfo] = []
        for contact in contacts:
            name = contact.full_name
            for phone in contact.phone_numbers:
                normalized = normalize_phone_number(phone)
                if normalized:
                    handles.append(ContactInfo(name=name, phone=normalized))
            for email in contact.email_addresses:
                if email:
                    handles.append(ContactInfo(name=name, phone=email))
        return handles
