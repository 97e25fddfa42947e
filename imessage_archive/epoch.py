"""
Conversions between the Messages archive clock and Unix time.

chat.db stores timestamps as nanoseconds since 2001-01-01 00:00:00 UTC
(the Cocoa reference date). Both sides are UTC instants, so no timezone
adjustment is ever applied.
"""

from datetime import datetime, timezone

# Seconds between 1970-01-01 and 2001-01-01
APPLE_EPOCH_OFFSET = 978307200
NANOS_PER_SECOND = 1_000_000_000


def to_calendar_seconds(raw: int) -> float:
    """
    Convert a raw archive timestamp to Unix seconds.

    Args:
        raw: Nanoseconds since 2001-01-01 as stored in chat.db

    Returns:
        Seconds since 1970-01-01 (float)
    """
    return raw / NANOS_PER_SECOND + APPLE_EPOCH_OFFSET


def to_archive_nanos(calendar_seconds: float) -> float:
    """
    Convert Unix seconds to the archive's nanosecond clock.

    Inverse of to_calendar_seconds.
    """
    return (calendar_seconds - APPLE_EPOCH_OFFSET) * NANOS_PER_SECOND


def datetime_to_archive_nanos(value: datetime) -> float:
    """Convert a datetime to archive nanoseconds. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return to_archive_nanos(value.timestamp())
