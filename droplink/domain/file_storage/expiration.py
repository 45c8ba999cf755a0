"""
Expiration Policy

Pure functions deciding whether a file record has expired and deriving
expiry timestamps and store TTLs. Expiry is never written to a store; it is
recomputed from ``expires_at`` on every read.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .entities import FileRecord


MAX_EXPIRES_IN_HOURS = 24 * 365 * 10


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def is_expired(record: "FileRecord", now: Optional[datetime] = None) -> bool:
    """
    Check whether a record is expired.

    Args:
        record: File record to check
        now: Reference time (defaults to the current UTC time)

    Returns:
        True iff the record has an expiration strictly before ``now``
    """
    if record.expires_at is None:
        return False
    return record.expires_at < (now or utc_now())


def is_valid_lifetime(expires_in_hours: float) -> bool:
    """
    Check that a lifetime is positive, finite and at most MAX_EXPIRES_IN_HOURS.

    Bounding the lifetime keeps every derived timestamp inside the datetime range.
    """
    return math.isfinite(expires_in_hours) and 0 < expires_in_hours <= MAX_EXPIRES_IN_HOURS


def compute_expires_at(
    expires_in_hours: Optional[float], now: Optional[datetime] = None
) -> Optional[datetime]:
    """Expiration timestamp ``expires_in_hours`` from ``now``, or None."""
    if expires_in_hours is None:
        return None
    return (now or utc_now()) + timedelta(hours=expires_in_hours)


def ttl_seconds_until(
    expires_at: Optional[datetime], now: Optional[datetime] = None
) -> Optional[int]:
    """
    Store TTL mirroring an expiration timestamp.

    Returns:
        None when there is no expiration, otherwise the whole seconds left
        (at least 1, since stores reject non-positive TTLs)
    """
    if expires_at is None:
        return None
    remaining = (expires_at - (now or utc_now())).total_seconds()
    return max(1, math.floor(remaining))
