"""Document lifecycle: expiry classification and archive state.

A document has two independent axes:

- Expiry status (computed against an explicit ``now``, never stored):
  EXPIRED        expires_at < now
  EXPIRING_SOON  now <= expires_at <= now + window   (inclusive both ends)
  ACTIVE         expires_at > now + window

- Archive status (stored as archived_at, one-way):
  LIVE → ARCHIVED

All functions take ``now`` as a parameter so expiry logic stays deterministic.
"""

import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from config import settings

# Look-ahead window for "expiring soon" (EXPIRY_WARNING_DAYS, default 7)
EXPIRING_SOON_WINDOW = timedelta(days=settings.EXPIRY_WARNING_DAYS)

_SECONDS_PER_DAY = 86400

_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class ExpiryStatus(str, Enum):
    """Computed expiry status of a document"""
    ACTIVE = "ACTIVE"
    EXPIRING_SOON = "EXPIRING_SOON"
    EXPIRED = "EXPIRED"


class ArchiveStatus(str, Enum):
    """Stored archive status of a document"""
    LIVE = "LIVE"
    ARCHIVED = "ARCHIVED"


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime (naive values are taken to be UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expires_at: datetime, now: datetime) -> bool:
    """Check if expiry is strictly in the past.

    Example:
        >>> now = datetime(2026, 1, 10, tzinfo=timezone.utc)
        >>> is_expired(now - timedelta(seconds=1), now)
        True
        >>> is_expired(now, now)
        False
    """
    return as_utc(expires_at) < as_utc(now)


def is_expiring_soon(
    expires_at: datetime,
    now: datetime,
    window: timedelta = EXPIRING_SOON_WINDOW,
) -> bool:
    """Check if expiry falls within [now, now + window]."""
    expires_at = as_utc(expires_at)
    now = as_utc(now)
    return now <= expires_at <= now + window


def classify_expiry(
    expires_at: datetime,
    now: datetime,
    window: timedelta = EXPIRING_SOON_WINDOW,
) -> ExpiryStatus:
    """Classify a document's expiry relative to ``now``."""
    if is_expired(expires_at, now):
        return ExpiryStatus.EXPIRED
    if is_expiring_soon(expires_at, now, window):
        return ExpiryStatus.EXPIRING_SOON
    return ExpiryStatus.ACTIVE


def archive_status(archived_at: Optional[datetime]) -> ArchiveStatus:
    """Derive archive status from the stored archived_at timestamp."""
    return ArchiveStatus.LIVE if archived_at is None else ArchiveStatus.ARCHIVED


def days_until_expiry(expires_at: datetime, now: datetime) -> int:
    """Whole days until expiry, rounded up (0 if already due).

    Example:
        >>> now = datetime(2026, 1, 10, 12, 0, tzinfo=timezone.utc)
        >>> days_until_expiry(now + timedelta(days=2, hours=1), now)
        3
    """
    seconds = (as_utc(expires_at) - as_utc(now)).total_seconds()
    if seconds <= 0:
        return 0
    return math.ceil(seconds / _SECONDS_PER_DAY)


def days_since_expiry(expires_at: datetime, now: datetime) -> int:
    """Whole days elapsed since expiry, rounded down (0 if not yet expired)."""
    seconds = (as_utc(now) - as_utc(expires_at)).total_seconds()
    if seconds <= 0:
        return 0
    return math.floor(seconds / _SECONDS_PER_DAY)


def format_expiry_date(expires_at: datetime) -> str:
    """Format an expiry date as ``Mon DD, YYYY`` (e.g. ``Mar 05, 2027``).

    Month names are fixed English abbreviations, independent of process locale.
    """
    expires_at = as_utc(expires_at)
    month = _MONTH_ABBREVIATIONS[expires_at.month - 1]
    return f"{month} {expires_at.day:02d}, {expires_at.year}"
