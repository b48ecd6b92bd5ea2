"""Expiry digest: partition a user's documents and compose the reminder.

Pure functions of the documents and an explicit ``now``; no I/O.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List

from domain.documents.lifecycle import (
    EXPIRING_SOON_WINDOW,
    days_since_expiry,
    days_until_expiry,
    format_expiry_date,
    is_expired,
    is_expiring_soon,
)
from .ports import DigestMessage

SUBJECT = "Document Expiry Reminder"
INTRO = "This is your daily document expiry reminder."
EXPIRING_SOON_HEADING = "Documents expiring within the next {days} days:"
EXPIRED_HEADING = "Documents that have expired and need attention:"
CLOSING = "Please review these documents and take appropriate action."


@dataclass
class ExpiryDigest:
    """A user's live documents split into expiring-soon and expired."""
    expiring_soon: List = field(default_factory=list)
    expired: List = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.expiring_soon and not self.expired

    @classmethod
    def partition(
        cls,
        documents: Iterable,
        now: datetime,
        window: timedelta = EXPIRING_SOON_WINDOW,
    ) -> "ExpiryDigest":
        """Split documents into the two buckets.

        Archived documents and documents outside both buckets are dropped.
        The buckets are disjoint: expiring soon requires expires_at >= now,
        expired requires expires_at < now.
        """
        digest = cls()
        for document in documents:
            if document.archived_at is not None:
                continue
            if is_expired(document.expires_at, now):
                digest.expired.append(document)
            elif is_expiring_soon(document.expires_at, now, window):
                digest.expiring_soon.append(document)
        return digest


def expiring_soon_line(document, now: datetime) -> str:
    """
    Example:
        - Passport (expires in 3 days on Mar 05, 2027)
    """
    return (
        f"- {document.name} (expires in {days_until_expiry(document.expires_at, now)} days "
        f"on {format_expiry_date(document.expires_at)})"
    )


def expired_line(document, now: datetime) -> str:
    return (
        f"- {document.name} (expired {days_since_expiry(document.expires_at, now)} days ago "
        f"on {format_expiry_date(document.expires_at)})"
    )


def render_body(
    recipient_name: str,
    digest: ExpiryDigest,
    now: datetime,
    window: timedelta = EXPIRING_SOON_WINDOW,
) -> str:
    """Render the plain-text reminder. Empty sections are omitted."""
    lines = [f"Hello {recipient_name},", "", INTRO, ""]

    if digest.expiring_soon:
        lines.append(EXPIRING_SOON_HEADING.format(days=window.days))
        lines.extend(expiring_soon_line(d, now) for d in digest.expiring_soon)
        lines.append("")

    if digest.expired:
        lines.append(EXPIRED_HEADING)
        lines.extend(expired_line(d, now) for d in digest.expired)
        lines.append("")

    lines.append(CLOSING)
    return "\n".join(lines) + "\n"


def compose_expiry_digest(
    user,
    digest: ExpiryDigest,
    now: datetime,
    window: timedelta = EXPIRING_SOON_WINDOW,
) -> DigestMessage:
    """Build the single reminder message for ``user``.

    Raises:
        ValueError: If the digest is empty (such users are skipped upstream)
    """
    if digest.is_empty:
        raise ValueError(f"Empty expiry digest for user {user.id}")

    return DigestMessage(
        user_id=str(user.id),
        recipient_email=user.email,
        recipient_name=user.name,
        subject=SUBJECT,
        body=render_body(user.name, digest, now, window),
        expiring_soon_count=len(digest.expiring_soon),
        expired_count=len(digest.expired),
    )
