"""Document SQLAlchemy model

Document represents an uploaded PDF with an expiry date.
Tracks the blob store path, owner and archive state.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, String, Text, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from domain.documents.errors import AlreadyArchivedError
from domain.documents.lifecycle import (
    ArchiveStatus,
    ExpiryStatus,
    EXPIRING_SOON_WINDOW,
    archive_status,
    classify_expiry,
    is_expired,
    is_expiring_soon,
)
from .base import Base, UTCDateTime, utcnow


class Document(Base):
    """Document model representing a stored PDF.

    Each document belongs to exactly one owner (set at creation, immutable).
    The only mutation after creation is archiving, which sets archived_at
    once and never clears it.
    """
    __tablename__ = "document"
    __table_args__ = (
        Index("ix_document_owner_expires_at", "owner_id", "expires_at"),
        Index("ix_document_archived_at", "archived_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(Uuid, ForeignKey("user.id", ondelete="RESTRICT"), nullable=False)
    name = Column(String(255), nullable=False)
    path = Column(Text, nullable=False)  # Blob store key
    expires_at = Column(UTCDateTime, nullable=False)
    archived_at = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    owner = relationship("User", back_populates="documents")

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None

    @property
    def archive_status(self) -> ArchiveStatus:
        return archive_status(self.archived_at)

    def is_expired(self, now: datetime) -> bool:
        """Expired by date, regardless of archive state"""
        return is_expired(self.expires_at, now)

    def is_expiring_soon(self, now: datetime, window=EXPIRING_SOON_WINDOW) -> bool:
        """Expires within the window, regardless of archive state"""
        return is_expiring_soon(self.expires_at, now, window)

    def expiry_status(self, now: datetime, window=EXPIRING_SOON_WINDOW) -> ExpiryStatus:
        return classify_expiry(self.expires_at, now, window)

    def archive(self, now: datetime) -> None:
        """Transition LIVE → ARCHIVED.

        Raises:
            AlreadyArchivedError: If archived_at is already set (left unchanged)
        """
        if self.archived_at is not None:
            raise AlreadyArchivedError()
        self.archived_at = now

    def to_dict(self, now: Optional[datetime] = None):
        """Convert document to dictionary representation"""
        data = {
            "id": str(self.id),
            "owner_id": str(self.owner_id),
            "name": self.name,
            "path": self.path,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "archived_at": self.archived_at.isoformat() if self.archived_at else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
        if now is not None:
            data["is_expired"] = self.is_expired(now)
            data["is_expiring_soon"] = self.is_expiring_soon(now)
        return data

    def __repr__(self) -> str:
        return f"Document(id={self.id}, name={self.name!r}, owner_id={self.owner_id})"
