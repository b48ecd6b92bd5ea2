"""Document repository: owner-scoped queries over the document table.

Predicates are plain functions of an explicit reference time and compose with
``and_`` / ``or_``. Every query method takes the owner id first; nothing here
reads across ownership boundaries (user enumeration lives in UserRepository).
"""

from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, and_, or_
from sqlalchemy.orm import Session, joinedload

from domain.documents.lifecycle import EXPIRING_SOON_WINDOW, as_utc
from models.document import Document


def not_archived():
    """archived_at IS NULL"""
    return Document.archived_at.is_(None)


def expiring_soon(now: datetime, window: timedelta = EXPIRING_SOON_WINDOW):
    """Live documents expiring within [now, now + window]"""
    now = as_utc(now)
    return and_(
        not_archived(),
        Document.expires_at >= now,
        Document.expires_at <= now + window,
    )


def expired(now: datetime):
    """Live documents whose expiry is strictly before now"""
    return and_(
        not_archived(),
        Document.expires_at < as_utc(now),
    )


def needs_attention(now: datetime, window: timedelta = EXPIRING_SOON_WINDOW):
    """notArchived AND (expiringSoon OR expired), as one predicate"""
    return and_(
        not_archived(),
        or_(expiring_soon(now, window), expired(now)),
    )


class DocumentRepository:
    """Repository for document database operations."""

    def __init__(self, db: Session):
        """Initialize repository with database session.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def create(
        self,
        owner_id: UUID,
        name: str,
        path: str,
        expires_at: datetime,
    ) -> Document:
        """Add a new document to the session and flush to obtain its id."""
        document = Document(
            owner_id=owner_id,
            name=name,
            path=path,
            expires_at=expires_at,
        )
        self.db.add(document)
        self.db.flush()
        return document

    def get(self, document_id: UUID) -> Optional[Document]:
        """Fetch a document by id (with owner), unscoped.

        Callers must run the authorization policy on the result.
        """
        query = (
            select(Document)
            .options(joinedload(Document.owner))
            .where(Document.id == document_id)
        )
        return self.db.execute(query).scalar_one_or_none()

    def is_path_referenced(self, path: str) -> bool:
        """Whether any persisted document points at this blob key."""
        query = select(Document.id).where(Document.path == path).limit(1)
        return self.db.execute(query).first() is not None

    def _owned_by(self, owner_id: UUID, *criteria) -> List[Document]:
        query = (
            select(Document)
            .options(joinedload(Document.owner))
            .where(Document.owner_id == owner_id, *criteria)
            .order_by(Document.expires_at.asc(), Document.created_at.asc())
        )
        return list(self.db.execute(query).scalars().all())

    def list_for_owner(self, owner_id: UUID) -> List[Document]:
        """All of the owner's documents, soonest-expiring first."""
        return self._owned_by(owner_id)

    def list_expiring_soon(
        self,
        owner_id: UUID,
        now: datetime,
        window: timedelta = EXPIRING_SOON_WINDOW,
    ) -> List[Document]:
        return self._owned_by(owner_id, expiring_soon(now, window))

    def list_expired(self, owner_id: UUID, now: datetime) -> List[Document]:
        return self._owned_by(owner_id, expired(now))

    def list_not_archived(self, owner_id: UUID) -> List[Document]:
        return self._owned_by(owner_id, not_archived())

    def list_needing_attention(
        self,
        owner_id: UUID,
        now: datetime,
        window: timedelta = EXPIRING_SOON_WINDOW,
    ) -> List[Document]:
        """Expiring-soon and expired live documents in a single query."""
        return self._owned_by(owner_id, needs_attention(now, window))
