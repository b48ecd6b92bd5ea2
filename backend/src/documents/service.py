"""Document service: every principal-facing document operation.

Each operation runs the ownership policy before touching data and takes the
reference time ``now`` explicitly.
"""

import logging
from datetime import date, datetime
from io import BytesIO
from typing import BinaryIO, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth.policy import DocumentAction, authorize
from domain.documents.errors import NotFoundError, StorageError, ValidationError
from domain.documents.lifecycle import as_utc
from domain.documents.ports.object_storage_port import ObjectStoragePort
from domain.documents.validation import (
    PDF_MIME_TYPE,
    exceeds_max_expiry,
    max_expiry_date,
    parse_expiry,
    validate_document_upload,
)
from infrastructure.repositories.document_repository import DocumentRepository
from models.document import Document
from models.user import User
from observability.metrics import (
    document_downloads_total,
    documents_archived_total,
    documents_uploaded_total,
)

logger = logging.getLogger(__name__)


def report_expiry_limit_exceeded(
    user: User,
    requested: datetime,
    max_allowed: date,
    document_name: Optional[str],
) -> None:
    """Observability hook for uploads rejected by the maximum-expiry rule."""
    logger.warning(
        "Document expiry date exceeds maximum allowed",
        extra={
            "user_id": str(user.id),
            "email": user.email,
            "requested_expires_at": requested.isoformat(),
            "max_allowed_date": max_allowed.isoformat(),
            "document_name": document_name,
        }
    )


class DocumentService:
    """Document operations for an authenticated principal."""

    def __init__(self, db: Session, storage: ObjectStoragePort):
        self.db = db
        self.storage = storage
        self.repository = DocumentRepository(db)

    def list_documents(self, principal: User) -> List[Document]:
        """The principal's own documents, soonest-expiring first."""
        authorize(principal, None, DocumentAction.VIEW_ANY)
        return self.repository.list_for_owner(principal.id)

    def get_document(self, principal: User, document_id: UUID) -> Document:
        """
        Raises:
            NotFoundError: If no such document exists
            ForbiddenError: If the principal does not own it
        """
        document = self.repository.get(document_id)
        if document is None:
            raise NotFoundError()
        authorize(principal, document, DocumentAction.VIEW)
        return document

    async def create_document(
        self,
        principal: User,
        name: Optional[str],
        expires_at,
        filename: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
        now: datetime,
    ) -> Document:
        """Validate, store the blob, then persist the document row.

        Raises:
            ValidationError: With every failing field
            StorageError: If the blob store or the database write fails
        """
        authorize(principal, None, DocumentAction.CREATE)
        today = as_utc(now).date()

        try:
            upload = validate_document_upload(name, expires_at, content_type, content, today)
        except ValidationError as e:
            requested = parse_expiry(expires_at)
            if e.has("expires_at") and requested is not None and exceeds_max_expiry(requested, today):
                report_expiry_limit_exceeded(principal, requested, max_expiry_date(today), name)
            documents_uploaded_total.labels(status="validation_error").inc()
            raise

        try:
            stored = await self.storage.store_file(
                file=BytesIO(content),
                owner_id=principal.id,
                filename=filename or f"{upload.name}.pdf",
                mime_type=PDF_MIME_TYPE,
            )
        except (StorageError, ValueError) as e:
            logger.error(
                f"Failed to store document blob: {e}",
                exc_info=True,
                extra={"user_id": str(principal.id), "document_name": upload.name}
            )
            self.db.rollback()
            documents_uploaded_total.labels(status="storage_error").inc()
            raise StorageError(f"Failed to store document: {e}") from e

        try:
            document = self.repository.create(
                owner_id=principal.id,
                name=upload.name,
                path=stored.storage_key,
                expires_at=upload.expires_at,
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Failed to persist document: {e}",
                exc_info=True,
                extra={"user_id": str(principal.id), "storage_key": stored.storage_key}
            )
            await self._discard_blob(stored.storage_key)
            documents_uploaded_total.labels(status="storage_error").inc()
            raise StorageError("Failed to save document") from e

        self.db.refresh(document)
        documents_uploaded_total.labels(status="success").inc()
        logger.info(
            f"Document created: id={document.id}",
            extra={"user_id": str(principal.id), "document_id": str(document.id)}
        )
        return document

    async def _discard_blob(self, storage_key: str) -> None:
        """Best-effort removal of a blob no document row points at."""
        try:
            if not self.repository.is_path_referenced(storage_key):
                await self.storage.delete_file(storage_key)
        except Exception as e:
            logger.warning(
                f"Failed to remove orphaned blob {storage_key}: {e}",
                extra={"storage_key": storage_key}
            )

    def archive_document(self, principal: User, document_id: UUID, now: datetime) -> Document:
        """Archive a live document (one-way).

        Raises:
            NotFoundError, ForbiddenError, AlreadyArchivedError
        """
        document = self.repository.get(document_id)
        if document is None:
            raise NotFoundError()
        authorize(principal, document, DocumentAction.UPDATE)

        document.archive(as_utc(now))
        self.db.commit()
        self.db.refresh(document)

        documents_archived_total.inc()
        logger.info(
            f"Document archived: id={document.id}",
            extra={"user_id": str(principal.id), "document_id": str(document.id)}
        )
        return document

    async def open_download(self, principal: User, document_id: UUID) -> Tuple[Document, BinaryIO]:
        """Authorize and open the document's blob for streaming.

        Raises:
            NotFoundError: If the document or its blob does not exist
            ForbiddenError: If the principal does not own it
        """
        document = self.get_document(principal, document_id)

        try:
            stream = await self.storage.retrieve_file(document.path)
        except FileNotFoundError:
            logger.error(
                f"File not found in storage: id={document.id}, storage_key={document.path}"
            )
            document_downloads_total.labels(status="missing_blob").inc()
            raise NotFoundError("File not found")

        document_downloads_total.labels(status="success").inc()
        return document, stream
