"""Document API endpoints.

Provides REST API for listing, uploading, viewing, archiving and downloading
the authenticated user's PDF documents.

Every route runs the ownership policy through DocumentService; domain errors
are rendered by the handlers registered in main.py.
"""

import logging
import unicodedata
from datetime import datetime, timezone
from typing import Annotated, BinaryIO, Iterator, Optional
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from auth.dependencies import CurrentUser
from database import get_db
from domain.documents.ports.object_storage_port import ObjectStoragePort
from domain.documents.validation import MAX_FILE_SIZE, PDF_MIME_TYPE
from infrastructure.storage.storage_config import get_storage
from .schemas import (
    ArchiveResponse,
    DocumentEnvelope,
    DocumentListEnvelope,
    DocumentResponse,
)
from .service import DocumentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["Documents"])

DOWNLOAD_CHUNK_SIZE = 64 * 1024


def get_now() -> datetime:
    """Reference time for expiry classification (overridable in tests)."""
    return datetime.now(timezone.utc)


def get_document_service(
    db: Annotated[Session, Depends(get_db)],
    storage: Annotated[ObjectStoragePort, Depends(get_storage)],
) -> DocumentService:
    return DocumentService(db, storage)


Service = Annotated[DocumentService, Depends(get_document_service)]
Now = Annotated[datetime, Depends(get_now)]


def _to_response(request: Request, document, now: datetime) -> DocumentResponse:
    download_url = str(request.url_for("download_document", document_id=str(document.id)))
    return DocumentResponse.from_document(document, now, download_url)


def _iter_stream(stream: BinaryIO) -> Iterator[bytes]:
    try:
        while True:
            chunk = stream.read(DOWNLOAD_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


def _content_disposition(name: str) -> str:
    """Attachment header for ``{name}.pdf``.

    Non-ASCII names get an ASCII ``filename`` fallback plus an RFC 5987
    ``filename*`` carrying the UTF-8 name.
    """
    filename = f"{name}.pdf"
    fallback = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    fallback = "".join(c for c in fallback if c.isprintable() and c not in '"\\').strip()
    header = f'attachment; filename="{fallback or "document"}.pdf"'
    quoted = quote(filename, safe="")
    if quoted != filename:
        header += f"; filename*=UTF-8''{quoted}"
    return header


@router.get("", response_model=DocumentListEnvelope)
def list_documents(
    request: Request,
    current_user: CurrentUser,
    service: Service,
    now: Now,
):
    """List the current user's documents, soonest-expiring first."""
    documents = service.list_documents(current_user)
    return DocumentListEnvelope(data=[_to_response(request, d, now) for d in documents])


@router.post("", response_model=DocumentEnvelope, status_code=status.HTTP_201_CREATED)
async def create_document(
    request: Request,
    current_user: CurrentUser,
    service: Service,
    now: Now,
    name: Annotated[Optional[str], Form()] = None,
    expires_at: Annotated[Optional[str], Form()] = None,
    file: Annotated[Optional[UploadFile], File()] = None,
):
    """Upload a PDF with an expiry date.

    Accepts multipart/form-data:
    - name: Display name (max 255 characters)
    - expires_at: ISO date or datetime, after today and within 5 years
    - file: PDF, max MAX_UPLOAD_SIZE_BYTES

    All field errors are returned together as a 422.

    Example:
        curl -X POST https://vault.example.com/api/v1/documents \\
             -H "Authorization: Bearer $TOKEN" \\
             -F "name=Passport" -F "expires_at=2030-06-01" \\
             -F "file=@passport.pdf"
    """
    # One byte past the limit is enough for the size check to reject it
    content = await file.read(MAX_FILE_SIZE + 1) if file is not None else None

    document = await service.create_document(
        principal=current_user,
        name=name,
        expires_at=expires_at,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        content=content,
        now=now,
    )
    return DocumentEnvelope(data=_to_response(request, document, now))


@router.get("/{document_id}", response_model=DocumentEnvelope)
def show_document(
    document_id: UUID,
    request: Request,
    current_user: CurrentUser,
    service: Service,
    now: Now,
):
    """Get one of the current user's documents (403 for other owners)."""
    document = service.get_document(current_user, document_id)
    return DocumentEnvelope(data=_to_response(request, document, now))


@router.post("/{document_id}/archive", response_model=ArchiveResponse)
def archive_document(
    document_id: UUID,
    request: Request,
    current_user: CurrentUser,
    service: Service,
    now: Now,
):
    """Archive a document. A second archive attempt returns 422."""
    document = service.archive_document(current_user, document_id, now)
    return ArchiveResponse(data=_to_response(request, document, now))


@router.get("/{document_id}/download", name="download_document")
async def download_document(
    document_id: UUID,
    current_user: CurrentUser,
    service: Service,
):
    """Download the stored PDF as ``{name}.pdf``.

    Returns 404 "File not found" if the blob is missing from storage.
    """
    document, stream = await service.open_download(current_user, document_id)

    logger.info(
        f"Document downloaded: id={document.id}, storage_key={document.path}"
    )

    return StreamingResponse(
        _iter_stream(stream),
        media_type=PDF_MIME_TYPE,
        headers={
            "Content-Disposition": _content_disposition(document.name)
        },
    )
