"""Pydantic schemas for document endpoints"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class OwnerSummary(BaseModel):
    """Owner fields shown alongside a document"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str


class DocumentResponse(BaseModel):
    """Document as returned by the API.

    is_expired / is_expiring_soon are computed at response time and do not
    consider archive state.
    """
    id: UUID
    name: str
    path: str
    expires_at: datetime
    archived_at: Optional[datetime] = None
    is_expired: bool
    is_expiring_soon: bool
    download_url: str
    owner: OwnerSummary
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, document, now: datetime, download_url: str) -> "DocumentResponse":
        return cls(
            id=document.id,
            name=document.name,
            path=document.path,
            expires_at=document.expires_at,
            archived_at=document.archived_at,
            is_expired=document.is_expired(now),
            is_expiring_soon=document.is_expiring_soon(now),
            download_url=download_url,
            owner=OwnerSummary.model_validate(document.owner),
            created_at=document.created_at,
            updated_at=document.updated_at,
        )


class DocumentEnvelope(BaseModel):
    data: DocumentResponse


class DocumentListEnvelope(BaseModel):
    data: List[DocumentResponse] = Field(default_factory=list)


class ArchiveResponse(BaseModel):
    message: str = "Document archived successfully"
    data: DocumentResponse
