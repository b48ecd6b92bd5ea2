"""Object Storage Port - Domain interface for the document blob store.

This port defines the contract for storing and retrieving document files.
Adapters implement it for S3/MinIO or the local filesystem.

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO
from uuid import UUID


@dataclass
class StoredFile:
    """Metadata for a file stored in the blob store.

    Attributes:
        storage_key: Opaque key in the blob store (format: documents/{owner_id}/{sha256}.pdf)
        sha256: SHA256 hash of file content (hex format)
        size_bytes: File size in bytes
        mime_type: MIME type of the file (always 'application/pdf' here)
    """
    storage_key: str
    sha256: str
    size_bytes: int
    mime_type: str


class ObjectStoragePort(ABC):
    """Port interface for document blob storage.

    Key Design Principles:
    - Storage keys include owner_id so blobs are partitioned per user
    - SHA256 calculated during upload; identical content maps to the same key
    - Keys are immutable once written

    Example Usage:
        storage = S3StorageAdapter(...)

        with open('contract.pdf', 'rb') as f:
            stored = await storage.store_file(
                file=f,
                owner_id=UUID('...'),
                filename='contract.pdf',
                mime_type='application/pdf'
            )

        file_stream = await storage.retrieve_file(stored.storage_key)
    """

    @abstractmethod
    async def store_file(
        self,
        file: BinaryIO,
        owner_id: UUID,
        filename: str,
        mime_type: str,
    ) -> StoredFile:
        """Store a file, returning its storage key and digest.

        Args:
            file: Binary file stream to store (must be readable)
            owner_id: Owning user's UUID (used in the storage key)
            filename: Original filename (for extension extraction)
            mime_type: MIME type of the file

        Returns:
            StoredFile: Metadata about stored file

        Raises:
            StorageError: If upload fails or storage is unavailable
            ValueError: If file is empty
        """
        pass

    @abstractmethod
    async def retrieve_file(self, storage_key: str) -> BinaryIO:
        """Retrieve a file by its storage key.

        Raises:
            FileNotFoundError: If file doesn't exist in storage
            StorageError: If retrieval fails

        Note:
            Caller is responsible for closing the returned stream.
        """
        pass

    @abstractmethod
    async def delete_file(self, storage_key: str) -> bool:
        """Delete a file.

        Returns:
            bool: True if file was deleted, False if it didn't exist

        Raises:
            StorageError: If deletion fails
        """
        pass

    @abstractmethod
    async def file_exists(self, storage_key: str) -> bool:
        """Check if a file exists."""
        pass

    async def health_check(self) -> None:
        """Raise if the blob store is unreachable. Default: no-op."""
        return None
