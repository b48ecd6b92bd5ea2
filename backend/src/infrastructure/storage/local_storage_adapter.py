"""Local filesystem implementation of ObjectStoragePort.

Used for development and tests (STORAGE_BACKEND=local). Uses the same
content-addressed key layout as the S3 adapter, resolved under a base directory.
"""

import hashlib
import logging
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Union
from uuid import UUID

from domain.documents.errors import StorageError
from domain.documents.ports.object_storage_port import (
    ObjectStoragePort,
    StoredFile,
)
from .s3_storage_adapter import build_storage_key

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192


class LocalStorageAdapter(ObjectStoragePort):
    """Stores blobs as files below ``base_dir``."""

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir).expanduser().resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, storage_key: str) -> Path:
        candidate = (self.base_dir / storage_key.lstrip("/")).resolve()
        try:
            candidate.relative_to(self.base_dir)
        except ValueError as exc:
            raise StorageError(f"Unsafe storage key: {storage_key}") from exc
        return candidate

    async def store_file(
        self,
        file: BinaryIO,
        owner_id: UUID,
        filename: str,
        mime_type: str,
    ) -> StoredFile:
        digest = hashlib.sha256()
        chunks = []
        while True:
            chunk = file.read(CHUNK_SIZE)
            if not chunk:
                break
            digest.update(chunk)
            chunks.append(chunk)

        content = b"".join(chunks)
        if not content:
            raise ValueError("Cannot store empty file")

        sha256_hex = digest.hexdigest()
        storage_key = build_storage_key(owner_id, sha256_hex)
        destination = self._path_for(storage_key)

        if not destination.exists():
            try:
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_bytes(content)
            except OSError as e:
                logger.error(f"Local write failed: storage_key={storage_key}, error={e}")
                raise StorageError(f"Failed to upload file: {e}")
            logger.info(f"Stored file: storage_key={storage_key}, size={len(content)}")

        return StoredFile(
            storage_key=storage_key,
            sha256=sha256_hex,
            size_bytes=len(content),
            mime_type=mime_type,
        )

    async def retrieve_file(self, storage_key: str) -> BinaryIO:
        path = self._path_for(storage_key)
        if not path.is_file():
            logger.warning(f"File not found: storage_key={storage_key}")
            raise FileNotFoundError(f"File not found: {storage_key}")
        try:
            return BytesIO(path.read_bytes())
        except OSError as e:
            raise StorageError(f"Failed to retrieve file: {e}")

    async def delete_file(self, storage_key: str) -> bool:
        path = self._path_for(storage_key)
        if not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete file: {e}")
        logger.info(f"Deleted file: storage_key={storage_key}")
        return True

    async def file_exists(self, storage_key: str) -> bool:
        return self._path_for(storage_key).is_file()

    async def health_check(self) -> None:
        if not self.base_dir.is_dir():
            raise StorageError(f"Storage root {self.base_dir} does not exist")
