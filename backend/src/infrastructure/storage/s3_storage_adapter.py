"""S3 Storage Adapter - Implementation of ObjectStoragePort using boto3.

Stores document PDFs in AWS S3, MinIO, or any other S3-compatible service.
Blobs are content-addressed per owner, so re-uploading identical bytes is a no-op.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import hashlib
import logging
from io import BytesIO
from typing import BinaryIO, Optional
from uuid import UUID

import boto3
from botocore.exceptions import ClientError, NoCredentialsError

from domain.documents.errors import StorageError
from domain.documents.ports.object_storage_port import (
    ObjectStoragePort,
    StoredFile,
)

logger = logging.getLogger(__name__)


class S3StorageAdapter(ObjectStoragePort):
    """S3-compatible storage adapter using boto3.

    Features:
    - SHA256-based deduplication (per owner)
    - Storage key format: documents/{owner_id}/{sha256}.pdf

    Example:
        config = load_storage_config()
        storage = S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )

        with open('passport.pdf', 'rb') as f:
            stored = await storage.store_file(
                file=f,
                owner_id=UUID('...'),
                filename='passport.pdf',
                mime_type='application/pdf',
            )
    """

    def __init__(
        self,
        endpoint_url: Optional[str],
        access_key: Optional[str],
        secret_key: Optional[str],
        bucket_name: str,
        region: str = "us-east-1",
    ):
        """Initialize S3 storage adapter.

        Args:
            endpoint_url: S3 endpoint URL (None for AWS S3, URL for MinIO)
            access_key: S3 access key ID
            secret_key: S3 secret access key
            bucket_name: S3 bucket name
            region: AWS region (default: 'us-east-1')

        Raises:
            StorageError: If S3 client initialization fails
        """
        try:
            self.s3_client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name=region,
            )
            self.bucket_name = bucket_name
            self.region = region

            logger.info(
                f"Initialized S3 storage adapter: bucket={bucket_name}, "
                f"endpoint={endpoint_url or 'AWS S3'}, region={region}"
            )
        except NoCredentialsError as e:
            raise StorageError(f"Invalid S3 credentials: {e}")
        except Exception as e:
            raise StorageError(f"Failed to initialize S3 client: {e}")

    async def store_file(
        self,
        file: BinaryIO,
        owner_id: UUID,
        filename: str,
        mime_type: str,
    ) -> StoredFile:
        """Store a file in S3 with automatic deduplication.

        Implementation:
        1. Reads file in chunks (8KB) while calculating SHA256
        2. Generates storage key: documents/{owner_id}/{sha256}.pdf
        3. Checks if file exists (deduplication)
        4. Uploads if new, returns existing if duplicate

        Raises:
            StorageError: If upload fails
            ValueError: If file is empty
        """
        sha256_hash = hashlib.sha256()
        chunks = []
        size_bytes = 0

        chunk_size = 8192
        while True:
            chunk = file.read(chunk_size)
            if not chunk:
                break
            sha256_hash.update(chunk)
            chunks.append(chunk)
            size_bytes += len(chunk)

        if size_bytes == 0:
            raise ValueError("Cannot store empty file")

        sha256_hex = sha256_hash.hexdigest()
        storage_key = build_storage_key(owner_id, sha256_hex)

        stored = StoredFile(
            storage_key=storage_key,
            sha256=sha256_hex,
            size_bytes=size_bytes,
            mime_type=mime_type,
        )

        if await self.file_exists(storage_key):
            logger.info(
                f"File already exists (dedup): storage_key={storage_key}, "
                f"size={size_bytes}"
            )
            return stored

        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=storage_key,
                Body=BytesIO(b"".join(chunks)),
                ContentType=mime_type,
                Metadata={
                    "sha256": sha256_hex,
                    "original_filename": filename,
                    "owner_id": str(owner_id),
                },
            )

            logger.info(
                f"Uploaded file: storage_key={storage_key}, "
                f"size={size_bytes}, mime_type={mime_type}"
            )
            return stored

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 upload failed: storage_key={storage_key}, "
                f"error={error_code}, message={e}"
            )
            raise StorageError(f"Failed to upload file: {error_code}")
        except Exception as e:
            logger.error(f"Unexpected error during upload: {e}")
            raise StorageError(f"Failed to upload file: {e}")

    async def retrieve_file(self, storage_key: str) -> BinaryIO:
        """Retrieve a file from S3.

        Raises:
            FileNotFoundError: If file doesn't exist
            StorageError: If retrieval fails
        """
        try:
            response = self.s3_client.get_object(
                Bucket=self.bucket_name,
                Key=storage_key,
            )

            logger.info(f"Retrieved file: storage_key={storage_key}")
            return response["Body"]

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("NoSuchKey", "404"):
                logger.warning(f"File not found: storage_key={storage_key}")
                raise FileNotFoundError(f"File not found: {storage_key}")
            logger.error(
                f"S3 retrieval failed: storage_key={storage_key}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to retrieve file: {error_code}")
        except Exception as e:
            logger.error(f"Unexpected error during retrieval: {e}")
            raise StorageError(f"Failed to retrieve file: {e}")

    async def delete_file(self, storage_key: str) -> bool:
        """Delete a file from S3.

        Returns:
            bool: True if deleted, False if didn't exist

        Raises:
            StorageError: If deletion fails
        """
        try:
            if not await self.file_exists(storage_key):
                logger.info(f"File not found for deletion: storage_key={storage_key}")
                return False

            self.s3_client.delete_object(
                Bucket=self.bucket_name,
                Key=storage_key,
            )

            logger.info(f"Deleted file: storage_key={storage_key}")
            return True

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(
                f"S3 deletion failed: storage_key={storage_key}, "
                f"error={error_code}"
            )
            raise StorageError(f"Failed to delete file: {error_code}")

    async def file_exists(self, storage_key: str) -> bool:
        """Check if a file exists in S3 (HEAD request)."""
        try:
            self.s3_client.head_object(
                Bucket=self.bucket_name,
                Key=storage_key,
            )
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code not in ("404", "NoSuchKey"):
                logger.warning(
                    f"Error checking file existence: storage_key={storage_key}, "
                    f"error={error_code}"
                )
            return False

    async def verify_bucket_exists(self) -> bool:
        """Verify that the configured bucket exists.

        Used by the health check and on startup to fail fast.

        Raises:
            StorageError: If bucket check fails or bucket doesn't exist
        """
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
            return True
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in ("404", "NoSuchBucket"):
                raise StorageError(
                    f"Bucket '{self.bucket_name}' does not exist. "
                    f"Create it first or update MINIO_BUCKET environment variable."
                )
            raise StorageError(f"Failed to verify bucket: {error_code}")

    async def health_check(self) -> None:
        await self.verify_bucket_exists()


def build_storage_key(owner_id: UUID, sha256: str) -> str:
    """Storage key for a document blob.

    Example:
        >>> build_storage_key(UUID('a1b2c3d4-e5f6-7890-abcd-ef1234567890'), 'abc123')
        'documents/a1b2c3d4-e5f6-7890-abcd-ef1234567890/abc123.pdf'
    """
    return f"documents/{owner_id}/{sha256}.pdf"
