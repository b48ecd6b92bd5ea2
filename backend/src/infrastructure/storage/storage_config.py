"""Storage configuration for the document blob store.

Builds an ObjectStoragePort from application settings. Supports MinIO
(development), AWS S3 (production) and the local filesystem (tests, single host).
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from config import Settings, settings as app_settings
from domain.documents.ports.object_storage_port import ObjectStoragePort


@dataclass
class StorageConfig:
    """Configuration for S3-compatible object storage.

    Attributes:
        endpoint_url: S3 endpoint URL (e.g., 'http://localhost:9000' for MinIO,
                      None for AWS S3 which uses default regional endpoints)
        access_key: S3 access key ID
        secret_key: S3 secret access key
        bucket_name: S3 bucket name for storing documents
        region: AWS region (default: 'us-east-1')
        use_ssl: Whether to use HTTPS (True for production, False for local MinIO)
    """
    endpoint_url: Optional[str]
    access_key: str
    secret_key: str
    bucket_name: str
    region: str = "us-east-1"
    use_ssl: bool = True


def load_storage_config(settings: Optional[Settings] = None) -> StorageConfig:
    """Build S3 storage configuration from settings.

    Settings:
        MINIO_ENDPOINT: MinIO endpoint (e.g., 'localhost:9000').
                        Empty means AWS S3 with default regional endpoints.
        MINIO_ROOT_USER / MINIO_ROOT_PASSWORD: Credentials
        MINIO_BUCKET: Bucket name
        MINIO_USE_SSL: Whether to use https for the MinIO endpoint
        AWS_REGION: AWS region

    Raises:
        ValueError: If the configuration is invalid
    """
    settings = settings or app_settings

    endpoint_url = None
    if settings.MINIO_ENDPOINT:
        protocol = "https" if settings.MINIO_USE_SSL else "http"
        endpoint_url = f"{protocol}://{settings.MINIO_ENDPOINT}"

    config = StorageConfig(
        endpoint_url=endpoint_url,
        access_key=settings.MINIO_ROOT_USER,
        secret_key=settings.MINIO_ROOT_PASSWORD,
        bucket_name=settings.MINIO_BUCKET,
        region=settings.AWS_REGION,
        use_ssl=settings.MINIO_USE_SSL if endpoint_url else True,
    )
    validate_storage_config(config)
    return config


def validate_storage_config(config: StorageConfig) -> None:
    """Validate storage configuration.

    Raises:
        ValueError: If configuration is invalid
    """
    if not config.access_key:
        raise ValueError("Storage access_key is required")

    if not config.secret_key:
        raise ValueError("Storage secret_key is required")

    if not config.bucket_name:
        raise ValueError("Storage bucket_name is required")

    if config.endpoint_url:
        if not config.endpoint_url.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid endpoint_url: {config.endpoint_url}. "
                "Must start with http:// or https://"
            )
    elif not config.region:
        raise ValueError("AWS region is required when using S3 (MINIO_ENDPOINT not set)")


def create_storage(settings: Optional[Settings] = None) -> ObjectStoragePort:
    """Create the storage adapter selected by STORAGE_BACKEND.

    Raises:
        ValueError: If STORAGE_BACKEND is unknown or the S3 config is invalid
    """
    settings = settings or app_settings
    backend = settings.STORAGE_BACKEND.lower()

    if backend == "local":
        from .local_storage_adapter import LocalStorageAdapter
        return LocalStorageAdapter(settings.LOCAL_STORAGE_ROOT)

    if backend == "s3":
        from .s3_storage_adapter import S3StorageAdapter
        config = load_storage_config(settings)
        return S3StorageAdapter(
            endpoint_url=config.endpoint_url,
            access_key=config.access_key,
            secret_key=config.secret_key,
            bucket_name=config.bucket_name,
            region=config.region,
        )

    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND!r}")


@lru_cache()
def get_storage() -> ObjectStoragePort:
    """FastAPI dependency returning the process-wide storage adapter.

    Tests override this via app.dependency_overrides.
    """
    return create_storage()
