"""Documents domain module - expiry lifecycle, upload validation, errors, storage port
"""

from .errors import (
    VaultError,
    ValidationError,
    ForbiddenError,
    NotFoundError,
    AlreadyArchivedError,
    StorageError,
)
from .lifecycle import (
    ExpiryStatus,
    ArchiveStatus,
    EXPIRING_SOON_WINDOW,
    classify_expiry,
    is_expired,
    is_expiring_soon,
    days_until_expiry,
    days_since_expiry,
    format_expiry_date,
)
from .validation import (
    is_supported_mime_type,
    validate_file_size,
    validate_document_upload,
    max_expiry_date,
    exceeds_max_expiry,
    parse_expiry,
    SUPPORTED_MIME_TYPES,
    MAX_FILE_SIZE,
    MAX_EXPIRY_YEARS,
)

__all__ = [
    "VaultError",
    "ValidationError",
    "ForbiddenError",
    "NotFoundError",
    "AlreadyArchivedError",
    "StorageError",
    "ExpiryStatus",
    "ArchiveStatus",
    "EXPIRING_SOON_WINDOW",
    "classify_expiry",
    "is_expired",
    "is_expiring_soon",
    "days_until_expiry",
    "days_since_expiry",
    "format_expiry_date",
    "is_supported_mime_type",
    "validate_file_size",
    "validate_document_upload",
    "max_expiry_date",
    "exceeds_max_expiry",
    "parse_expiry",
    "SUPPORTED_MIME_TYPES",
    "MAX_FILE_SIZE",
    "MAX_EXPIRY_YEARS",
]
