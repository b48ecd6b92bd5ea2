"""Document domain errors.

Every error carries the HTTP status it maps to so the API layer can render
it without knowing the individual types. Validation and authorization errors
are surfaced verbatim; storage errors are logged and returned as a generic 500.
"""

from typing import Dict, List, Optional


class VaultError(Exception):
    """Base exception for document vault operations."""

    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(VaultError):
    """Malformed or out-of-range input, with per-field messages."""

    status_code = 422
    default_message = "The given data was invalid."

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message)

    def has(self, field: str) -> bool:
        return bool(self.errors.get(field))


class ForbiddenError(VaultError):
    """Principal is not allowed to perform the action on the document."""

    status_code = 403
    default_message = "This action is unauthorized."


class NotFoundError(VaultError):
    """Referenced document or stored file does not exist."""

    status_code = 404
    default_message = "Document not found"


class AlreadyArchivedError(VaultError):
    """Archive attempted on a document that is already archived."""

    status_code = 422
    default_message = "Document is already archived"


class StorageError(VaultError):
    """Blob store read/write failure."""

    status_code = 500
    default_message = "Storage operation failed"
