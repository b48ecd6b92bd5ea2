"""Validation rules for document uploads

Rules for creating a document:
- name: required, string, max 255 characters
- expires_at: required, valid date, strictly after today,
  on or before today + MAX_EXPIRY_YEARS
- file: required, PDF only, max MAX_FILE_SIZE bytes

All violations are collected into a single ValidationError keyed by field.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Dict, List, Optional, Tuple

from config import settings
from .errors import ValidationError
from .lifecycle import as_utc


PDF_MIME_TYPE = 'application/pdf'

# Only PDFs are accepted
SUPPORTED_MIME_TYPES = {
    PDF_MIME_TYPE,
}

# Every PDF starts with this header
PDF_MAGIC = b'%PDF-'

# File size limit (default 10MB, configurable via env)
MAX_FILE_SIZE = settings.MAX_UPLOAD_SIZE_BYTES

MAX_NAME_LENGTH = 255

MAX_EXPIRY_YEARS = settings.MAX_EXPIRY_YEARS


@dataclass
class ValidatedUpload:
    """Normalised create-document input"""
    name: str
    expires_at: datetime


def is_supported_mime_type(mime_type: Optional[str]) -> bool:
    """Check if MIME type is supported for upload

    Example:
        >>> is_supported_mime_type('application/pdf')
        True
        >>> is_supported_mime_type('image/jpeg')
        False
    """
    return mime_type in SUPPORTED_MIME_TYPES


def looks_like_pdf(content: bytes) -> bool:
    """Check the content starts with the PDF header"""
    return content[:len(PDF_MAGIC)] == PDF_MAGIC


def validate_file_size(size_bytes: int, max_size: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate file size is within limits

    Args:
        size_bytes: File size in bytes
        max_size: Maximum allowed size (defaults to MAX_FILE_SIZE)

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_file_size(1024)
        (True, None)
        >>> validate_file_size(0)
        (False, 'The file is empty.')
    """
    if max_size is None:
        max_size = MAX_FILE_SIZE

    if size_bytes == 0:
        return False, "The file is empty."

    if size_bytes > max_size:
        return False, f"The file may not be greater than {max_size // 1024} kilobytes."

    return True, None


def validate_document_name(name: Optional[str]) -> Optional[str]:
    """Return an error message for an invalid document name, else None"""
    if name is None or not str(name).strip():
        return "The name field is required."
    if not isinstance(name, str):
        return "The name must be a string."
    if len(name) > MAX_NAME_LENGTH:
        return f"The name may not be greater than {MAX_NAME_LENGTH} characters."
    return None


def add_years(day: date, years: int) -> date:
    """Add calendar years, clamping Feb 29 to Feb 28 in non-leap years"""
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        return day.replace(year=day.year + years, day=28)


def max_expiry_date(today: date, years: Optional[int] = None) -> date:
    """Latest allowed expiry date for a document created today"""
    return add_years(today, MAX_EXPIRY_YEARS if years is None else years)


def parse_expiry(raw) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime into an aware UTC datetime.

    Date-only values resolve to midnight UTC. Returns None if unparseable.

    Example:
        >>> parse_expiry('2027-03-05')
        datetime.datetime(2027, 3, 5, 0, 0, tzinfo=datetime.timezone.utc)
        >>> parse_expiry('next week') is None
        True
    """
    if isinstance(raw, datetime):
        return as_utc(raw)
    if isinstance(raw, date):
        return datetime.combine(raw, time.min, tzinfo=timezone.utc)
    if not isinstance(raw, str) or not raw.strip():
        return None

    value = raw.strip()
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'

    try:
        if len(value) == 10:
            return datetime.combine(date.fromisoformat(value), time.min, tzinfo=timezone.utc)
        return as_utc(datetime.fromisoformat(value))
    except ValueError:
        return None


def exceeds_max_expiry(expires_at: datetime, today: date) -> bool:
    """Whether the expiry date falls after the allowed maximum"""
    return expires_at.date() > max_expiry_date(today)


def validate_expiry(raw, today: date) -> Tuple[Optional[datetime], Optional[str]]:
    """Validate the requested expiry against ``today``.

    Returns:
        Tuple of (parsed_expiry, error_message)
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None, "The expires at field is required."

    expires_at = parse_expiry(raw)
    if expires_at is None:
        return None, "The expires at is not a valid date."

    if expires_at.date() <= today:
        return expires_at, "The expiry date must be in the future."

    if exceeds_max_expiry(expires_at, today):
        return expires_at, f"The expiry date cannot be more than {MAX_EXPIRY_YEARS} years in the future."

    return expires_at, None


def validate_upload_file(
    content_type: Optional[str],
    content: Optional[bytes],
    max_size: Optional[int] = None,
) -> Optional[str]:
    """Return an error message for an invalid upload, else None"""
    if content is None:
        return "The file field is required."

    if not is_supported_mime_type(content_type) or (content and not looks_like_pdf(content)):
        return "Only PDF files are allowed."

    is_valid, error_msg = validate_file_size(len(content), max_size)
    if not is_valid:
        return error_msg

    return None


def validate_document_upload(
    name: Optional[str],
    expires_at,
    content_type: Optional[str],
    content: Optional[bytes],
    today: date,
    max_size: Optional[int] = None,
) -> ValidatedUpload:
    """Validate all create-document fields together.

    Raises:
        ValidationError: With every failing field and its messages
    """
    errors: Dict[str, List[str]] = {}

    name_error = validate_document_name(name)
    if name_error:
        errors['name'] = [name_error]

    parsed_expiry, expiry_error = validate_expiry(expires_at, today)
    if expiry_error:
        errors['expires_at'] = [expiry_error]

    file_error = validate_upload_file(content_type, content, max_size)
    if file_error:
        errors['file'] = [file_error]

    if errors:
        raise ValidationError(errors)

    return ValidatedUpload(name=name.strip(), expires_at=parsed_expiry)
