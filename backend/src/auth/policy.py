"""Document authorization policy.

Ownership-based access control for every document operation.

Permission Matrix:
┌──────────────┬──────────────────────┐
│ Action       │ Rule                 │
├──────────────┼──────────────────────┤
│ VIEW_ANY     │ authenticated        │
│ CREATE       │ authenticated        │
│ VIEW         │ principal is owner   │
│ UPDATE       │ principal is owner   │
│ DELETE       │ principal is owner   │
│ RESTORE      │ principal is owner   │
│ FORCE_DELETE │ principal is owner   │
└──────────────┴──────────────────────┘

Download is authorized as VIEW, archive as UPDATE.
A denied check raises ForbiddenError (403), never NotFoundError: the
existence of another user's document is not hidden, access is denied.
"""

from enum import Enum
from typing import Optional

from domain.documents.errors import ForbiddenError
from models.document import Document
from models.user import User


class DocumentAction(str, Enum):
    """Actions a principal may attempt on documents."""
    VIEW_ANY = "viewAny"
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RESTORE = "restore"
    FORCE_DELETE = "forceDelete"


# Actions that only require an authenticated principal
AUTHENTICATED_ACTIONS = {DocumentAction.VIEW_ANY, DocumentAction.CREATE}


def can_access(
    principal: Optional[User],
    document: Optional[Document],
    action: DocumentAction,
) -> bool:
    """Check if a principal may perform an action on a document.

    Args:
        principal: Authenticated user, or None if unauthenticated
        document: Target document (ignored for VIEW_ANY/CREATE)
        action: Action being attempted

    Returns:
        True if allowed, False otherwise

    Examples:
        >>> can_access(None, None, DocumentAction.CREATE)
        False
    """
    if principal is None:
        return False

    if action in AUTHENTICATED_ACTIONS:
        return True

    if document is None:
        return False

    return principal.id == document.owner_id


def authorize(
    principal: Optional[User],
    document: Optional[Document],
    action: DocumentAction,
) -> None:
    """Raise ForbiddenError unless can_access() grants the action."""
    if not can_access(principal, document, action):
        raise ForbiddenError()
