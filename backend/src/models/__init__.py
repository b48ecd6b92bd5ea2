"""SQLAlchemy Models for DocVault"""

from .base import Base
from .user import User
from .document import Document

__all__ = [
    "Base",
    "User",
    "Document",
]
