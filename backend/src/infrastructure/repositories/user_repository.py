"""User repository for database operations"""

from typing import Iterator, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.user import User


class UserRepository:
    """Repository for user lookups."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: UUID) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        query = select(User).where(User.email == email.lower())
        return self.db.execute(query).scalar_one_or_none()

    def iter_users(self, batch_size: int = 500) -> Iterator[User]:
        """Yield every user ordered by id, loading in batches."""
        last_id = None
        while True:
            query = select(User).order_by(User.id).limit(batch_size)
            if last_id is not None:
                query = query.where(User.id > last_id)
            batch = list(self.db.execute(query).scalars().all())
            if not batch:
                return
            yield from batch
            last_id = batch[-1].id
