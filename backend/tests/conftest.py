"""Pytest fixtures for DocVault tests.

Provides reusable test fixtures for:
- Database session on an in-memory SQLite engine (schema created per test)
- Users and documents
- Local filesystem blob storage under tmp_path
- Test clients authenticated as a given user, with a pinned reference time

Usage:
    def test_list(owner_client, make_document, owner):
        make_document(owner, "Passport", NOW + timedelta(days=3))
        response = owner_client.get("/api/v1/documents")
        assert response.status_code == 200
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

# Set environment variables BEFORE any application imports so that the
# module-level settings instance picks them up
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "local"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("PASSWORD_PEPPER", "test-pepper-secret-key-32-chars-long")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")
os.environ.setdefault("LOG_JSON", "false")

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from auth.jwt import create_access_token
from auth.password import hash_password
from database import SessionLocal, engine, get_db
from infrastructure.storage.local_storage_adapter import LocalStorageAdapter
from infrastructure.storage.storage_config import get_storage
from models.base import Base
from models.document import Document
from models.user import User

# Reference time pinned for every API request in tests
NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)

TEST_PASSWORD = "Secure123pass"

PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<< /Type /Catalog >>\nendobj\n%%EOF\n"


def auth_headers(user: User) -> dict:
    """Authorization header carrying a fresh token for ``user``."""
    token = create_access_token(user_id=user.id, email=user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="session")
def password_hash() -> str:
    """Argon2 hash of TEST_PASSWORD, computed once per session."""
    return hash_password(TEST_PASSWORD)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db_session: Session, password_hash: str):
    """Factory creating persisted users."""

    def _make_user(email: str, name: str = "Test User", status: str = "ACTIVE") -> User:
        user = User(email=email, name=name, password_hash=password_hash, status=status)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def owner(make_user) -> User:
    return make_user("alice@example.com", name="Alice")


@pytest.fixture
def other_user(make_user) -> User:
    return make_user("bob@example.com", name="Bob")


@pytest.fixture
def storage(tmp_path) -> LocalStorageAdapter:
    return LocalStorageAdapter(tmp_path / "blobs")


@pytest.fixture
def make_document(db_session: Session):
    """Factory creating persisted documents (no blob is written)."""

    def _make_document(
        owner: User,
        name: str,
        expires_at: datetime,
        archived_at: datetime = None,
        path: str = None,
    ) -> Document:
        document = Document(
            owner_id=owner.id,
            name=name,
            path=path or f"documents/{owner.id}/{name.lower().replace(' ', '-')}.pdf",
            expires_at=expires_at,
            archived_at=archived_at,
        )
        db_session.add(document)
        db_session.commit()
        db_session.refresh(document)
        return document

    return _make_document


@pytest.fixture
def app(db_session: Session, storage: LocalStorageAdapter):
    """The FastAPI app wired to the test database, storage and clock."""
    from main import app as fastapi_app
    from documents.router import get_now

    def override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_storage] = lambda: storage
    fastapi_app.dependency_overrides[get_now] = lambda: NOW

    yield fastapi_app

    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """Unauthenticated test client."""
    return TestClient(app)


@pytest.fixture
def owner_client(app, owner: User) -> TestClient:
    """Test client authenticated as ``owner``."""
    test_client = TestClient(app)
    test_client.headers.update(auth_headers(owner))
    return test_client


@pytest.fixture
def other_client(app, other_user: User) -> TestClient:
    """Test client authenticated as ``other_user``."""
    test_client = TestClient(app)
    test_client.headers.update(auth_headers(other_user))
    return test_client
