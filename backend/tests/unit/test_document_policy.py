"""Unit tests for the document ownership policy"""

import uuid
from datetime import datetime, timezone

import pytest

from auth.policy import DocumentAction, authorize, can_access
from domain.documents.errors import ForbiddenError
from models.document import Document
from models.user import User


def _user(email: str) -> User:
    return User(id=uuid.uuid4(), email=email, name=email.split("@")[0], password_hash="x")


@pytest.fixture
def alice():
    return _user("alice@example.com")


@pytest.fixture
def bob():
    return _user("bob@example.com")


@pytest.fixture
def alices_document(alice):
    return Document(
        id=uuid.uuid4(),
        owner_id=alice.id,
        name="Passport",
        path="documents/a/b.pdf",
        expires_at=datetime(2027, 1, 1, tzinfo=timezone.utc),
    )


OWNER_ONLY_ACTIONS = [
    DocumentAction.VIEW,
    DocumentAction.UPDATE,
    DocumentAction.DELETE,
    DocumentAction.RESTORE,
    DocumentAction.FORCE_DELETE,
]


class TestCanAccess:

    @pytest.mark.parametrize("action", [DocumentAction.VIEW_ANY, DocumentAction.CREATE])
    def test_any_authenticated_user_may_list_and_create(self, bob, action):
        assert can_access(bob, None, action) is True

    @pytest.mark.parametrize("action", list(DocumentAction))
    def test_unauthenticated_principal_is_denied_everything(self, alices_document, action):
        assert can_access(None, alices_document, action) is False

    @pytest.mark.parametrize("action", OWNER_ONLY_ACTIONS)
    def test_owner_is_allowed(self, alice, alices_document, action):
        assert can_access(alice, alices_document, action) is True

    @pytest.mark.parametrize("action", OWNER_ONLY_ACTIONS)
    def test_non_owner_is_denied(self, bob, alices_document, action):
        assert can_access(bob, alices_document, action) is False

    def test_document_action_requires_a_document(self, alice):
        assert can_access(alice, None, DocumentAction.VIEW) is False


class TestAuthorize:

    def test_allowed_action_returns_none(self, alice, alices_document):
        assert authorize(alice, alices_document, DocumentAction.UPDATE) is None

    def test_denied_action_raises_forbidden(self, bob, alices_document):
        with pytest.raises(ForbiddenError) as exc:
            authorize(bob, alices_document, DocumentAction.VIEW)

        assert exc.value.status_code == 403
