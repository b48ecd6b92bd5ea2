"""Unit tests for the expiry notification batch.

Tests cover:
- One consolidated digest per user with qualifying documents
- Users without qualifying documents are skipped
- A failing user does not stop the run
"""

from datetime import timedelta
from typing import List
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from conftest import NOW
from domain.notifications.ports import DigestMessage, DispatchError, MessageDispatcherPort
from infrastructure.repositories.document_repository import DocumentRepository
from notifications.service import notify_user, send_expiry_notifications


class RecordingDispatcher(MessageDispatcherPort):
    """Collects dispatched messages; optionally fails for some recipients."""

    def __init__(self, fail_for: tuple = ()):
        self.messages: List[DigestMessage] = []
        self.fail_for = fail_for

    def dispatch(self, message: DigestMessage) -> None:
        if message.recipient_email in self.fail_for:
            raise DispatchError(f"Queue unavailable for {message.recipient_email}")
        self.messages.append(message)


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


class TestSendExpiryNotifications:

    def test_scenario_sends_one_message_with_a_and_b(self, db_session, owner, make_document, dispatcher):
        make_document(owner, "A", NOW + timedelta(days=3))
        make_document(owner, "B", NOW - timedelta(days=5))
        make_document(owner, "C", NOW - timedelta(days=10), archived_at=NOW - timedelta(days=2))
        make_document(owner, "D", NOW + timedelta(days=30))

        statistics = send_expiry_notifications(db_session, dispatcher, now=NOW)

        assert len(dispatcher.messages) == 1
        message = dispatcher.messages[0]
        assert message.recipient_email == "alice@example.com"
        assert message.expiring_soon_count == 1
        assert message.expired_count == 1
        assert "- A (expires in 3 days" in message.body
        assert "- B (expired 5 days ago" in message.body
        assert "- C " not in message.body
        assert "- D " not in message.body
        assert statistics.users_notified == 1

    def test_user_without_qualifying_documents_gets_nothing(self, db_session, owner, make_document, dispatcher):
        make_document(owner, "D", NOW + timedelta(days=30))

        statistics = send_expiry_notifications(db_session, dispatcher, now=NOW)

        assert dispatcher.messages == []
        assert statistics.users_scanned == 1
        assert statistics.users_skipped == 1
        assert statistics.has_errors is False

    def test_user_with_no_documents_at_all(self, db_session, owner, dispatcher):
        statistics = send_expiry_notifications(db_session, dispatcher, now=NOW)

        assert dispatcher.messages == []
        assert statistics.users_skipped == 1

    def test_each_user_gets_their_own_digest(self, db_session, owner, other_user, make_document, dispatcher):
        make_document(owner, "Alice passport", NOW + timedelta(days=1))
        make_document(other_user, "Bob visa", NOW - timedelta(days=1))

        send_expiry_notifications(db_session, dispatcher, now=NOW)

        bodies = {m.recipient_email: m.body for m in dispatcher.messages}
        assert "Alice passport" in bodies["alice@example.com"]
        assert "Bob visa" not in bodies["alice@example.com"]
        assert "Bob visa" in bodies["bob@example.com"]

    def test_failure_for_one_user_does_not_abort_the_run(self, db_session, owner, other_user, make_document):
        make_document(owner, "Alice passport", NOW + timedelta(days=1))
        make_document(other_user, "Bob visa", NOW + timedelta(days=1))
        dispatcher = RecordingDispatcher(fail_for=("alice@example.com",))

        statistics = send_expiry_notifications(db_session, dispatcher, now=NOW)

        assert [m.recipient_email for m in dispatcher.messages] == ["bob@example.com"]
        assert statistics.users_notified == 1
        assert statistics.dispatch_errors == 1
        assert statistics.has_errors is True

    def test_database_error_for_one_user_rolls_back_and_continues(
        self, db_session, owner, other_user, make_document, dispatcher
    ):
        make_document(owner, "Alice passport", NOW + timedelta(days=1))
        make_document(other_user, "Bob visa", NOW + timedelta(days=1))
        original = DocumentRepository.list_needing_attention

        def failing_for_alice(repo, owner_id, now, window):
            if owner_id == owner.id:
                raise OperationalError("SELECT document", {}, Exception("connection reset"))
            return original(repo, owner_id, now, window)

        with patch.object(
            DocumentRepository, "list_needing_attention", autospec=True, side_effect=failing_for_alice
        ), patch.object(db_session, "rollback", wraps=db_session.rollback) as rollback:
            statistics = send_expiry_notifications(db_session, dispatcher, now=NOW)

        rollback.assert_called_once()
        assert [m.recipient_email for m in dispatcher.messages] == ["bob@example.com"]
        assert statistics.users_scanned == 2
        assert statistics.users_notified == 1
        assert statistics.dispatch_errors == 1

    def test_disabled_users_are_still_notified(self, db_session, make_user, make_document, dispatcher):
        disabled = make_user("carol@example.com", name="Carol", status="DISABLED")
        make_document(disabled, "Permit", NOW + timedelta(days=2))

        send_expiry_notifications(db_session, dispatcher, now=NOW)

        assert [m.recipient_email for m in dispatcher.messages] == ["carol@example.com"]


class TestNotifyUser:

    def test_returns_false_when_skipped(self, db_session, owner, dispatcher):
        assert notify_user(db_session, owner, dispatcher, NOW) is False

    def test_returns_true_when_dispatched(self, db_session, owner, make_document, dispatcher):
        make_document(owner, "Passport", NOW + timedelta(days=7))

        assert notify_user(db_session, owner, dispatcher, NOW) is True
        assert dispatcher.messages[0].recipient_name == "Alice"
