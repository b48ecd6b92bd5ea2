"""Unit tests for digest delivery: SMTP mailer, dispatchers and Celery tasks"""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from celery_app import celery_app
from domain.notifications.ports import DigestMessage, DispatchError
from infrastructure.mail.smtp_mailer import SmtpMailer
from notifications.dispatcher import (
    DELIVER_TASK_NAME,
    CeleryMessageDispatcher,
    DirectMailDispatcher,
)
from notifications.tasks import deliver_expiry_digest, send_expiry_notifications_task


@pytest.fixture
def message():
    return DigestMessage(
        user_id="0b7c6a2e-2d9e-4a53-9b0b-3f1f1f0d1a11",
        recipient_email="alice@example.com",
        recipient_name="Alice",
        subject="Document Expiry Reminder",
        body="Hello Alice,\n\nbody\n",
        expiring_soon_count=1,
        expired_count=0,
    )


class TestSmtpMailer:

    def test_build_message(self, message):
        email = SmtpMailer(sender="DocVault <no-reply@docvault.local>").build(message)

        assert email["To"] == "alice@example.com"
        assert email["From"] == "DocVault <no-reply@docvault.local>"
        assert email["Subject"] == "Document Expiry Reminder"
        assert "Hello Alice," in email.get_content()

    def test_send_plain(self, message):
        with patch("infrastructure.mail.smtp_mailer.smtplib.SMTP") as smtp_cls:
            smtp = smtp_cls.return_value.__enter__.return_value

            SmtpMailer(host="mail.local", port=2525, timeout=5).send(message)

        smtp_cls.assert_called_once_with("mail.local", 2525, timeout=5)
        smtp.starttls.assert_not_called()
        smtp.login.assert_not_called()
        smtp.send_message.assert_called_once()

    def test_send_with_tls_and_login(self, message):
        with patch("infrastructure.mail.smtp_mailer.smtplib.SMTP") as smtp_cls:
            smtp = smtp_cls.return_value.__enter__.return_value

            SmtpMailer(user="relay", password="secret", use_tls=True).send(message)

        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("relay", "secret")

    def test_relay_errors_propagate(self, message):
        with patch("infrastructure.mail.smtp_mailer.smtplib.SMTP") as smtp_cls:
            smtp_cls.return_value.__enter__.return_value.send_message.side_effect = (
                smtplib.SMTPRecipientsRefused({})
            )

            with pytest.raises(smtplib.SMTPException):
                SmtpMailer().send(message)


class TestDispatchers:

    def test_celery_dispatcher_enqueues_payload(self, message):
        app = MagicMock()

        CeleryMessageDispatcher(app=app).dispatch(message)

        app.send_task.assert_called_once_with(DELIVER_TASK_NAME, args=[message.to_payload()])

    def test_celery_dispatcher_wraps_errors(self, message):
        app = MagicMock()
        app.send_task.side_effect = ConnectionError("broker down")

        with pytest.raises(DispatchError, match="broker down"):
            CeleryMessageDispatcher(app=app).dispatch(message)

    def test_celery_dispatcher_defaults_to_project_app(self):
        assert CeleryMessageDispatcher().app is celery_app

    def test_direct_dispatcher_sends_immediately(self, message):
        mailer = MagicMock()

        DirectMailDispatcher(mailer=mailer).dispatch(message)

        mailer.send.assert_called_once_with(message)

    def test_direct_dispatcher_wraps_errors(self, message):
        mailer = MagicMock()
        mailer.send.side_effect = OSError("connection refused")

        with pytest.raises(DispatchError):
            DirectMailDispatcher(mailer=mailer).dispatch(message)


class TestDeliverExpiryDigestTask:

    def test_task_is_registered_under_dispatch_name(self):
        assert deliver_expiry_digest.name == DELIVER_TASK_NAME

    def test_successful_delivery(self, message):
        mailer = MagicMock()

        with patch("notifications.tasks.SmtpMailer.from_settings", return_value=mailer):
            result = deliver_expiry_digest.run(message.to_payload())

        assert result == {"status": "sent", "user_id": message.user_id}
        sent = mailer.send.call_args.args[0]
        assert sent == message

    def test_transient_failure_is_retried_then_fails(self, message):
        mailer = MagicMock()
        mailer.send.side_effect = smtplib.SMTPServerDisconnected("gone")

        with patch("notifications.tasks.SmtpMailer.from_settings", return_value=mailer):
            result = deliver_expiry_digest.apply(args=[message.to_payload()])

        # First attempt plus three retries
        assert mailer.send.call_count == 4
        assert result.failed()


class TestSendExpiryNotificationsTask:

    def test_beat_schedule_points_at_task(self):
        entry = celery_app.conf.beat_schedule["send-expiry-notifications"]
        assert entry["task"] == send_expiry_notifications_task.name

    def test_reports_failure_when_run_cannot_start(self):
        with patch("notifications.tasks.SessionLocal") as session_factory, \
                patch("notifications.tasks.send_expiry_notifications", side_effect=RuntimeError("db down")):
            result = send_expiry_notifications_task.run()

        assert result["status"] == "failed"
        assert result["error"] == "db down"
        session_factory.return_value.close.assert_called_once()
