"""Celery-backed message dispatcher.

Enqueues each digest on the delivery task; the batch never waits for SMTP.
"""

import logging
from typing import Optional

from celery import Celery

from domain.notifications.ports import DigestMessage, DispatchError, MessageDispatcherPort

logger = logging.getLogger(__name__)

DELIVER_TASK_NAME = "notifications.deliver_expiry_digest"


class CeleryMessageDispatcher(MessageDispatcherPort):
    """Hands digests to the ``notifications.deliver_expiry_digest`` task."""

    def __init__(self, app: Optional[Celery] = None):
        if app is None:
            from celery_app import celery_app as app
        self.app = app

    def dispatch(self, message: DigestMessage) -> None:
        try:
            self.app.send_task(DELIVER_TASK_NAME, args=[message.to_payload()])
        except Exception as e:
            raise DispatchError(f"Failed to enqueue digest for user {message.user_id}: {e}") from e

        logger.debug(f"Queued expiry digest for user {message.user_id}")


class DirectMailDispatcher(MessageDispatcherPort):
    """Sends each digest immediately over SMTP, without the task queue.

    Used by the CLI when no Celery worker is running.
    """

    def __init__(self, mailer=None):
        if mailer is None:
            from infrastructure.mail.smtp_mailer import SmtpMailer
            mailer = SmtpMailer.from_settings()
        self.mailer = mailer

    def dispatch(self, message: DigestMessage) -> None:
        try:
            self.mailer.send(message)
        except Exception as e:
            raise DispatchError(f"Failed to send digest for user {message.user_id}: {e}") from e
