"""Celery tasks for expiry notifications.

Tasks:
- send_expiry_notifications_task: Daily batch, scheduled by Celery Beat
  (see celery_app.beat_schedule)
- deliver_expiry_digest: Sends one composed digest over SMTP, with retries
"""

import logging
import smtplib
from typing import Any, Dict

from celery import shared_task

from database import SessionLocal
from domain.notifications.ports import DigestMessage
from infrastructure.mail.smtp_mailer import SmtpMailer
from observability.metrics import expiry_digest_failures_total
from .dispatcher import CeleryMessageDispatcher
from .service import send_expiry_notifications

logger = logging.getLogger(__name__)


@shared_task(name="documents.send_expiry_notifications", bind=True)
def send_expiry_notifications_task(self) -> Dict[str, Any]:
    """Run the expiry notification batch across all users.

    Per-user failures are isolated inside the batch. This task only reports
    'failed' if the run itself could not complete (e.g. database unavailable).

    Returns:
        Dict with run statistics
    """
    logger.info("Expiry notification task started")

    db = SessionLocal()
    try:
        statistics = send_expiry_notifications(db, CeleryMessageDispatcher())

        result = {
            'status': 'completed',
            'job_started_at': statistics.job_started_at.isoformat(),
            'job_completed_at': statistics.job_completed_at.isoformat(),
            'duration_seconds': statistics.duration_seconds,
            'users_scanned': statistics.users_scanned,
            'users_notified': statistics.users_notified,
            'users_skipped': statistics.users_skipped,
            'dispatch_errors': statistics.dispatch_errors,
            'has_errors': statistics.has_errors,
        }

        logger.info("Expiry notification task completed", extra=result)
        return result

    except Exception as e:
        logger.error(
            "Expiry notification task failed",
            exc_info=True,
            extra={"error": str(e)}
        )
        return {
            'status': 'failed',
            'error': str(e),
            'users_notified': 0,
        }

    finally:
        db.close()


@shared_task(name="notifications.deliver_expiry_digest", bind=True, max_retries=3)
def deliver_expiry_digest(self, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Deliver one expiry digest via SMTP.

    Retries transient SMTP/network errors with exponential backoff
    (60s, 120s, 240s).

    Args:
        payload: DigestMessage.to_payload() output
    """
    message = DigestMessage.from_payload(payload)

    try:
        SmtpMailer.from_settings().send(message)
    except (smtplib.SMTPException, OSError) as e:
        expiry_digest_failures_total.labels(stage="delivery").inc()
        logger.warning(
            f"Expiry digest delivery failed for user {message.user_id}",
            extra={
                "user_id": message.user_id,
                "attempt": self.request.retries + 1,
                "error": str(e),
            }
        )
        raise self.retry(exc=e, countdown=60 * (2 ** self.request.retries))

    return {"status": "sent", "user_id": message.user_id}
