"""Expiry notification batch.

Once per invocation (daily via Celery Beat or the CLI), every user's live
documents that are expiring soon or already expired are gathered in one query,
partitioned, and sent as one consolidated digest per user.

Each user is an independent unit of work: a failure while building or
dispatching one user's digest is logged and counted, and the run moves on.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from domain.documents.lifecycle import EXPIRING_SOON_WINDOW, as_utc
from domain.notifications.digest import ExpiryDigest, compose_expiry_digest
from domain.notifications.ports import MessageDispatcherPort
from infrastructure.repositories.document_repository import DocumentRepository
from infrastructure.repositories.user_repository import UserRepository
from observability.metrics import (
    expiry_digest_failures_total,
    expiry_digests_dispatched_total,
    expiry_notification_run_duration_seconds,
)
from .schemas import NotificationRunStatistics

logger = logging.getLogger(__name__)


def notify_user(
    db: Session,
    user,
    dispatcher: MessageDispatcherPort,
    now: datetime,
    window: timedelta = EXPIRING_SOON_WINDOW,
) -> bool:
    """Send one user's digest if they have qualifying documents.

    Returns:
        True if a digest was dispatched, False if the user was skipped
    """
    documents = DocumentRepository(db).list_needing_attention(user.id, now, window)
    if not documents:
        return False

    digest = ExpiryDigest.partition(documents, now, window)
    if digest.is_empty:
        return False

    message = compose_expiry_digest(user, digest, now, window)
    dispatcher.dispatch(message)
    expiry_digests_dispatched_total.inc()

    logger.info(
        f"Dispatched expiry digest to user {user.id}",
        extra={
            "user_id": str(user.id),
            "expiring_soon_count": message.expiring_soon_count,
            "expired_count": message.expired_count,
        }
    )
    return True


def send_expiry_notifications(
    db: Session,
    dispatcher: MessageDispatcherPort,
    now: Optional[datetime] = None,
    window: timedelta = EXPIRING_SOON_WINDOW,
) -> NotificationRunStatistics:
    """Run the expiry notification batch across all users.

    This is the entry point called by the scheduled Celery task and the CLI.

    Args:
        db: Database session (read-only use)
        dispatcher: Mail sink the digests are handed to
        now: Reference time for expiry classification (defaults to current UTC time)
        window: Expiring-soon look-ahead window

    Returns:
        NotificationRunStatistics: Counters for the run

    Note:
        The scheduler must not start two runs concurrently; nothing here
        provides mutual exclusion.
    """
    start_time = datetime.now(timezone.utc)
    now = as_utc(now) if now is not None else start_time
    logger.info("Starting expiry notification run", extra={"reference_time": now.isoformat()})

    stats = {
        'users_scanned': 0,
        'users_notified': 0,
        'users_skipped': 0,
        'dispatch_errors': 0,
    }

    for user in UserRepository(db).iter_users():
        stats['users_scanned'] += 1
        user_id = str(user.id)
        try:
            if notify_user(db, user, dispatcher, now, window):
                stats['users_notified'] += 1
            else:
                stats['users_skipped'] += 1

        except Exception as e:
            # A failed query leaves the transaction aborted for every later user
            db.rollback()
            logger.error(
                f"Failed to send expiry digest for user {user_id}",
                exc_info=True,
                extra={"user_id": user_id, "error": str(e)}
            )
            expiry_digest_failures_total.labels(stage="dispatch").inc()
            stats['dispatch_errors'] += 1

    end_time = datetime.now(timezone.utc)
    duration = (end_time - start_time).total_seconds()
    expiry_notification_run_duration_seconds.observe(duration)

    statistics = NotificationRunStatistics(
        job_started_at=start_time,
        job_completed_at=end_time,
        duration_seconds=duration,
        **stats
    )

    logger.info(
        "Expiry notification run completed",
        extra={
            "duration_seconds": duration,
            "users_scanned": statistics.users_scanned,
            "users_notified": statistics.users_notified,
            "has_errors": statistics.has_errors,
        }
    )

    if statistics.has_errors:
        logger.error(
            "Expiry notification run completed with errors",
            extra={"dispatch_errors": statistics.dispatch_errors}
        )

    return statistics
