"""Celery application for DocVault background work.

Run a worker and the scheduler with:
    celery -A celery_app worker --loglevel=INFO
    celery -A celery_app beat --loglevel=INFO

Only one beat process may run: the expiry notification batch has no
mutual exclusion of its own.
"""

from celery import Celery
from celery.schedules import crontab
from celery.signals import setup_logging

from config import settings

celery_app = Celery(
    "docvault",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["notifications.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

celery_app.conf.beat_schedule = {
    "send-expiry-notifications": {
        "task": "documents.send_expiry_notifications",
        "schedule": crontab(
            hour=settings.EXPIRY_NOTIFICATION_HOUR,
            minute=settings.EXPIRY_NOTIFICATION_MINUTE,
        ),
        "options": {
            "expires": 3600,  # Skip the run if not picked up within an hour
        },
    },
}


@setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use the application's JSON logging in workers instead of Celery's."""
    from observability.logging_config import configure_logging

    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)


# `celery -A celery_app` looks for `app` or `celery`
app = celery_app
