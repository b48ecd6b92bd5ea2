"""Daily document expiry notifications.

This module provides:
- The per-user digest batch (service.send_expiry_notifications)
- Celery tasks for the scheduled batch and SMTP delivery
- A Celery-backed MessageDispatcherPort implementation
"""

from .schemas import NotificationRunStatistics

# Service and tasks are imported lazily to avoid circular dependencies
# Use: from notifications.service import send_expiry_notifications
# Use: from notifications.tasks import send_expiry_notifications_task

__all__ = [
    "NotificationRunStatistics",
]
