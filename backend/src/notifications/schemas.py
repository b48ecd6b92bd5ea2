"""Pydantic schemas for expiry notification runs."""

from datetime import datetime

from pydantic import BaseModel, Field


class NotificationRunStatistics(BaseModel):
    """Statistics from one expiry notification batch run.

    Used for logging, the CLI summary and the Celery task result.
    """

    job_started_at: datetime = Field(
        description="When the batch started"
    )

    job_completed_at: datetime = Field(
        description="When the batch completed"
    )

    duration_seconds: float = Field(
        ge=0.0,
        description="Batch execution duration in seconds"
    )

    users_scanned: int = Field(
        default=0,
        ge=0,
        description="Number of users examined"
    )

    users_notified: int = Field(
        default=0,
        ge=0,
        description="Number of users whose digest was dispatched"
    )

    users_skipped: int = Field(
        default=0,
        ge=0,
        description="Number of users with no qualifying documents"
    )

    dispatch_errors: int = Field(
        default=0,
        ge=0,
        description="Number of users whose digest could not be built or dispatched"
    )

    @property
    def has_errors(self) -> bool:
        """Whether any user failed during the run."""
        return self.dispatch_errors > 0
