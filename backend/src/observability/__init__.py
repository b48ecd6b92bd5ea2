"""Observability module for DocVault.

Provides structured logging, metrics, request correlation and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    documents_uploaded_total,
    documents_archived_total,
    document_downloads_total,
    expiry_digests_dispatched_total,
    expiry_digest_failures_total,
    expiry_notification_run_duration_seconds,
)
from .request_id import request_id_var, get_request_id, set_request_id, generate_request_id
from .health import HealthStatus, ComponentHealth
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "documents_uploaded_total",
    "documents_archived_total",
    "document_downloads_total",
    "expiry_digests_dispatched_total",
    "expiry_digest_failures_total",
    "expiry_notification_run_duration_seconds",
    # Request ID
    "request_id_var",
    "get_request_id",
    "set_request_id",
    "generate_request_id",
    # Health
    "HealthStatus",
    "ComponentHealth",
    # Middleware
    "RequestIDMiddleware",
]
