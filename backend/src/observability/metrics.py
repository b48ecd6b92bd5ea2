"""Prometheus metrics for DocVault.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Histogram

# Document metrics
documents_uploaded_total = Counter(
    "docvault_documents_uploaded_total",
    "Total number of document uploads",
    ["status"]  # status: success|validation_error|storage_error
)

documents_archived_total = Counter(
    "docvault_documents_archived_total",
    "Total number of documents archived"
)

document_downloads_total = Counter(
    "docvault_document_downloads_total",
    "Total document downloads",
    ["status"]  # status: success|missing_blob
)

# Notification metrics
expiry_digests_dispatched_total = Counter(
    "docvault_expiry_digests_dispatched_total",
    "Total expiry digest messages handed to the mail queue"
)

expiry_digest_failures_total = Counter(
    "docvault_expiry_digest_failures_total",
    "Total expiry digest failures",
    ["stage"]  # stage: dispatch|delivery
)

expiry_notification_run_duration_seconds = Histogram(
    "docvault_expiry_notification_run_duration_seconds",
    "Duration of the daily expiry notification batch in seconds",
    buckets=[0.1, 0.5, 1.0, 5.0, 15.0, 60.0, 300.0]
)
