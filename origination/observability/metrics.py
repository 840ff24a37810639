"""Prometheus metrics for Origination.

Counters for ledger writes, status transitions, corrections and KYC
provider calls, plus provider latency.
"""

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "origination_request_count_total",
    "Total number of HTTP requests processed",
    labelnames=["method", "path", "status"],
)

FIELD_VERIFICATIONS = Counter(
    "origination_field_verifications_total",
    "Verification ledger writes by method and outcome",
    labelnames=["method", "outcome"],
)

FIELD_REJECTIONS = Counter(
    "origination_field_rejections_total",
    "Fields rejected by staff review",
    labelnames=["field"],
)

STATUS_TRANSITIONS = Counter(
    "origination_status_transitions_total",
    "Application status transitions",
    labelnames=["from_status", "to_status", "actor_type"],
)

CORRECTIONS_SUBMITTED = Counter(
    "origination_corrections_submitted_total",
    "Corrections submitted by applicants",
    labelnames=["field"],
)

DOCUMENT_REVIEWS = Counter(
    "origination_document_reviews_total",
    "Document review decisions",
    labelnames=["document_type", "decision"],
)

KYC_CHECKS = Counter(
    "origination_kyc_checks_total",
    "KYC checks by check type and outcome",
    labelnames=["check", "outcome"],
)

KYC_PROVIDER_LATENCY = Histogram(
    "origination_kyc_provider_latency_seconds",
    "KYC provider call latency in seconds",
    labelnames=["provider", "check"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)
