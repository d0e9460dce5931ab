"""
Prometheus Metrics for the Salesboard reporting service.

This module defines all metrics exposed at the /metrics endpoint.
Metrics are categorized into:

1. Report Metrics - what the dashboards ask for and how long it takes
2. Seed Metrics - feed fetches and imported records
3. HTTP Metrics - standard request counters and latencies
"""
from typing import Optional

from prometheus_client import Counter, Histogram, Info

# =============================================================================
# SERVICE INFO
# =============================================================================

SERVICE_INFO = Info(
    "salesboard_service",
    "Service information"
)
SERVICE_INFO.info({
    "version": "0.1.0",
    "service": "salesboard",
})

# =============================================================================
# REPORT METRICS
# =============================================================================

# Histogram: Report assembly latency (all fan-out branches joined)
REPORT_LATENCY = Histogram(
    "salesboard_report_latency_seconds",
    "Time to assemble a report",
    ["report"],  # transactions, statistics, bar_chart, pie_chart, combined
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)

# Counter: Reports that failed on a store error
REPORT_FAILURES = Counter(
    "salesboard_report_failures_total",
    "Reports that failed because a store query failed",
    ["report"]
)

# =============================================================================
# SEED METRICS
# =============================================================================

SEED_FETCH_LATENCY = Histogram(
    "salesboard_seed_fetch_latency_seconds",
    "Time to fetch the seed feed",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]
)

SEED_FETCH_FAILURES = Counter(
    "salesboard_seed_fetch_failures_total",
    "Seed feed fetch failures",
    ["error_type"]  # http_error, timeout, connection_error, invalid_payload
)

SEED_RECORDS_INSERTED = Counter(
    "salesboard_seed_records_inserted_total",
    "Transaction records inserted from the seed feed"
)

# =============================================================================
# HTTP METRICS (Standard)
# =============================================================================

HTTP_REQUESTS = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

HTTP_REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def record_report(report: str, success: bool, latency_seconds: float) -> None:
    """Record latency and outcome of one report."""
    REPORT_LATENCY.labels(report=report).observe(latency_seconds)
    if not success:
        REPORT_FAILURES.labels(report=report).inc()


def record_seed_fetch(
    success: bool, latency_seconds: float, error_type: Optional[str] = None
) -> None:
    """Record seed feed fetch metrics."""
    SEED_FETCH_LATENCY.observe(latency_seconds)

    if not success:
        SEED_FETCH_FAILURES.labels(error_type=error_type or "unknown").inc()


def record_seeded_records(count: int) -> None:
    """Record the number of records inserted by one seed run."""
    SEED_RECORDS_INSERTED.inc(count)
