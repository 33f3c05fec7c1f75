"""Prometheus metrics for monitoring report traffic and notification delivery"""

from prometheus_client import Counter, Histogram

# Report metrics
report_counter = Counter(
    "fairshare_report_total",
    "Total spending reports built",
    ["period"],  # this_month | last_month | this_year | all_time
)

report_export_counter = Counter(
    "fairshare_report_export_total",
    "Total CSV exports produced",
)

report_fetch_failures_counter = Counter(
    "report_fetch_failures_total",
    "Failed expense fetches while building reports",
)

# Notification metrics
notification_counter = Counter(
    "fairshare_notification_total",
    "Notification handler outcomes",
    ["event", "outcome"],  # outcome: sent | skipped | failed
)

mail_latency_histogram = Histogram(
    "mail_latency_seconds",
    "Mail API response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

mail_failure_counter = Counter(
    "mail_failures_total",
    "Failed mail deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_report(period: str) -> None:
    """Record a built report by period"""
    report_counter.labels(period=period).inc()


def record_notification(event: str, outcome: str) -> None:
    """Record one notification handler outcome"""
    notification_counter.labels(event=event, outcome=outcome).inc()
