"""Prometheus metrics for monitoring reports, rate refreshes and goal allocations"""

from prometheus_client import Counter, Histogram, Gauge

# Reporting metrics
report_counter = Counter(
    "ledgerly_reports_total",
    "Converted reports served",
    ["report"],  # spending_trend | dashboard_summary
)

conversion_fallback_counter = Counter(
    "ledgerly_conversion_fallback_total",
    "Amounts counted at factor 1 because no rate could be resolved",
)

# Exchange rate metrics
rate_refresh_counter = Counter(
    "ledgerly_rate_refresh_total",
    "Exchange rate refresh attempts",
    ["outcome"],  # success | failure
)

rate_table_size_gauge = Gauge(
    "ledgerly_rate_table_currencies",
    "Currencies in the published rate table",
)

# Allocation metrics
goal_allocation_counter = Counter(
    "ledgerly_goal_allocations_total",
    "Goals updated by savings auto-allocation",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_refresh(succeeded: bool, table_size: int) -> None:
    """Record the outcome of a rate refresh and the size of the live table"""
    rate_refresh_counter.labels(outcome="success" if succeeded else "failure").inc()
    rate_table_size_gauge.set(table_size)


def record_report(report: str, fallbacks: int) -> None:
    """Record a served report and how many of its amounts were left unconverted"""
    report_counter.labels(report=report).inc()
    if fallbacks:
        conversion_fallback_counter.inc(fallbacks)
