"""Prometheus metrics for monitoring coverage reports, routing plans and data sources"""

from prometheus_client import Counter, Histogram

from safebank_router.domain.models import RoutingResult

# Coverage metrics
coverage_report_counter = Counter(
    "safebank_coverage_reports_total",
    "Total coverage reports computed",
    ["policy"],  # pre | post | custom
)

excess_license_counter = Counter(
    "safebank_excess_licenses_total",
    "License rows whose eligible exposure exceeded the cap",
)

# Routing metrics
routing_plan_counter = Counter(
    "safebank_routing_plans_total",
    "Routing plans computed",
    ["outcome"],  # allocated | empty
)

routing_allocation_histogram = Histogram(
    "safebank_routing_allocated_krw",
    "Total KRW allocated per routing plan",
    buckets=[0, 1_000_000, 5_000_000, 10_000_000, 50_000_000, 100_000_000, 300_000_000],
)

# Data source metrics
catalog_fallback_counter = Counter(
    "safebank_catalog_fallback_total",
    "Catalog loads that fell back from the KDIC API to the CSV export",
)

source_failure_counter = Counter(
    "safebank_source_failures_total",
    "Failed catalog/holdings source loads",
    ["source"],  # catalog | holdings
)

skipped_records_counter = Counter(
    "safebank_skipped_records_total",
    "Feed records skipped as malformed",
    ["source"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_coverage(policy: str, excess_rows: int) -> None:
    """Record one coverage computation"""
    coverage_report_counter.labels(policy=policy).inc()
    if excess_rows:
        excess_license_counter.inc(excess_rows)


def record_routing(result: RoutingResult) -> None:
    """Record plan outcome and allocated volume"""
    outcome = "allocated" if result.plan else "empty"
    routing_plan_counter.labels(outcome=outcome).inc()
    routing_allocation_histogram.observe(result.total_allocated)
