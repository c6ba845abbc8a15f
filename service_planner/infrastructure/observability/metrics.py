"""Prometheus metrics for service lifecycle, capacity changes and request latency"""

from prometheus_client import Counter, Histogram

# Service metrics
service_event_counter = Counter(
    "service_planner_events_total",
    "Service operations performed",
    ["event"],  # created | cost_added | cost_removed | ...
)

capacity_change_counter = Counter(
    "service_planner_capacity_changes_total",
    "Capacity plan mutations",
    ["operation", "mode"],  # generate | recompute | add | update | remove; mode only for recompute
)

plan_length_histogram = Histogram(
    "service_planner_plan_months",
    "Number of months in a capacity plan after a change",
    buckets=[1, 3, 6, 12, 24, 36, 60, 120],
)

# Domain failures surfaced to callers
domain_error_counter = Counter(
    "service_planner_domain_errors_total",
    "Requests rejected by domain validation",
    ["error"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_capacity_change(operation: str, plan_months: int, mode: str = "none") -> None:
    """Record a capacity mutation and the resulting plan length"""
    capacity_change_counter.labels(operation=operation, mode=mode).inc()
    plan_length_histogram.observe(plan_months)
