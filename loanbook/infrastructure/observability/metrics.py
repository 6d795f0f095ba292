"""Prometheus metrics for monitoring allocation outcomes and facility utilization"""

from typing import Dict

from prometheus_client import Counter, Gauge, Histogram

from loanbook.domain.models import AllocationResult

# Allocation metrics
loan_outcome_counter = Counter(
    "loanbook_loans_total",
    "Loans processed by outcome",
    ["outcome"],  # assigned | insufficient_capacity | covenant_violation | negative_yield
)

run_duration_histogram = Histogram(
    "loanbook_run_duration_seconds",
    "Time to allocate one batch of loans",
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
)

run_failure_counter = Counter(
    "loanbook_run_failures_total",
    "Runs aborted during setup",
)

facility_utilization_gauge = Gauge(
    "loanbook_facility_utilization_ratio",
    "Share of facility capacity drawn in the latest run",
    ["facility_id"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_run(result: AllocationResult, utilization: Dict[int, float]) -> None:
    """Record outcome counts and per-facility utilization for one run"""
    if result.assignments:
        loan_outcome_counter.labels(outcome="assigned").inc(len(result.assignments))
    for outcome in result.unassigned:
        loan_outcome_counter.labels(outcome=outcome.reason.value).inc()

    for facility_id, ratio in utilization.items():
        facility_utilization_gauge.labels(facility_id=str(facility_id)).set(ratio)
