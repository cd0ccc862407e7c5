"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

reservation_attempts = Counter(
    'reservation_attempts_total',
    'Reservation creation attempts',
    ['result']  # created, capacity, closed, invalid
)

reservation_latency = Histogram(
    'reservation_create_latency_seconds',
    'Reservation creation latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

reservation_transitions = Counter(
    'reservation_transitions_total',
    'Reservation status transitions',
    ['from_status', 'to_status']
)

availability_checks = Counter(
    'availability_checks_total',
    'Remaining capacity computations',
    ['outcome']  # open, full, closed
)

cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set, hit/miss
)

storage_errors = Counter(
    'storage_errors_total',
    'Backing store failures surfaced to callers',
    ['backend']
)


def metrics_endpoint() -> Response:
    """Prometheus scrape response."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_reservation_attempt(result: str):
    """Result: created, capacity, closed, invalid"""
    reservation_attempts.labels(result=result).inc()


def record_transition(from_status: str, to_status: str):
    reservation_transitions.labels(from_status=from_status, to_status=to_status).inc()


def record_availability_check(effective: int, remaining: int):
    if effective == 0:
        outcome = "closed"
    elif remaining == 0:
        outcome = "full"
    else:
        outcome = "open"
    availability_checks.labels(outcome=outcome).inc()


def record_cache_operation(operation: str, hit: bool):
    result = "hit" if hit else "miss"
    cache_operations.labels(operation=operation, result=result).inc()
