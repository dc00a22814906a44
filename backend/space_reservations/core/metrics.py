"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from space_reservations.booking.decision import Decision

# Booking engine metrics
booking_decisions = Counter(
    'booking_decisions_total',
    'Booking policy decisions',
    ['operation', 'result']  # create/update/delete_space, admitted or rejection reason
)

booking_evaluation_latency = Histogram(
    'booking_evaluation_latency_seconds',
    'Latency of evaluate + write under the per-space lock',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

booking_retries = Counter(
    'booking_overlap_retries_total',
    'Re-evaluations after the store rejected an overlapping write'
)

# Cache metrics
cache_operations = Counter(
    'cache_operations_total',
    'Cache operations',
    ['operation', 'result']  # get/set/invalidate, hit/miss/error
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_decision(operation: str, decision: Decision):
    result = "admitted" if decision.admitted else decision.reason.value
    booking_decisions.labels(operation=operation, result=result).inc()


def record_retry():
    booking_retries.inc()


def record_cache_operation(operation: str, result: str):
    cache_operations.labels(operation=operation, result=result).inc()
