"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.

Queue names are not used as labels: they come from the URL
and would make label cardinality unbounded.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

queue_operations = Counter(
    'queue_operations_total',
    'Total admission controller operations',
    ['operation']  # enter, position, length, dequeue, status
)

admission_decisions = Counter(
    'admission_decisions_total',
    'Admission decisions made on queue entry',
    ['result']  # admitted, waiting
)

expired_entries_purged = Counter(
    'queue_expired_entries_purged_total',
    'Stale queue entries removed by the expiry sweep'
)

store_operation_latency = Histogram(
    'queue_store_operation_latency_seconds',
    'Queue store round-trip latency',
    ['operation'],
    buckets=[0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.5]
)

store_errors = Counter(
    'queue_store_errors_total',
    'Queue store transport errors',
    ['operation']
)


def metrics_endpoint() -> Response:
    """
    Prometheus metrics endpoint.

    Usage:
        @app.get("/metrics")
        def metrics():
            return metrics_endpoint()
    """
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_operation(operation: str):
    """Record controller operation. Operation: enter, position, length, dequeue, status"""
    queue_operations.labels(operation=operation).inc()


def record_admission(admitted: bool):
    """Record admission decision."""
    result = "admitted" if admitted else "waiting"
    admission_decisions.labels(result=result).inc()


def record_expired(count: int):
    if count > 0:
        expired_entries_purged.inc(count)


def record_store_error(operation: str):
    store_errors.labels(operation=operation).inc()
