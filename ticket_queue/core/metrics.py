"""
Prometheus instrumentation for purchase intake and queue allocation.
Exposed at the /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Purchase request intake
purchase_requests = Counter(
    'purchase_requests_total',
    'Purchase request submissions and updates',
    ['operation', 'outcome']  # create/update, accepted/<error code>
)

# Queue allocation
allocation_runs = Counter(
    'queue_allocation_runs_total',
    'Queue allocation invocations',
    ['result']  # success, not_found, already_allocated, storage_failure
)

allocation_latency = Histogram(
    'queue_allocation_latency_seconds',
    'Time spent allocating queue numbers for one sales round',
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0]
)

allocation_size = Histogram(
    'queue_allocation_requests',
    'Number of purchase requests in an allocated sales round',
    buckets=[0, 10, 100, 1000, 10000, 100000]
)

# Catalog cache
cache_operations = Counter(
    'catalog_cache_operations_total',
    'Catalog cache operations',
    ['kind', 'result']  # sales_round/ticket_type, hit/miss/error
)


def metrics_endpoint() -> Response:
    """Prometheus text exposition of the default registry."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_purchase_request(operation: str, outcome: str):
    """Record a create/update outcome. Outcome: accepted or an error code."""
    purchase_requests.labels(operation=operation, outcome=outcome).inc()


def record_allocation(result: str, seconds: float, request_count: int | None = None):
    allocation_runs.labels(result=result).inc()
    allocation_latency.observe(seconds)
    if request_count is not None:
        allocation_size.observe(request_count)


def record_cache_operation(kind: str, result: str):
    cache_operations.labels(kind=kind, result=result).inc()
