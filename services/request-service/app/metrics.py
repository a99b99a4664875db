"""
Prometheus metrics for Request Service.

Tracks HTTP traffic, item request operations and batch sizes.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Request metrics
http_requests_total = Counter(
    "request_service_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "request_service_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.075, 0.1, 0.25, 0.5, 0.75, 1.0, 2.5, 5.0),
)

# Item request metrics
item_request_operations_total = Counter(
    "item_request_operations_total",
    "Total item request operations",
    ["operation", "outcome"],
)

batch_items_total = Counter(
    "item_request_batch_items_total",
    "Item requests matched by batch operations",
    ["operation"],
)

batch_write_errors_total = Counter(
    "item_request_batch_write_errors_total",
    "Per-item write errors reported by batch operations",
    ["operation"],
)

heatmap_points = Histogram(
    "item_request_heatmap_points",
    "Number of points returned by the heatmap projection",
    buckets=(0, 10, 50, 100, 500, 1000, 5000, 10000),
)


def track_request_metrics(method: str, endpoint: str, status_code: int, duration: float):
    """Track HTTP request metrics."""
    http_requests_total.labels(method=method, endpoint=endpoint, status=status_code).inc()
    http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)


def track_operation(operation: str, outcome: str):
    """Track an item request operation (outcome: success, not_found, invalid, error)."""
    item_request_operations_total.labels(operation=operation, outcome=outcome).inc()


def track_batch(operation: str, matched: int, errors: int):
    """Track batch operation results."""
    batch_items_total.labels(operation=operation).inc(matched)
    if errors:
        batch_write_errors_total.labels(operation=operation).inc(errors)


def track_heatmap(size: int):
    """Track heatmap projection size."""
    heatmap_points.observe(size)


async def metrics_endpoint():
    """
    Prometheus metrics endpoint.

    Returns:
        Response with Prometheus metrics in text format
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
