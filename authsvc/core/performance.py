"""
HTTP performance metrics.
"""

import time
from typing import Callable

from fastapi import Request

from authsvc.core.metrics import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)


def _endpoint_label(request: Request) -> str:
    """Route template when matched ("/api/v1/roles/{role_id}"), else the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


async def track_http_metrics(request: Request, call_next: Callable):
    """
    Middleware to track HTTP metrics.

    Records:
    - Request count by endpoint and status
    - Request duration histogram
    - Requests in progress gauge
    """
    method = request.method
    path = request.url.path

    http_requests_in_progress.labels(method=method, endpoint=path).inc()
    start_time = time.perf_counter()

    try:
        response = await call_next(request)

        endpoint = _endpoint_label(request)
        http_request_duration_seconds.labels(
            method=method,
            endpoint=endpoint,
        ).observe(time.perf_counter() - start_time)

        http_requests_total.labels(
            method=method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()

        return response

    finally:
        http_requests_in_progress.labels(method=method, endpoint=path).dec()
