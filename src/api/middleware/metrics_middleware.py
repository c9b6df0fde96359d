"""Metrics middleware for request instrumentation.

FastAPI middleware that records HTTP request metrics to Prometheus.
Task routes embed owner and task ids in the path, so the endpoint label
uses the matched route template to keep label cardinality bounded.
"""

import time
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.bootstrap.metrics import get_http_metrics


def _classify_error_type(status_code: int) -> str:
    """Classify an HTTP error status code."""
    if 400 <= status_code < 500:
        if status_code == 400:
            return "bad_request"
        elif status_code == 401:
            return "unauthorized"
        elif status_code == 403:
            return "forbidden"
        elif status_code == 404:
            return "not_found"
        elif status_code == 409:
            return "conflict"
        elif status_code == 422:
            return "unprocessable"
        else:
            return "client_error"
    elif status_code >= 500:
        if status_code == 500:
            return "internal_error"
        elif status_code == 503:
            return "service_unavailable"
        else:
            return "server_error"
    return "unknown"


def _endpoint_label(request: Request) -> str:
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path if path else request.url.path


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to record HTTP request metrics.

    Records:
    - Request duration (histogram)
    - Total requests (counter)
    - Failed requests (counter for 4xx/5xx, labelled with error_type)
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start_time = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - start_time
        method = request.method
        endpoint = _endpoint_label(request)
        status = str(response.status_code)

        metrics = get_http_metrics()
        metrics.observe_request_duration(
            method=method, endpoint=endpoint, duration=duration
        )
        metrics.increment_requests(method=method, endpoint=endpoint, status=status)

        if response.status_code >= 400:
            metrics.increment_failed_requests(
                method=method,
                endpoint=endpoint,
                status=status,
                error_type=_classify_error_type(response.status_code),
            )

        return response
