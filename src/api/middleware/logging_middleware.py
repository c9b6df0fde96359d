"""Logging middleware for correlation ID propagation.

This middleware handles correlation ID management for HTTP requests:
- Adopts the incoming X-Correlation-ID header or generates a new ID
- Sets the correlation ID in context so every log entry carries it
- Echoes the correlation ID in response headers
- Logs request start/end with timing

Usage:
    from fastapi import FastAPI
    from src.api.middleware.logging_middleware import LoggingMiddleware

    app = FastAPI()
    app.add_middleware(LoggingMiddleware)
"""

import time
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.bootstrap.correlation import CORRELATION_ID_HEADER, ensure_correlation_id


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for correlation ID propagation and request logging."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Process request with correlation ID and logging.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response with correlation ID header added.
        """
        correlation_id = ensure_correlation_id(request.headers.get(CORRELATION_ID_HEADER))

        log = structlog.get_logger().bind(
            correlation_id=correlation_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
        )
        log.info("request_started")

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            log.exception(
                "request_failed",
                duration_ms=round(duration_ms, 2),
                error_type=type(exc).__name__,
            )
            # Re-raise to let error handlers deal with it
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        log.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
