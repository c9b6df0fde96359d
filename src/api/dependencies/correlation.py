"""Correlation ID FastAPI dependency.

LoggingMiddleware sets the correlation ID for every request; this
dependency exposes it to route handlers that need to echo or forward it.

Usage:
    @router.get("/example")
    async def example_endpoint(
        correlation_id: str = Depends(get_correlation_id_header)
    ) -> dict:
        return {"correlation_id": correlation_id}
"""

from fastapi import Header

from src.bootstrap.correlation import (
    CORRELATION_ID_HEADER,
    ensure_correlation_id,
    get_correlation_id,
)


async def get_correlation_id_header(
    x_correlation_id: str | None = Header(default=None, alias=CORRELATION_ID_HEADER),
) -> str:
    """Return the active correlation ID, adopting the header if none is set."""
    existing = get_correlation_id()
    if existing:
        return existing
    return ensure_correlation_id(x_correlation_id)
