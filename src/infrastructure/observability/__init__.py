"""Observability infrastructure for structured logging and correlation.

Usage:
    from src.infrastructure.observability import (
        configure_structlog,
        ensure_correlation_id,
    )

    # At startup
    configure_structlog(environment="production")

    # In request handling
    ensure_correlation_id(request.headers.get("X-Correlation-ID"))
"""

from src.infrastructure.observability.correlation import (
    CORRELATION_ID_HEADER,
    correlation_id_processor,
    ensure_correlation_id,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from src.infrastructure.observability.logging import (
    configure_structlog,
)

__all__: list[str] = [
    "CORRELATION_ID_HEADER",
    "configure_structlog",
    "correlation_id_processor",
    "ensure_correlation_id",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
]
