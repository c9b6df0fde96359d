"""Bootstrap wiring for correlation utilities."""

from src.infrastructure.observability.correlation import (
    CORRELATION_ID_HEADER,
    ensure_correlation_id,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)

__all__ = [
    "CORRELATION_ID_HEADER",
    "ensure_correlation_id",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
]
