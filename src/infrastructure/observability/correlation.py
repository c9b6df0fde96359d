"""Correlation ID management for request tracing.

Correlation IDs live in a contextvar so they follow a request across await
points. The HTTP middleware sets one per request; a structlog processor
stamps it on every log entry.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4

CORRELATION_ID_HEADER = "X-Correlation-ID"

# Empty string means no correlation id is set
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    """Generate a new correlation ID (UUID4)."""
    return str(uuid4())


def get_correlation_id() -> str:
    """Get the current correlation ID, or an empty string if none is set."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID in the current context."""
    _correlation_id.set(correlation_id)


def ensure_correlation_id(incoming: str | None) -> str:
    """Adopt the caller's correlation ID or mint a new one, and set it.

    Args:
        incoming: Value of the inbound X-Correlation-ID header, if any.

    Returns:
        The correlation ID now active in this context.
    """
    correlation_id = incoming.strip() if incoming else ""
    if not correlation_id:
        correlation_id = generate_correlation_id()
    set_correlation_id(correlation_id)
    return correlation_id


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor adding ``correlation_id`` to every log entry."""
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict
