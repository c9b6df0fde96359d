"""Structured logging configuration with structlog.

Centralized structlog setup for the task engine, supporting production
(JSON) and development (console) output.

Log Entry Format (production):
    {
        "timestamp": "2026-01-01T00:00:00.000000Z",
        "level": "info",
        "event": "task_status_updated",
        "service": "task-engine",
        "correlation_id": "uuid",
        "owner_id": "...",
        ...additional context
    }

Usage:
    # At application startup
    from src.infrastructure.observability import configure_structlog

    configure_structlog(environment="production")  # JSON output
    configure_structlog(environment="development")  # Console output

    # Then use structlog normally
    import structlog
    log = structlog.get_logger()
    log.info("task_created", owner_id=owner_id, task_id=task_id)
"""

import logging
import os
from typing import Any, cast

import structlog
from structlog.typing import Processor

from src.infrastructure.observability.correlation import correlation_id_processor

# Environment variable for log level (default: INFO)
LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
SERVICE_NAME = "task-engine"


def _get_log_level() -> int:
    """Get the configured log level from environment.

    Returns:
        The logging level integer (e.g., logging.INFO).
    """
    level_name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.INFO)


def _service_name_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_structlog(environment: str = "production") -> None:
    """Configure structlog for the application.

    Should be called once at application startup.

    Args:
        environment: 'production' for JSON output, anything else for
            colored console output. Defaults to 'production'.
    """
    shared_processors: list[Processor] = [
        # Merge context from contextvars (async support)
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, _service_name_processor),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        final_processor: Processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [final_processor],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
