"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

import os

from src.infrastructure.observability import configure_structlog as _configure_structlog

ENVIRONMENT_ENV = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "development"


def configure_structlog(environment: str) -> None:
    """Configure structlog for the given environment."""
    _configure_structlog(environment=environment)


def configure_logging_from_environment() -> str:
    """Configure structlog from ENVIRONMENT and return the environment used."""
    environment = os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT).strip().lower()
    _configure_structlog(environment=environment)
    return environment


__all__ = ["configure_logging_from_environment", "configure_structlog"]
