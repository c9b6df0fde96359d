"""Persistence adapters."""

from src.infrastructure.adapters.persistence.task_repository import (
    PollingTaskSubscription,
    PostgresTaskRepository,
)

__all__: list[str] = ["PollingTaskSubscription", "PostgresTaskRepository"]
