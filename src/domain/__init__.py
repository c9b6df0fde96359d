"""
Domain layer - Pure business logic for the task lifecycle engine.

This layer contains:
- Domain models (Task, Activity, RecurringTaskConfig, ...)
- Domain services (pure recurrence, time-budget and scoring rules)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or api.
Only stdlib and typing imports are allowed.
"""

from src.domain.exceptions import TaskEngineError

__all__: list[str] = ["TaskEngineError"]
