"""Domain errors for the task lifecycle engine.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from TaskEngineError.
"""

from src.domain.errors.task import (
    CommentNotFoundError,
    DependencyBlockedError,
    NotFoundError,
    PermissionDeniedError,
    StoreUnavailableError,
    TaskNotFoundError,
    TaskValidationError,
)

__all__: list[str] = [
    "CommentNotFoundError",
    "DependencyBlockedError",
    "NotFoundError",
    "PermissionDeniedError",
    "StoreUnavailableError",
    "TaskNotFoundError",
    "TaskValidationError",
]
