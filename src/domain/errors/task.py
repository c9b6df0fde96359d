"""Task domain errors.

This module provides exception classes for task lifecycle failures.
The engine only produces typed errors; mapping them to user-facing text is
the caller's job (the API layer maps them to problem-detail responses).

Taxonomy:
- NotFoundError: a task, comment or owner id does not resolve
- PermissionDeniedError: mutating a resource not owned by the caller
- TaskValidationError: malformed input (e.g. empty title on create)
- StoreUnavailableError: transport or backing-store failure
"""

from __future__ import annotations

from collections.abc import Sequence

from src.domain.exceptions import TaskEngineError


class NotFoundError(TaskEngineError):
    """Base error for ids that do not resolve for the given owner."""

    pass


class TaskNotFoundError(NotFoundError):
    """Raised when a task id does not resolve in an owner's collection.

    Attributes:
        owner_id: The owner whose collection was searched.
        task_id: The task id that did not resolve.
    """

    def __init__(self, owner_id: str, task_id: str) -> None:
        """Initialize the error.

        Args:
            owner_id: The owner whose collection was searched.
            task_id: The task id that did not resolve.
        """
        self.owner_id = owner_id
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found for owner {owner_id}")


class CommentNotFoundError(NotFoundError):
    """Raised when a comment id does not resolve on a task."""

    def __init__(self, task_id: str, comment_id: str) -> None:
        self.task_id = task_id
        self.comment_id = comment_id
        super().__init__(f"Comment {comment_id} not found on task {task_id}")


class PermissionDeniedError(TaskEngineError):
    """Raised when the caller mutates a resource it does not own.

    Attributes:
        actor_id: The user attempting the mutation.
        resource_id: The resource the user does not own.
    """

    def __init__(self, actor_id: str, resource_id: str) -> None:
        """Initialize the error.

        Args:
            actor_id: The user attempting the mutation.
            resource_id: The resource the user does not own.
        """
        self.actor_id = actor_id
        self.resource_id = resource_id
        super().__init__(f"User {actor_id} may not modify {resource_id}")


class TaskValidationError(TaskEngineError):
    """Raised when input to an engine operation is malformed."""

    pass


class DependencyBlockedError(TaskValidationError):
    """Raised when a gated transition hits incomplete dependencies.

    Attributes:
        task_id: The task that may not become active.
        blocking_ids: Dependency ids that are incomplete or missing.
    """

    def __init__(self, task_id: str, blocking_ids: Sequence[str]) -> None:
        """Initialize the error.

        Args:
            task_id: The task that may not become active.
            blocking_ids: Dependency ids that are incomplete or missing.
        """
        self.task_id = task_id
        self.blocking_ids = tuple(blocking_ids)
        super().__init__(
            f"Task {task_id} is blocked by {len(self.blocking_ids)} "
            f"incomplete dependencies: {', '.join(self.blocking_ids)}"
        )


class StoreUnavailableError(TaskEngineError):
    """Raised when the backing store cannot be reached.

    The repository does not retry; callers decide the retry policy.
    """

    pass
