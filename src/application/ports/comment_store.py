"""Comment store port.

Comments and their attachments live outside the task record. The engine
only needs to persist, look up and remove them.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.comment import TaskComment


class CommentStoreProtocol(Protocol):
    """Protocol for task comment storage."""

    async def save(self, owner_id: str, comment: TaskComment) -> None:
        """Persist a new comment."""
        ...

    async def get(
        self, owner_id: str, task_id: str, comment_id: str
    ) -> TaskComment | None:
        """Return a comment, or None if it does not exist."""
        ...

    async def list_for_task(self, owner_id: str, task_id: str) -> list[TaskComment]:
        """Return a task's comments, oldest first."""
        ...

    async def delete(self, owner_id: str, task_id: str, comment_id: str) -> None:
        """Remove a comment and any replies to it."""
        ...
