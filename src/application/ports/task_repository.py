"""Task repository port.

This module defines the abstract interface for task persistence. Task
collections are scoped per owner: every operation takes the owner id first
and never reads or writes another owner's tasks.

Repository rules:
1. FAIL LOUD - unresolved ids raise TaskNotFoundError
2. NO RETRIES - transport failures raise StoreUnavailableError immediately
3. SYSTEM FIELDS - the repository initializes ids, timestamps, timer and
   progress fields on create and refreshes ``updated_at`` on every write
4. LAST WRITER WINS - there is no version check between concurrent writers
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from typing import Any, Protocol

from src.domain.models.task import Activity, Task, TaskInput


class TaskSubscriptionProtocol(Protocol):
    """Live view over an owner's task collection.

    Iterating yields full snapshots of the collection, the current one first
    and then one per change. ``unsubscribe`` ends the iteration.
    """

    def __aiter__(self) -> AsyncIterator[list[Task]]: ...

    def unsubscribe(self) -> None:
        """Stop delivering snapshots and end iteration."""
        ...

    @property
    def is_active(self) -> bool:
        """Whether snapshots are still being delivered."""
        ...


class TaskRepositoryProtocol(Protocol):
    """Protocol for task storage operations.

    Implementations may use PostgreSQL, in-memory storage, or any other
    keyed record store.
    """

    async def fetch_all(self, owner_id: str) -> list[Task]:
        """Return every task in the owner's collection.

        Args:
            owner_id: Owner whose collection is read.

        Returns:
            Tasks ordered by creation time, oldest first.

        Raises:
            StoreUnavailableError: On transport failure.
        """
        ...

    async def get(self, owner_id: str, task_id: str) -> Task:
        """Return one task.

        Raises:
            TaskNotFoundError: If the id does not resolve for the owner.
            StoreUnavailableError: On transport failure.
        """
        ...

    async def create(self, owner_id: str, task_input: TaskInput) -> str:
        """Create a task from caller input.

        The repository assigns the id and initializes system fields:
        ``is_timer_running=False``, ``total_elapsed_time=0``,
        ``completion_percentage=0`` and ``created_at=updated_at=now``.

        Returns:
            The new task id.

        Raises:
            StoreUnavailableError: On transport failure.
        """
        ...

    async def update(
        self, owner_id: str, task_id: str, changes: Mapping[str, Any]
    ) -> None:
        """Apply a partial update and refresh ``updated_at``.

        Args:
            owner_id: Owner of the task.
            task_id: Task to update.
            changes: Task field names mapped to their new values. System
                managed fields (id, timestamps, activities) are rejected.

        Raises:
            TaskNotFoundError: If the id does not resolve for the owner.
            TaskValidationError: If a field name is unknown or system managed.
            StoreUnavailableError: On transport failure.
        """
        ...

    async def delete(self, owner_id: str, task_id: str) -> None:
        """Delete a task together with its activity trail.

        Raises:
            TaskNotFoundError: If the id does not resolve for the owner.
            StoreUnavailableError: On transport failure.
        """
        ...

    async def append_activity(
        self, owner_id: str, task_id: str, activity: Activity
    ) -> None:
        """Append an activity and make it the task's ``last_activity``.

        Raises:
            TaskNotFoundError: If the id does not resolve for the owner.
            StoreUnavailableError: On transport failure.
        """
        ...

    def subscribe(self, owner_id: str) -> TaskSubscriptionProtocol:
        """Open a live subscription over the owner's collection."""
        ...
