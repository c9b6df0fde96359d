"""Task repository stub implementation.

This module provides an in-memory implementation of TaskRepositoryProtocol
for development and testing purposes, including live subscriptions.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any
from uuid import uuid4

from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.domain.errors.task import TaskNotFoundError, TaskValidationError
from src.domain.models.task import (
    SYSTEM_MANAGED_FIELDS,
    Activity,
    Task,
    TaskInput,
)
from src.infrastructure.adapters.system_time_authority import SystemTimeAuthority
from src.infrastructure.stubs.task_subscription import TaskSubscription


class TaskRepositoryStub(TaskRepositoryProtocol):
    """In-memory stub implementation of TaskRepositoryProtocol.

    This stub stores tasks in memory, keyed by owner then task id. It is
    NOT suitable for production use. Stored tasks are immutable, so readers
    never share mutable state with the store.

    Attributes:
        _tasks: Owner id mapped to (task id mapped to Task).
        _subscriptions: Owner id mapped to its open subscriptions.
    """

    def __init__(self, time_authority: TimeAuthorityProtocol | None = None) -> None:
        """Initialize the stub with empty storage."""
        self._time = time_authority or SystemTimeAuthority()
        self._tasks: dict[str, dict[str, Task]] = {}
        self._subscriptions: dict[str, list[TaskSubscription]] = {}

    async def fetch_all(self, owner_id: str) -> list[Task]:
        return list(self._tasks.get(owner_id, {}).values())

    async def get(self, owner_id: str, task_id: str) -> Task:
        task = self._tasks.get(owner_id, {}).get(task_id)
        if task is None:
            raise TaskNotFoundError(owner_id, task_id)
        return task

    async def create(self, owner_id: str, task_input: TaskInput) -> str:
        task_id = uuid4().hex
        task = Task.from_input(task_id, task_input, self._time.now())
        self._tasks.setdefault(owner_id, {})[task_id] = task
        self._publish(owner_id)
        return task_id

    async def update(
        self, owner_id: str, task_id: str, changes: Mapping[str, Any]
    ) -> None:
        managed = set(changes) & SYSTEM_MANAGED_FIELDS
        if managed:
            raise TaskValidationError(
                f"System managed fields cannot be updated: {sorted(managed)}"
            )
        task = await self.get(owner_id, task_id)
        updated = task.with_changes(**dict(changes))
        self._store(owner_id, updated.with_changes(updated_at=self._touch(task)))

    async def delete(self, owner_id: str, task_id: str) -> None:
        await self.get(owner_id, task_id)
        del self._tasks[owner_id][task_id]
        self._publish(owner_id)

    async def append_activity(
        self, owner_id: str, task_id: str, activity: Activity
    ) -> None:
        task = await self.get(owner_id, task_id)
        updated = task.with_activity(activity)
        self._store(owner_id, updated.with_changes(updated_at=self._touch(task)))

    def subscribe(self, owner_id: str) -> TaskSubscription:
        subscription = TaskSubscription(owner_id, on_close=self._remove_subscription)
        self._subscriptions.setdefault(owner_id, []).append(subscription)
        subscription.push(list(self._tasks.get(owner_id, {}).values()))
        return subscription

    # Test helper methods

    def add_task(self, owner_id: str, task: Task) -> None:
        """Seed a fully-formed task, bypassing create-time initialization."""
        self._store(owner_id, task)

    def subscription_count(self, owner_id: str) -> int:
        return len(self._subscriptions.get(owner_id, []))

    def clear(self) -> None:
        """Clear all stored tasks and close every subscription."""
        for subscriptions in list(self._subscriptions.values()):
            for subscription in list(subscriptions):
                subscription.unsubscribe()
        self._tasks.clear()
        self._subscriptions.clear()

    def _touch(self, task: Task) -> datetime:
        # updated_at never moves backwards, even if the clock does
        return max(self._time.now(), task.updated_at)

    def _store(self, owner_id: str, task: Task) -> None:
        self._tasks.setdefault(owner_id, {})[task.task_id] = task
        self._publish(owner_id)

    def _publish(self, owner_id: str) -> None:
        snapshot = list(self._tasks.get(owner_id, {}).values())
        for subscription in list(self._subscriptions.get(owner_id, [])):
            subscription.push(snapshot)

    def _remove_subscription(self, subscription: TaskSubscription) -> None:
        subscriptions = self._subscriptions.get(subscription.owner_id, [])
        if subscription in subscriptions:
            subscriptions.remove(subscription)
