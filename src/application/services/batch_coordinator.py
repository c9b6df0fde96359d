"""Batch coordinator service.

Applies one logical mutation across a list of task ids in a single request.
Each task is handled independently and concurrently:

- per-task prior state (the "from" status or priority) is read per task
- one activity is appended per affected task, suffixed "(batch update)"
- a failing task is logged and reported; tasks that succeeded are not
  rolled back (no batch-wide atomicity)

Only engine errors are treated as per-task failures. Anything else
propagates.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence

import structlog

from src.application.dtos.task_engine import BatchResult, BatchTaskFailure
from src.application.ports.task_metrics import NullTaskMetrics, TaskMetricsPort
from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.services.activity_logger import ActivityLogger
from src.application.services.task_lifecycle_manager import TaskLifecycleManager
from src.domain.exceptions import TaskEngineError
from src.domain.models.task import ActivityType, TaskPriority, TaskStatus, normalize_tags
from src.domain.services import narration

log = structlog.get_logger()

OPERATION_STATUS = "status"
OPERATION_PRIORITY = "priority"
OPERATION_TAGS = "tags"
OPERATION_DELETE = "delete"


def _unique(task_ids: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(task_ids))


class BatchCoordinator:
    """Fans a single mutation out across many tasks, best-effort."""

    def __init__(
        self,
        repository: TaskRepositoryProtocol,
        lifecycle_manager: TaskLifecycleManager,
        activity_logger: ActivityLogger,
        metrics: TaskMetricsPort | None = None,
    ) -> None:
        self._repository = repository
        self._lifecycle = lifecycle_manager
        self._activities = activity_logger
        self._metrics = metrics or NullTaskMetrics()

    async def update_status(
        self,
        owner_id: str,
        task_ids: Sequence[str],
        new_status: TaskStatus,
        actor_id: str | None = None,
    ) -> BatchResult:
        """Move every task to ``new_status``, bypassing the dependency gate.

        Completing a task through a batch mirrors the single-task path:
        progress 100, ``completed_at`` stamped, status_change and completion
        activities.
        """

        async def apply(task_id: str) -> None:
            await self._lifecycle.update_status(
                owner_id, task_id, new_status, actor_id=actor_id, batch=True
            )

        return await self._run(owner_id, OPERATION_STATUS, task_ids, apply)

    async def update_priority(
        self,
        owner_id: str,
        task_ids: Sequence[str],
        new_priority: TaskPriority,
        actor_id: str | None = None,
    ) -> BatchResult:
        """Set the priority of every task, narrating each task's old value."""
        user_name = await self._activities.display_name(actor_id)

        async def apply(task_id: str) -> None:
            task = await self._repository.get(owner_id, task_id)
            await self._repository.update(owner_id, task_id, {"priority": new_priority})
            await self._activities.record(
                owner_id,
                task_id,
                ActivityType.PRIORITY_CHANGE,
                narration.priority_changed(
                    user_name, task.priority, new_priority, batch=True
                ),
            )

        return await self._run(owner_id, OPERATION_PRIORITY, task_ids, apply)

    async def add_tags(
        self,
        owner_id: str,
        task_ids: Sequence[str],
        tags: Sequence[str],
        actor_id: str | None = None,
    ) -> BatchResult:
        """Merge ``tags`` into every task's tags, keeping order and no duplicates."""
        new_tags = normalize_tags(tags)
        user_name = await self._activities.display_name(actor_id)

        async def apply(task_id: str) -> None:
            task = await self._repository.get(owner_id, task_id)
            merged = normalize_tags(task.tags + new_tags)
            await self._repository.update(owner_id, task_id, {"tags": merged})
            await self._activities.record(
                owner_id,
                task_id,
                ActivityType.TAG_UPDATE,
                narration.tags_added(user_name, new_tags, batch=True),
            )

        return await self._run(owner_id, OPERATION_TAGS, task_ids, apply)

    async def delete(self, owner_id: str, task_ids: Sequence[str]) -> BatchResult:
        """Delete every task. The audit trail goes with each task."""

        async def apply(task_id: str) -> None:
            await self._repository.delete(owner_id, task_id)

        return await self._run(owner_id, OPERATION_DELETE, task_ids, apply)

    async def _run(
        self,
        owner_id: str,
        operation: str,
        task_ids: Sequence[str],
        apply: Callable[[str], Awaitable[None]],
    ) -> BatchResult:
        ids = _unique(task_ids)
        log.info(
            "batch_operation_started",
            owner_id=owner_id,
            operation=operation,
            task_count=len(ids),
        )

        async def guarded(task_id: str) -> BatchTaskFailure | None:
            try:
                await apply(task_id)
            except TaskEngineError as exc:
                log.warning(
                    "batch_task_failed",
                    owner_id=owner_id,
                    operation=operation,
                    task_id=task_id,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                self._metrics.record_batch_failure(operation)
                return BatchTaskFailure(
                    task_id=task_id,
                    error_type=type(exc).__name__,
                    message=str(exc),
                )
            return None

        outcomes = await asyncio.gather(*(guarded(task_id) for task_id in ids))

        failures = tuple(f for f in outcomes if f is not None)
        failed_ids = {f.task_id for f in failures}
        result = BatchResult(
            operation=operation,
            succeeded=tuple(i for i in ids if i not in failed_ids),
            failed=failures,
        )
        log.info(
            "batch_operation_completed",
            owner_id=owner_id,
            operation=operation,
            succeeded=len(result.succeeded),
            failed=len(result.failed),
        )
        return result
