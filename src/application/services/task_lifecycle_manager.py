"""Task lifecycle manager.

Status transitions, the dependency gate and progress updates.

``update_status`` is deliberately ungated: privileged flows (batch jobs,
auto-split) call it directly. Interactive flows use ``transition_status``,
which checks the dependency gate before a task moves to in-progress.

Consistency model:
    Field writes and their activities are separate repository calls and
    concurrent writers are last-writer-wins. Two racing status updates can
    leave an audit trail narrating a transition the final state does not
    reflect.
"""

from __future__ import annotations

import structlog

from src.application.ports.notification_dispatcher import (
    NotificationDispatcherProtocol,
)
from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.activity_logger import ActivityLogger
from src.config.task_engine_config import (
    DEFAULT_TASK_ENGINE_CONFIG,
    PROGRESS_POLICY_REJECT,
    TaskEngineConfig,
)
from src.domain.errors.task import DependencyBlockedError, TaskValidationError
from src.domain.models.advisory import Advisory, AdvisoryLevel, AdvisoryType
from src.domain.models.task import ActivityType, TaskStatus
from src.domain.services import narration
from src.domain.services.dependency_gate import blocking_dependencies

log = structlog.get_logger()

MIN_PROGRESS = 0
MAX_PROGRESS = 100


class TaskLifecycleManager:
    """Moves tasks through their status lifecycle."""

    def __init__(
        self,
        repository: TaskRepositoryProtocol,
        activity_logger: ActivityLogger,
        time_authority: TimeAuthorityProtocol,
        dispatcher: NotificationDispatcherProtocol,
        config: TaskEngineConfig = DEFAULT_TASK_ENGINE_CONFIG,
    ) -> None:
        self._repository = repository
        self._activities = activity_logger
        self._time = time_authority
        self._dispatcher = dispatcher
        self._config = config

    async def blocking_dependencies(
        self, owner_id: str, task_id: str
    ) -> tuple[str, ...]:
        """Return the dependency ids that keep the task's gate closed.

        Ids that no longer resolve count as blocking.

        Raises:
            TaskNotFoundError: If the task itself does not exist.
        """
        task = await self._repository.get(owner_id, task_id)
        if not task.dependencies:
            return ()
        tasks = await self._repository.fetch_all(owner_id)
        return blocking_dependencies(task, {t.task_id: t for t in tasks})

    async def check_dependencies(self, owner_id: str, task_id: str) -> bool:
        """True iff the task has no dependencies or all are completed."""
        blocking = await self.blocking_dependencies(owner_id, task_id)
        return not blocking

    async def update_status(
        self,
        owner_id: str,
        task_id: str,
        new_status: TaskStatus,
        actor_id: str | None = None,
        batch: bool = False,
    ) -> None:
        """Write a new status and narrate it.

        Appends one ``status_change`` activity. Moving to completed also
        forces progress to 100, stamps ``completed_at`` and appends a second
        ``completion`` activity after the first.

        Args:
            owner_id: Owner of the task.
            task_id: Task to update.
            new_status: Target status.
            actor_id: User making the change, for narration.
            batch: Whether the change is part of a batch operation.

        Raises:
            TaskNotFoundError: If the task does not exist.
        """
        task = await self._repository.get(owner_id, task_id)
        previous = task.status

        changes: dict[str, object] = {"status": new_status}
        if new_status == TaskStatus.COMPLETED:
            changes["completion_percentage"] = MAX_PROGRESS
            changes["completed_at"] = self._time.now()
        await self._repository.update(owner_id, task_id, changes)

        user_name = await self._activities.display_name(actor_id)
        await self._activities.record(
            owner_id,
            task_id,
            ActivityType.STATUS_CHANGE,
            narration.status_changed(user_name, previous, new_status, batch=batch),
        )
        if new_status == TaskStatus.COMPLETED:
            await self._activities.record(
                owner_id,
                task_id,
                ActivityType.COMPLETION,
                narration.task_completed(user_name, batch=batch),
            )

        log.info(
            "task_status_updated",
            owner_id=owner_id,
            task_id=task_id,
            from_status=previous.value,
            to_status=new_status.value,
            batch=batch,
        )

    async def transition_status(
        self,
        owner_id: str,
        task_id: str,
        new_status: TaskStatus,
        actor_id: str | None = None,
    ) -> None:
        """Change status, enforcing the dependency gate for in-progress.

        Raises:
            TaskNotFoundError: If the task does not exist.
            DependencyBlockedError: If moving to in-progress while a
                dependency is incomplete or missing. A ``dependency_blocked``
                advisory is dispatched first.
        """
        if new_status == TaskStatus.IN_PROGRESS:
            blocking = await self.blocking_dependencies(owner_id, task_id)
            if blocking:
                await self._dispatcher.dispatch(
                    Advisory(
                        advisory_type=AdvisoryType.DEPENDENCY_BLOCKED,
                        level=AdvisoryLevel.WARNING,
                        owner_id=owner_id,
                        task_id=task_id,
                        message=(
                            f"Task has {len(blocking)} incomplete "
                            "dependencies and cannot be started"
                        ),
                        created_at=self._time.now(),
                        data={"blocking_ids": list(blocking)},
                    )
                )
                log.warning(
                    "task_transition_blocked",
                    owner_id=owner_id,
                    task_id=task_id,
                    blocking_ids=list(blocking),
                )
                raise DependencyBlockedError(task_id, blocking)

        await self.update_status(owner_id, task_id, new_status, actor_id=actor_id)

    async def update_progress(
        self,
        owner_id: str,
        task_id: str,
        percentage: float,
        actor_id: str | None = None,
    ) -> float:
        """Write the completion percentage and narrate it.

        Out-of-range input follows the configured policy: ``clamp`` brings it
        into [0, 100] with a warning, ``reject`` raises. A completed task
        always stays at 100.

        Returns:
            The percentage actually stored.

        Raises:
            TaskNotFoundError: If the task does not exist.
            TaskValidationError: If the value is out of range (or would move
                a completed task off 100) under the reject policy.
        """
        task = await self._repository.get(owner_id, task_id)
        value = self._apply_progress_policy(owner_id, task_id, percentage)

        if task.status == TaskStatus.COMPLETED and value != MAX_PROGRESS:
            if self._config.progress_policy == PROGRESS_POLICY_REJECT:
                raise TaskValidationError(
                    f"Completed task {task_id} must stay at {MAX_PROGRESS}%"
                )
            log.warning(
                "progress_held_for_completed_task",
                owner_id=owner_id,
                task_id=task_id,
                requested=percentage,
            )
            value = MAX_PROGRESS

        await self._repository.update(
            owner_id, task_id, {"completion_percentage": value}
        )
        await self._activities.record(
            owner_id,
            task_id,
            ActivityType.STATUS_CHANGE,
            narration.progress_updated(value),
        )
        log.info(
            "task_progress_updated",
            owner_id=owner_id,
            task_id=task_id,
            completion_percentage=value,
        )
        return value

    def _apply_progress_policy(
        self, owner_id: str, task_id: str, percentage: float
    ) -> float:
        if MIN_PROGRESS <= percentage <= MAX_PROGRESS:
            return percentage
        if self._config.progress_policy == PROGRESS_POLICY_REJECT:
            raise TaskValidationError(
                f"Progress must be within [{MIN_PROGRESS}, {MAX_PROGRESS}], "
                f"got {percentage}"
            )
        clamped = max(MIN_PROGRESS, min(MAX_PROGRESS, percentage))
        log.warning(
            "progress_clamped",
            owner_id=owner_id,
            task_id=task_id,
            requested=percentage,
            stored=clamped,
        )
        return clamped
