"""Task engine facade.

The surface the board layer and scheduled jobs call. Each operation
delegates to the service that owns it; the facade adds only creation,
generic partial updates and deletion, and runs the recurrence pass on
every task-list load.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any

import structlog

from src.application.dtos.task_engine import (
    BatchResult,
    ScoredTask,
    SplitResult,
    TaskActivityEntry,
    TaskRecommendation,
    TimerUpdateResult,
)
from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.services.activity_logger import ActivityLogger
from src.application.services.auto_split_engine import AutoSplitEngine
from src.application.services.batch_coordinator import BatchCoordinator
from src.application.services.comment_service import CommentService
from src.application.services.personalization_scorer import PersonalizationScorer
from src.application.services.recurrence_generator import RecurrenceGenerator
from src.application.services.task_analysis_service import TaskAnalysisService
from src.application.services.task_lifecycle_manager import TaskLifecycleManager
from src.application.services.timer_tracker import TimerTracker
from src.domain.errors.task import TaskValidationError
from src.domain.models.task import (
    LIFECYCLE_MANAGED_FIELDS,
    SYSTEM_MANAGED_FIELDS,
    TASK_FIELD_NAMES,
    Activity,
    ActivityType,
    Task,
    TaskInput,
    TaskMetadata,
    TaskPriority,
    TaskStatus,
)
from src.domain.services import narration

log = structlog.get_logger()

_METADATA_FIELDS = frozenset(
    f.name for f in dataclasses.fields(TaskMetadata) if f.name != "extra"
)


class TaskEngine:
    """Entry point for every task lifecycle operation."""

    def __init__(
        self,
        repository: TaskRepositoryProtocol,
        activity_logger: ActivityLogger,
        lifecycle_manager: TaskLifecycleManager,
        timer_tracker: TimerTracker,
        recurrence_generator: RecurrenceGenerator,
        auto_split_engine: AutoSplitEngine,
        personalization_scorer: PersonalizationScorer,
        batch_coordinator: BatchCoordinator,
        analysis_service: TaskAnalysisService,
        comment_service: CommentService,
    ) -> None:
        self._repository = repository
        self.activities = activity_logger
        self.lifecycle = lifecycle_manager
        self.timer = timer_tracker
        self.recurrence = recurrence_generator
        self.splitter = auto_split_engine
        self.scorer = personalization_scorer
        self.batch = batch_coordinator
        self.analysis = analysis_service
        self.comments = comment_service

    @property
    def repository(self) -> TaskRepositoryProtocol:
        return self._repository

    # Collection operations

    async def fetch_tasks(self, owner_id: str) -> list[Task]:
        """Load the owner's tasks and run the recurrence pass over them."""
        tasks = await self._repository.fetch_all(owner_id)
        result = await self.recurrence.process(owner_id, tasks)
        if result.generated_count:
            log.info(
                "recurring_tasks_created",
                owner_id=owner_id,
                count=result.generated_count,
            )
        return result.tasks

    async def get_task(self, owner_id: str, task_id: str) -> Task:
        return await self._repository.get(owner_id, task_id)

    async def create_task(
        self, owner_id: str, task_input: TaskInput, actor_id: str | None = None
    ) -> str:
        """Validate input, create the task and narrate its creation.

        Raises:
            TaskValidationError: If the input is malformed.
        """
        task_input.validate()
        task_id = await self._repository.create(owner_id, task_input)
        user_name = await self.activities.display_name(actor_id)
        await self.activities.record(
            owner_id, task_id, ActivityType.STATUS_CHANGE, narration.task_created(user_name)
        )
        log.info("task_created", owner_id=owner_id, task_id=task_id)
        return task_id

    async def update_task(
        self,
        owner_id: str,
        task_id: str,
        changes: Mapping[str, Any],
        actor_id: str | None = None,
    ) -> None:
        """Apply a partial update.

        Field changes are written together and narrated by one activity.
        A status change in the same request goes through ``update_status``
        afterwards so completion rules and narration stay uniform. Such a
        request is two mutations and appends the field activity followed by
        the status activity (plus the completion activity when completing).

        Timer and progress fields are refused here; ``update_task_timer`` and
        ``update_task_progress`` keep elapsed time monotonic and completion
        within bounds.

        Raises:
            TaskNotFoundError: If the task does not exist.
            TaskValidationError: If a field is unknown, system managed, timer
                or progress owned, or given an invalid value.
        """
        pending = dict(changes)
        self._validate_changes(pending)
        new_status = pending.pop("status", None)

        if pending:
            task = await self._repository.get(owner_id, task_id)
            await self._repository.update(owner_id, task_id, pending)
            user_name = await self.activities.display_name(actor_id)
            activity_type, details = self._describe_update(task, pending, user_name)
            await self.activities.record(owner_id, task_id, activity_type, details)
            log.info(
                "task_updated",
                owner_id=owner_id,
                task_id=task_id,
                fields=sorted(pending),
            )

        if new_status is not None:
            await self.lifecycle.update_status(
                owner_id, task_id, TaskStatus(new_status), actor_id=actor_id
            )

    async def update_task_metadata(
        self,
        owner_id: str,
        task_id: str,
        updates: Mapping[str, Any],
        actor_id: str | None = None,
    ) -> None:
        """Merge metadata values; unknown keys are kept in ``extra``."""
        task = await self._repository.get(owner_id, task_id)
        known = {k: v for k, v in updates.items() if k in _METADATA_FIELDS}
        extra = {k: v for k, v in updates.items() if k not in _METADATA_FIELDS}
        for key in ("subtask_ids", "skill_requirements", "split_into_tasks"):
            if key in known:
                known[key] = tuple(known[key])
        metadata = task.metadata.with_changes(
            **known, extra={**task.metadata.extra, **extra}
        )
        await self.update_task(owner_id, task_id, {"metadata": metadata}, actor_id)

    async def delete_task(self, owner_id: str, task_id: str) -> None:
        """Delete a task and its audit trail."""
        await self._repository.delete(owner_id, task_id)
        log.info("task_deleted", owner_id=owner_id, task_id=task_id)

    # Lifecycle

    async def update_task_status(
        self,
        owner_id: str,
        task_id: str,
        new_status: TaskStatus,
        actor_id: str | None = None,
        enforce_dependencies: bool = False,
    ) -> None:
        """Change status; with ``enforce_dependencies`` the gate is checked."""
        if enforce_dependencies:
            await self.lifecycle.transition_status(
                owner_id, task_id, new_status, actor_id=actor_id
            )
        else:
            await self.lifecycle.update_status(
                owner_id, task_id, new_status, actor_id=actor_id
            )

    async def update_task_progress(
        self,
        owner_id: str,
        task_id: str,
        percentage: float,
        actor_id: str | None = None,
    ) -> float:
        return await self.lifecycle.update_progress(
            owner_id, task_id, percentage, actor_id=actor_id
        )

    async def check_dependencies(self, owner_id: str, task_id: str) -> bool:
        return await self.lifecycle.check_dependencies(owner_id, task_id)

    # Timer and splitting

    async def update_task_timer(
        self,
        owner_id: str,
        task_id: str,
        is_running: bool,
        elapsed_delta_ms: int | None = None,
        actor_id: str | None = None,
    ) -> TimerUpdateResult:
        """Start (``is_running=True``) or stop the task's timer."""
        if is_running:
            return await self.timer.start(owner_id, task_id, actor_id=actor_id)
        return await self.timer.stop(
            owner_id, task_id, elapsed_delta_ms=elapsed_delta_ms, actor_id=actor_id
        )

    async def check_task_split_needed(self, owner_id: str, task_id: str) -> bool:
        return await self.splitter.check_split_needed(owner_id, task_id)

    async def auto_split_task(
        self, owner_id: str, task_id: str, actor_id: str | None = None
    ) -> SplitResult:
        return await self.splitter.auto_split(owner_id, task_id, actor_id=actor_id)

    # Personalization

    async def calculate_personalization_score(self, owner_id: str, task_id: str) -> int:
        return await self.scorer.score(owner_id, task_id)

    async def get_recommended_tasks(
        self, owner_id: str, limit: int | None = None
    ) -> list[ScoredTask]:
        return await self.scorer.get_recommended_tasks(owner_id, limit)

    # Batch

    async def update_batch_task_status(
        self,
        owner_id: str,
        task_ids: Sequence[str],
        new_status: TaskStatus,
        actor_id: str | None = None,
    ) -> BatchResult:
        return await self.batch.update_status(owner_id, task_ids, new_status, actor_id)

    async def update_batch_task_priority(
        self,
        owner_id: str,
        task_ids: Sequence[str],
        new_priority: TaskPriority,
        actor_id: str | None = None,
    ) -> BatchResult:
        return await self.batch.update_priority(
            owner_id, task_ids, new_priority, actor_id
        )

    async def delete_batch_tasks(
        self, owner_id: str, task_ids: Sequence[str]
    ) -> BatchResult:
        return await self.batch.delete(owner_id, task_ids)

    async def add_tags_to_batch_tasks(
        self,
        owner_id: str,
        task_ids: Sequence[str],
        tags: Sequence[str],
        actor_id: str | None = None,
    ) -> BatchResult:
        return await self.batch.add_tags(owner_id, task_ids, tags, actor_id)

    # Audit trail and analysis

    async def get_task_history(
        self, owner_id: str, task_id: str, limit: int | None = None
    ) -> list[Activity]:
        return await self.activities.history(owner_id, task_id, limit)

    async def get_recent_activity(
        self, owner_id: str, limit: int | None = None
    ) -> list[TaskActivityEntry]:
        return await self.activities.recent_across_tasks(owner_id, limit)

    async def breakdown_task(
        self,
        owner_id: str,
        parent_id: str,
        subtasks: Sequence[TaskInput],
        actor_id: str | None = None,
    ) -> list[str]:
        return await self.analysis.breakdown_task(owner_id, parent_id, subtasks, actor_id)

    async def analyze_task(
        self, owner_id: str, task_id: str
    ) -> list[TaskRecommendation]:
        return await self.analysis.analyze_task(owner_id, task_id)

    async def provide_task_guidance(self, owner_id: str, task_id: str) -> str:
        return await self.analysis.provide_guidance(owner_id, task_id)

    @staticmethod
    def _validate_changes(changes: Mapping[str, Any]) -> None:
        unknown = set(changes) - TASK_FIELD_NAMES
        if unknown:
            raise TaskValidationError(f"Unknown task fields: {sorted(unknown)}")
        managed = set(changes) & SYSTEM_MANAGED_FIELDS
        if managed:
            raise TaskValidationError(
                f"System managed fields cannot be updated: {sorted(managed)}"
            )
        lifecycle = set(changes) & LIFECYCLE_MANAGED_FIELDS
        if lifecycle:
            raise TaskValidationError(
                "Timer and progress fields change only through the timer and "
                f"progress operations: {sorted(lifecycle)}"
            )
        if "title" in changes and not str(changes["title"] or "").strip():
            raise TaskValidationError("Task title must not be empty")
        if "estimated_duration" in changes and changes["estimated_duration"] <= 0:
            raise TaskValidationError(
                "estimated_duration must be a positive number of minutes, "
                f"got {changes['estimated_duration']}"
            )

    @staticmethod
    def _describe_update(
        task: Task, changes: Mapping[str, Any], user_name: str
    ) -> tuple[ActivityType, str]:
        fields = sorted(changes)
        if fields == ["priority"] and changes["priority"] is not None:
            return ActivityType.PRIORITY_CHANGE, narration.priority_changed(
                user_name, task.priority, TaskPriority(changes["priority"])
            )
        if "dependencies" in changes:
            return ActivityType.DEPENDENCY_UPDATE, narration.dependencies_updated(
                user_name, len(changes["dependencies"])
            )
        if "tags" in changes:
            return ActivityType.TAG_UPDATE, narration.task_details_updated(
                user_name, fields
            )
        if "priority" in changes:
            return ActivityType.PRIORITY_CHANGE, narration.task_details_updated(
                user_name, fields
            )
        return ActivityType.STATUS_CHANGE, narration.task_details_updated(
            user_name, fields
        )
