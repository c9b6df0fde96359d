"""Recurrence generator service.

Runs on task-list load rather than on a background clock. For every
completed recurring task whose next occurrence has arrived, and whose end
conditions still allow it, a new task is created with a fresh id. The
source task is never reopened; only its config bookkeeping changes.

Durability:
    With ``persist_regenerated_tasks`` enabled (the default) successors are
    written through the repository and the source records the successor's
    id, so a second pass over the same list creates nothing. With it
    disabled successors exist only in the returned list.
"""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

import structlog

from src.application.dtos.task_engine import RecurrencePassResult
from src.application.ports.notification_dispatcher import (
    NotificationDispatcherProtocol,
)
from src.application.ports.task_metrics import NullTaskMetrics, TaskMetricsPort
from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.activity_logger import ActivityLogger
from src.config.task_engine_config import DEFAULT_TASK_ENGINE_CONFIG, TaskEngineConfig
from src.domain.models.advisory import Advisory, AdvisoryLevel, AdvisoryType
from src.domain.models.task import (
    Activity,
    ActivityType,
    RecurringTaskConfig,
    Task,
    TaskInput,
    TaskStatus,
)
from src.domain.services import narration
from src.domain.services.recurrence import (
    add_pattern_interval,
    is_regeneration_due,
    should_create_occurrence,
)

log = structlog.get_logger()


class RecurrenceGenerator:
    """Spawns successor tasks for recurring tasks whose occurrence fired."""

    def __init__(
        self,
        repository: TaskRepositoryProtocol,
        activity_logger: ActivityLogger,
        time_authority: TimeAuthorityProtocol,
        dispatcher: NotificationDispatcherProtocol,
        config: TaskEngineConfig = DEFAULT_TASK_ENGINE_CONFIG,
        metrics: TaskMetricsPort | None = None,
    ) -> None:
        self._repository = repository
        self._activities = activity_logger
        self._time = time_authority
        self._dispatcher = dispatcher
        self._config = config
        self._metrics = metrics or NullTaskMetrics()

    async def process(self, owner_id: str, tasks: list[Task]) -> RecurrencePassResult:
        """Run one recurrence pass over an already-fetched task list.

        Args:
            owner_id: Owner of the collection.
            tasks: The fetched tasks.

        Returns:
            The list with updated sources and new successors appended,
            plus the ids involved.
        """
        now = self._time.now()
        result_tasks = list(tasks)
        generated: list[str] = []
        sources: list[str] = []

        for index, task in enumerate(tasks):
            if not is_regeneration_due(task, now):
                continue
            config = task.recurring_config
            assert config is not None
            if not should_create_occurrence(config):
                log.debug(
                    "recurrence_ended",
                    owner_id=owner_id,
                    task_id=task.task_id,
                    occurrences_completed=config.occurrences_completed,
                )
                continue

            successor, updated_source = await self._spawn(owner_id, task, config, now)
            result_tasks[index] = updated_source
            result_tasks.append(successor)
            generated.append(successor.task_id)
            sources.append(task.task_id)

        if generated:
            await self._announce(owner_id, len(generated), now)

        return RecurrencePassResult(
            tasks=result_tasks,
            generated_ids=tuple(generated),
            source_ids=tuple(sources),
        )

    async def _spawn(
        self,
        owner_id: str,
        source: Task,
        config: RecurringTaskConfig,
        now: datetime,
    ) -> tuple[Task, Task]:
        assert config.next_occurrence is not None
        subsequent = add_pattern_interval(
            config.next_occurrence, config.pattern, config.interval
        )
        shift = subsequent - config.next_occurrence
        fired = config.occurrences_completed + 1

        successor_input = TaskInput(
            title=source.title,
            description=source.description,
            status=TaskStatus.TODO,
            estimated_duration=source.estimated_duration,
            priority=source.priority,
            tags=source.tags,
            due_date=source.due_date + shift if source.due_date is not None else None,
            metadata=source.metadata,
            recurring_config=config.with_changes(
                next_occurrence=subsequent,
                occurrences_completed=fired,
                successor_task_id=None,
            ),
            assigned_to=source.assigned_to,
        )

        if self._config.persist_regenerated_tasks:
            successor_id = await self._repository.create(owner_id, successor_input)
            await self._activities.record(
                owner_id,
                successor_id,
                ActivityType.STATUS_CHANGE,
                narration.recurring_task_created(),
            )
            source_config = config.with_changes(
                occurrences_completed=fired, successor_task_id=successor_id
            )
            await self._repository.update(
                owner_id, source.task_id, {"recurring_config": source_config}
            )
            successor = await self._repository.get(owner_id, successor_id)
            updated_source = await self._repository.get(owner_id, source.task_id)
        else:
            successor_id = uuid4().hex
            seed = Activity(
                activity_type=ActivityType.STATUS_CHANGE,
                timestamp=now,
                details=narration.recurring_task_created(),
            )
            successor = Task.from_input(successor_id, successor_input, now).with_activity(
                seed
            )
            updated_source = source.with_changes(
                recurring_config=config.with_changes(
                    occurrences_completed=fired, successor_task_id=successor_id
                )
            )

        log.info(
            "recurring_task_generated",
            owner_id=owner_id,
            source_task_id=source.task_id,
            successor_task_id=successor_id,
            next_occurrence=subsequent.isoformat(),
            persisted=self._config.persist_regenerated_tasks,
        )
        return successor, updated_source

    async def _announce(self, owner_id: str, count: int, now: datetime) -> None:
        self._metrics.record_recurring_generated(count)
        noun = "task" if count == 1 else "tasks"
        await self._dispatcher.dispatch(
            Advisory(
                advisory_type=AdvisoryType.RECURRING_TASKS_CREATED,
                level=AdvisoryLevel.INFO,
                owner_id=owner_id,
                message=f"{count} recurring {noun} created",
                created_at=now,
                data={"count": count},
            )
        )
