"""Auto-split engine.

When an open task has consumed the split threshold of its time budget it
can be split into two successor tasks. The original is force-completed and
records the successors, so a split task is never split again.

Successors:
- titles "<title> (Part 1)" and "<title> (Part 2)"
- estimates ceil(d/2) and floor(d/2), summing to the original estimate
- inherit priority, dependencies, assignee, metadata and tags, plus the
  "auto-split" tag
- both start in todo
"""

from __future__ import annotations

import structlog

from src.application.dtos.task_engine import SplitResult
from src.application.ports.task_metrics import NullTaskMetrics, TaskMetricsPort
from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.activity_logger import ActivityLogger
from src.config.task_engine_config import DEFAULT_TASK_ENGINE_CONFIG, TaskEngineConfig
from src.domain.errors.task import TaskValidationError
from src.domain.models.task import ActivityType, Task, TaskInput, TaskStatus
from src.domain.services import narration
from src.domain.services.time_budget import (
    MIN_SPLIT_DURATION,
    is_split_eligible,
    split_durations,
)

log = structlog.get_logger()

AUTO_SPLIT_TAG = "auto-split"


class AutoSplitEngine:
    """Detects time-budget overruns and splits tasks into successors."""

    def __init__(
        self,
        repository: TaskRepositoryProtocol,
        activity_logger: ActivityLogger,
        time_authority: TimeAuthorityProtocol,
        config: TaskEngineConfig = DEFAULT_TASK_ENGINE_CONFIG,
        metrics: TaskMetricsPort | None = None,
    ) -> None:
        self._repository = repository
        self._activities = activity_logger
        self._time = time_authority
        self._config = config
        self._metrics = metrics or NullTaskMetrics()

    def is_eligible(self, task: Task) -> bool:
        """Whether an already-loaded task has crossed the split threshold."""
        return is_split_eligible(task, self._config.split_threshold_ratio)

    async def check_split_needed(self, owner_id: str, task_id: str) -> bool:
        """True iff the task is open and at or past the split threshold.

        Raises:
            TaskNotFoundError: If the task does not exist.
        """
        task = await self._repository.get(owner_id, task_id)
        return self.is_eligible(task)

    async def auto_split(
        self, owner_id: str, task_id: str, actor_id: str | None = None
    ) -> SplitResult:
        """Split a task into two successors and force-complete it.

        Only tasks at or past the split threshold are split; nothing is
        created otherwise.

        Raises:
            TaskNotFoundError: If the task does not exist.
            TaskValidationError: If the task is already completed, its
                estimate is too short to halve, or it has not reached the
                split threshold.
        """
        task = await self._repository.get(owner_id, task_id)
        if task.status == TaskStatus.COMPLETED:
            raise TaskValidationError(
                f"Task {task_id} is already completed and cannot be split"
            )
        if task.estimated_duration < MIN_SPLIT_DURATION:
            raise TaskValidationError(
                f"Task {task_id} estimate of {task.estimated_duration} minute(s) "
                "is too short to split"
            )
        now = self._time.now()
        total_elapsed = task.total_elapsed_time
        if task.is_timer_running and task.start_time is not None:
            total_elapsed += max(
                0, int((now - task.start_time).total_seconds() * 1000)
            )
        if not self.is_eligible(task.with_changes(total_elapsed_time=total_elapsed)):
            raise TaskValidationError(
                f"Task {task_id} has not reached the split threshold "
                f"({self._config.split_threshold_ratio:.0%} of its estimate)"
            )

        remaining_work = 100 - task.completion_percentage
        durations = split_durations(task.estimated_duration)
        tags = task.tags + (AUTO_SPLIT_TAG,)

        part_ids: list[str] = []
        for number, (duration, half) in enumerate(
            zip(durations, ("First", "Second")), start=1
        ):
            part_input = TaskInput(
                title=f"{task.title} (Part {number})",
                description=f"{half} half of original task: {task.description}",
                status=TaskStatus.TODO,
                estimated_duration=duration,
                priority=task.priority,
                tags=tags,
                due_date=task.due_date,
                dependencies=task.dependencies,
                metadata=task.metadata,
                assigned_to=task.assigned_to,
            )
            part_ids.append(await self._repository.create(owner_id, part_input))

        await self._repository.update(
            owner_id,
            task_id,
            {
                "status": TaskStatus.COMPLETED,
                "completion_percentage": 100,
                "completed_at": now,
                "is_timer_running": False,
                "start_time": None,
                "total_elapsed_time": total_elapsed,
                "metadata": task.metadata.with_changes(
                    split_into_tasks=tuple(part_ids)
                ),
            },
        )
        user_name = await self._activities.display_name(actor_id)
        await self._activities.record(
            owner_id,
            task_id,
            ActivityType.SPLIT,
            narration.auto_split(user_name, remaining_work, durations),
        )
        self._metrics.record_auto_split()

        log.info(
            "task_auto_split",
            owner_id=owner_id,
            task_id=task_id,
            successor_ids=part_ids,
            durations=list(durations),
        )
        return SplitResult(
            original_task_id=task_id,
            successor_ids=(part_ids[0], part_ids[1]),
            durations=durations,
        )
