"""Task analysis service.

Subtask breakdown plus advisory analysis of a single task: structured
recommendations and a one-line guidance message. Analysis never mutates
the task.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from src.application.dtos.task_engine import TaskRecommendation
from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.activity_logger import ActivityLogger
from src.domain.errors.task import TaskValidationError
from src.domain.models.task import ActivityType, Task, TaskInput, TaskStatus
from src.domain.services import narration
from src.domain.services.dependency_gate import blocking_dependencies

log = structlog.get_logger()

SUBTASK_TAG = "subtask"
HIGH_COMPLEXITY = "high"

# Analysis thresholds
LONG_TASK_MINUTES = 120
MANY_DEPENDENCIES = 2
APPROACHING_ESTIMATE_RATIO = 0.8
OVERRUN_GUIDANCE_RATIO = 1.2

GUIDANCE_ON_TRACK = "This task is on track. Keep up the good work!"
GUIDANCE_OVERRUN = (
    "You've spent significantly more time than estimated on this task. "
    "Consider breaking it down or requesting assistance."
)
GUIDANCE_COMPLEX = (
    "This is a complex task that might benefit from being broken down "
    "into smaller subtasks."
)


def _dependency_guidance(count: int) -> str:
    return (
        f"This task has {count} incomplete dependencies. "
        "Consider focusing on those tasks first."
    )


class TaskAnalysisService:
    """Breaks tasks down and produces recommendations and guidance."""

    def __init__(
        self,
        repository: TaskRepositoryProtocol,
        activity_logger: ActivityLogger,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._repository = repository
        self._activities = activity_logger
        self._time = time_authority

    async def breakdown_task(
        self,
        owner_id: str,
        parent_id: str,
        subtasks: Sequence[TaskInput],
        actor_id: str | None = None,
    ) -> list[str]:
        """Create subtasks under a parent and link both directions.

        Children start in todo, inherit the parent's priority (when they
        declare none), dependencies and assignee, carry the "subtask" tag and
        point back to the parent. The parent then lists every child.

        Returns:
            Ids of the created subtasks, in input order.

        Raises:
            TaskNotFoundError: If the parent does not exist.
            TaskValidationError: If no subtasks are given or one is invalid.
        """
        if not subtasks:
            raise TaskValidationError("At least one subtask is required")
        for subtask in subtasks:
            subtask.validate()

        parent = await self._repository.get(owner_id, parent_id)
        child_ids: list[str] = []
        for subtask in subtasks:
            child_input = TaskInput(
                title=subtask.title,
                description=subtask.description,
                status=TaskStatus.TODO,
                estimated_duration=subtask.estimated_duration,
                priority=subtask.priority or parent.priority,
                tags=subtask.tags + (SUBTASK_TAG,),
                due_date=subtask.due_date,
                dependencies=parent.dependencies,
                metadata=subtask.metadata.with_changes(parent_task_id=parent_id),
                assigned_to=parent.assigned_to,
            )
            child_id = await self._repository.create(owner_id, child_input)
            await self._activities.record(
                owner_id,
                child_id,
                ActivityType.STATUS_CHANGE,
                narration.created_as_subtask(),
            )
            child_ids.append(child_id)

        await self._repository.update(
            owner_id,
            parent_id,
            {
                "metadata": parent.metadata.with_changes(
                    subtask_ids=parent.metadata.subtask_ids + tuple(child_ids)
                )
            },
        )
        user_name = await self._activities.display_name(actor_id)
        await self._activities.record(
            owner_id,
            parent_id,
            ActivityType.SPLIT,
            narration.subtasks_created(user_name, len(child_ids)),
        )
        log.info(
            "task_broken_down",
            owner_id=owner_id,
            parent_id=parent_id,
            subtask_ids=child_ids,
        )
        return child_ids

    async def analyze_task(
        self, owner_id: str, task_id: str
    ) -> list[TaskRecommendation]:
        """Return recommendations for a task, highest impact first."""
        task = await self._repository.get(owner_id, task_id)
        recommendations: list[TaskRecommendation] = []

        if (
            task.metadata.complexity == HIGH_COMPLEXITY
            and task.estimated_duration > LONG_TASK_MINUTES
        ):
            recommendations.append(
                TaskRecommendation(
                    task_id=task_id,
                    recommendation_type="priority",
                    priority="high",
                    message=(
                        "Consider breaking down this complex task into "
                        "smaller subtasks"
                    ),
                    impact=85,
                )
            )

        if len(task.dependencies) > MANY_DEPENDENCIES:
            recommendations.append(
                TaskRecommendation(
                    task_id=task_id,
                    recommendation_type="dependency",
                    priority="medium",
                    message=(
                        "This task has multiple dependencies. Consider "
                        "reviewing the dependency chain"
                    ),
                    impact=70,
                )
            )

        if task.status == TaskStatus.IN_PROGRESS:
            ratio = self._elapsed_ms(task) / task.time_budget_ms
            if APPROACHING_ESTIMATE_RATIO <= ratio < 1.0:
                recommendations.append(
                    TaskRecommendation(
                        task_id=task_id,
                        recommendation_type="time",
                        priority="medium",
                        message="This task is approaching its estimated duration",
                        impact=60,
                    )
                )

        recommendations.sort(key=lambda r: r.impact, reverse=True)
        return recommendations

    async def provide_guidance(self, owner_id: str, task_id: str) -> str:
        """Return one line of guidance for working on a task."""
        task = await self._repository.get(owner_id, task_id)

        if task.dependencies:
            tasks = await self._repository.fetch_all(owner_id)
            blocking = blocking_dependencies(task, {t.task_id: t for t in tasks})
            if blocking:
                return _dependency_guidance(len(blocking))

        if self._elapsed_ms(task) > OVERRUN_GUIDANCE_RATIO * task.time_budget_ms:
            return GUIDANCE_OVERRUN

        if (
            task.metadata.complexity == HIGH_COMPLEXITY
            and not task.metadata.has_subtasks
        ):
            return GUIDANCE_COMPLEX

        return GUIDANCE_ON_TRACK

    def _elapsed_ms(self, task: Task) -> int:
        """Accumulated time including the open timer session."""
        elapsed = task.total_elapsed_time
        if task.is_timer_running and task.start_time is not None:
            session = self._time.now() - task.start_time
            elapsed += max(0, int(session.total_seconds() * 1000))
        return elapsed
