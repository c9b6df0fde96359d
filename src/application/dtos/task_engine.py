"""Task engine DTOs for the application layer.

Result objects returned by the engine services. API routes map these to
Pydantic response models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from src.domain.models.task import Activity, Task


@dataclass(frozen=True)
class BatchTaskFailure:
    """One task a batch operation could not apply.

    Attributes:
        task_id: Task that failed.
        error_type: Class name of the engine error raised.
        message: Error message.
    """

    task_id: str
    error_type: str
    message: str


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a best-effort batch operation.

    Attributes:
        operation: Batch operation name ("status", "priority", "tags", "delete").
        succeeded: Ids the operation was applied to, in request order.
        failed: Per-task failures, in request order.
    """

    operation: str
    succeeded: tuple[str, ...] = ()
    failed: tuple[BatchTaskFailure, ...] = ()

    @property
    def all_succeeded(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class RecurrencePassResult:
    """Outcome of one recurrence pass over a fetched task list.

    Attributes:
        tasks: The input tasks with updated sources and generated
            successors appended.
        generated_ids: Ids of the successors created in this pass.
        source_ids: Ids of the sources that fired.
    """

    tasks: list[Task] = field(default_factory=list)
    generated_ids: tuple[str, ...] = ()
    source_ids: tuple[str, ...] = ()

    @property
    def generated_count(self) -> int:
        return len(self.generated_ids)


@dataclass(frozen=True)
class SplitResult:
    """Outcome of auto-splitting a task.

    Attributes:
        original_task_id: The task that was force-completed.
        successor_ids: Ids of the two parts, Part 1 first.
        durations: Estimated durations of the two parts in minutes.
    """

    original_task_id: str
    successor_ids: tuple[str, str]
    durations: tuple[int, int]


@dataclass(frozen=True)
class TimerUpdateResult:
    """Outcome of a timer start or stop.

    Attributes:
        task_id: Task whose timer changed.
        changed: False when the request was a no-op (already running or
            already stopped).
        is_timer_running: Timer state after the request.
        total_elapsed_time: Accumulated milliseconds after the request.
        progress_ratio: Elapsed share of the budget, clamped to [0, 1].
        budget_level: Level newly crossed by this update, if any.
    """

    task_id: str
    changed: bool
    is_timer_running: bool
    total_elapsed_time: int
    progress_ratio: float
    budget_level: str | None = None


RecommendationType = Literal["priority", "time", "dependency", "resource"]
RecommendationPriority = Literal["high", "medium", "low"]


@dataclass(frozen=True)
class TaskRecommendation:
    """A suggestion produced by task analysis.

    Attributes:
        task_id: Task the suggestion is about.
        recommendation_type: Area of the suggestion.
        priority: How urgently to act.
        message: Human-readable suggestion.
        impact: Estimated impact score 0-100.
    """

    task_id: str
    recommendation_type: RecommendationType
    priority: RecommendationPriority
    message: str
    impact: int


@dataclass(frozen=True)
class ScoredTask:
    """A task with its freshly computed personalization score."""

    task: Task
    score: int


@dataclass(frozen=True)
class TaskActivityEntry:
    """An activity in a cross-task feed, tagged with its task."""

    task_id: str
    task_title: str
    activity: Activity
