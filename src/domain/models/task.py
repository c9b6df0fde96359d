"""Task domain models.

This module defines the task entity and the value objects embedded in it:
- Task: the central work item (status, timing, progress, relationships)
- Activity: immutable audit record attached to a task
- RecurringTaskConfig: repeat rule cloned into each regenerated task
- TaskMetadata: default-populated metadata (relationships, scoring inputs)
- TaskInput: caller-supplied fields for task creation

All models are frozen. Mutations produce new instances via ``with_changes``
so repositories never hand out shared mutable state.

Persisted shape:
    ``Task.to_dict()`` produces a structured record with the field names used
    by the board layer (``dueDate``, ``estimatedDuration``, ...). Timestamps
    are ISO 8601 strings; ``Task.from_dict()`` is the inverse.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from src.domain.errors.task import TaskValidationError

# One minute of estimated duration expressed in elapsed-time units (ms)
MS_PER_MINUTE: int = 60_000


class TaskStatus(Enum):
    """Status of a task in its lifecycle."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class TaskPriority(Enum):
    """Priority of a task."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Numeric rank used for ordering (high sorts first)."""
        return _PRIORITY_RANKS[self]


_PRIORITY_RANKS = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
}


class ActivityType(Enum):
    """Kinds of audit entries recorded against a task."""

    STATUS_CHANGE = "status_change"
    COMMENT = "comment"
    TIMER_UPDATE = "timer_update"
    DEPENDENCY_UPDATE = "dependency_update"
    TAG_UPDATE = "tag_update"
    PRIORITY_CHANGE = "priority_change"
    COMPLETION = "completion"
    SPLIT = "split"
    COST_APPROVAL = "cost_approval"


class RecurrencePattern(Enum):
    """Known repeat patterns for recurring tasks.

    Stored configs keep the raw pattern string; an unrecognized value is
    treated as daily when computing the next occurrence.
    """

    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def ensure_utc(value: datetime | None) -> datetime | None:
    """Return the instant in UTC; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _normalize_datetimes(instance: Any, *names: str) -> None:
    for name in names:
        object.__setattr__(instance, name, ensure_utc(getattr(instance, name)))


def _parse_dt(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(str(value).replace("Z", "+00:00")))


@dataclass(frozen=True, eq=True)
class Activity:
    """Immutable audit record narrating one state change.

    Created only by the activity logger; never mutated or deleted
    individually (removed only when the owning task is deleted).

    Attributes:
        activity_type: What kind of change this entry narrates.
        timestamp: When the change was recorded (UTC).
        details: Human-readable narration.
    """

    activity_type: ActivityType
    timestamp: datetime
    details: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for persistence."""
        return {
            "type": self.activity_type.value,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Activity:
        """Create from a persisted dictionary."""
        timestamp = _parse_dt(data["timestamp"])
        assert timestamp is not None
        return cls(
            activity_type=ActivityType(data["type"]),
            timestamp=timestamp,
            details=data.get("details", ""),
        )


@dataclass(frozen=True, eq=True)
class RecurringTaskConfig:
    """Repeat rule embedded in a task.

    Lifecycle is bound to the owning task. At regeneration time the config
    is cloned into the successor with ``occurrences_completed`` incremented.

    Attributes:
        is_recurring: Whether the rule is active.
        pattern: Repeat pattern (daily, weekly, biweekly, monthly).
        interval: Positive multiplier applied to the pattern.
        days_of_week: Optional subset of weekdays 0-6 (stored for display).
        next_occurrence: When the next instance becomes due.
        end_date: Optional last date an occurrence may fall on.
        end_after_occurrences: Optional cap on generated occurrences.
        occurrences_completed: Occurrences that have fired so far.
        successor_task_id: Id of the task generated from this occurrence,
            recorded on the source so regeneration is idempotent.
    """

    is_recurring: bool = True
    pattern: str = RecurrencePattern.DAILY.value
    interval: int = 1
    days_of_week: tuple[int, ...] | None = None
    next_occurrence: datetime | None = None
    end_date: datetime | None = None
    end_after_occurrences: int | None = None
    occurrences_completed: int = 0
    successor_task_id: str | None = None

    def __post_init__(self) -> None:
        """Validate the repeat rule."""
        _normalize_datetimes(self, "next_occurrence", "end_date")
        if self.interval < 1:
            raise TaskValidationError(
                f"Recurrence interval must be a positive integer, got {self.interval}"
            )
        if self.days_of_week is not None:
            invalid = [d for d in self.days_of_week if d < 0 or d > 6]
            if invalid:
                raise TaskValidationError(
                    f"days_of_week must be within 0-6, got {invalid}"
                )
        if self.end_after_occurrences is not None and self.end_after_occurrences < 0:
            raise TaskValidationError(
                "end_after_occurrences must be non-negative, "
                f"got {self.end_after_occurrences}"
            )
        if self.occurrences_completed < 0:
            raise TaskValidationError(
                "occurrences_completed must be non-negative, "
                f"got {self.occurrences_completed}"
            )

    def with_changes(self, **changes: Any) -> RecurringTaskConfig:
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for persistence."""
        return {
            "isRecurring": self.is_recurring,
            "pattern": self.pattern,
            "interval": self.interval,
            "daysOfWeek": list(self.days_of_week)
            if self.days_of_week is not None
            else None,
            "nextOccurrence": _iso(self.next_occurrence),
            "endDate": _iso(self.end_date),
            "endAfterOccurrences": self.end_after_occurrences,
            "occurrencesCompleted": self.occurrences_completed,
            "successorTaskId": self.successor_task_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecurringTaskConfig:
        """Create from a persisted dictionary."""
        days = data.get("daysOfWeek")
        return cls(
            is_recurring=bool(data.get("isRecurring", True)),
            pattern=data.get("pattern", RecurrencePattern.DAILY.value),
            interval=int(data.get("interval", 1)),
            days_of_week=tuple(days) if days is not None else None,
            next_occurrence=_parse_dt(data.get("nextOccurrence")),
            end_date=_parse_dt(data.get("endDate")),
            end_after_occurrences=data.get("endAfterOccurrences"),
            occurrences_completed=int(data.get("occurrencesCompleted", 0)),
            successor_task_id=data.get("successorTaskId"),
        )


@dataclass(frozen=True, eq=True)
class PerformanceHistory:
    """Historical performance on tasks of this kind.

    Attributes:
        accuracy_rate: Share of past estimates that held (0.0-1.0).
        average_completion_time: Mean minutes taken to complete.
    """

    accuracy_rate: float | None = None
    average_completion_time: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "accuracyRate": self.accuracy_rate,
            "averageCompletionTime": self.average_completion_time,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PerformanceHistory:
        return cls(
            accuracy_rate=data.get("accuracyRate"),
            average_completion_time=data.get("averageCompletionTime"),
        )


@dataclass(frozen=True)
class TaskMetadata:
    """Default-populated task metadata.

    Missing values carry their meaning here once: no skill requirements
    means the skill match is vacuously satisfied, an empty performance
    history contributes nothing to the score, and so on.

    Attributes:
        parent_task_id: Weak back-reference to the parent (lookup only).
        subtask_ids: Owned child task ids.
        skill_requirements: Skills needed to work on the task.
        performance_history: Historical performance inputs for scoring.
        personalization_score: Last computed fit score (may be stale).
        split_into_tasks: Successor ids when the task was auto-split.
        complexity: Free-form complexity label ("low", "medium", "high").
        category: Category the performance history refers to.
        extra: Any other caller-owned keys, preserved verbatim.
    """

    parent_task_id: str | None = None
    subtask_ids: tuple[str, ...] = ()
    skill_requirements: tuple[str, ...] = ()
    performance_history: PerformanceHistory = field(default_factory=PerformanceHistory)
    personalization_score: int | None = None
    split_into_tasks: tuple[str, ...] = ()
    complexity: str | None = None
    category: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def has_subtasks(self) -> bool:
        """Derived flag: whether this task owns any subtasks."""
        return len(self.subtask_ids) > 0

    def with_changes(self, **changes: Any) -> TaskMetadata:
        """Return a copy with the given fields replaced."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for persistence."""
        data: dict[str, Any] = dict(self.extra)
        data.update(
            {
                "parentTaskId": self.parent_task_id,
                "subtaskIds": list(self.subtask_ids),
                "hasSubtasks": self.has_subtasks,
                "skillRequirements": list(self.skill_requirements),
                "performanceHistory": self.performance_history.to_dict(),
                "personalizationScore": self.personalization_score,
                "splitIntoTasks": list(self.split_into_tasks),
                "complexity": self.complexity,
                "category": self.category,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TaskMetadata:
        """Create from a persisted dictionary, tolerating missing keys."""
        if not data:
            return cls()
        known = {
            "parentTaskId",
            "subtaskIds",
            "hasSubtasks",
            "skillRequirements",
            "performanceHistory",
            "personalizationScore",
            "splitIntoTasks",
            "complexity",
            "category",
        }
        return cls(
            parent_task_id=data.get("parentTaskId"),
            subtask_ids=tuple(data.get("subtaskIds") or ()),
            skill_requirements=tuple(data.get("skillRequirements") or ()),
            performance_history=PerformanceHistory.from_dict(
                data.get("performanceHistory") or {}
            ),
            personalization_score=data.get("personalizationScore"),
            split_into_tasks=tuple(data.get("splitIntoTasks") or ()),
            complexity=data.get("complexity"),
            category=data.get("category"),
            extra={k: v for k, v in data.items() if k not in known},
        )


def normalize_tags(tags: Any) -> tuple[str, ...]:
    """Deduplicate tags while keeping first-seen order."""
    seen: dict[str, None] = {}
    for tag in tags or ():
        seen.setdefault(str(tag), None)
    return tuple(seen)


@dataclass(frozen=True)
class TaskInput:
    """Caller-supplied fields for creating a task.

    System-assigned fields (id, timestamps, timer and elapsed fields,
    completion percentage) are absent; the repository initializes them.
    """

    title: str
    estimated_duration: int
    description: str = ""
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority | None = None
    tags: tuple[str, ...] = ()
    due_date: datetime | None = None
    actual_duration: int = 0
    dependencies: tuple[str, ...] = ()
    metadata: TaskMetadata = field(default_factory=TaskMetadata)
    recurring_config: RecurringTaskConfig | None = None
    assigned_to: str | None = None

    def __post_init__(self) -> None:
        _normalize_datetimes(self, "due_date")

    def validate(self) -> None:
        """Validate creation input.

        Raises:
            TaskValidationError: If the title is blank or the estimated
                duration is not a positive number of minutes.
        """
        if not self.title or not self.title.strip():
            raise TaskValidationError("Task title must not be empty")
        if self.estimated_duration <= 0:
            raise TaskValidationError(
                "estimated_duration must be a positive number of minutes, "
                f"got {self.estimated_duration}"
            )
        if self.actual_duration < 0:
            raise TaskValidationError(
                f"actual_duration must be non-negative, got {self.actual_duration}"
            )


@dataclass(frozen=True)
class Task:
    """A unit of trackable work.

    Invariants:
    - completion_percentage is within [0, 100] and is 100 when completed
    - total_elapsed_time only increases
    - updated_at >= created_at
    - subtask_ids / parent_task_id are inverse links (set at creation time)

    Attributes:
        task_id: Opaque unique id assigned at creation.
        title: Short name shown on the board.
        description: Longer free-form description.
        status: Lifecycle status.
        estimated_duration: Time budget in minutes (> 0).
        created_at: Creation instant.
        updated_at: Last mutation instant.
        priority: Optional priority.
        tags: Tags in insertion order, no duplicates.
        due_date: Optional due instant.
        actual_duration: Minutes actually spent (caller-maintained).
        total_elapsed_time: Milliseconds accumulated across timer sessions.
        is_timer_running: Whether a timer session is open.
        start_time: When the open timer session started.
        completion_percentage: Progress 0-100.
        dependencies: Ids that must be completed before work may start.
        metadata: Relationship and scoring metadata.
        recurring_config: Optional repeat rule.
        activities: Append-only audit trail.
        last_activity: Most recent activity, denormalized for display.
        completed_at: When the task was last completed.
        assigned_to: Optional assignee user id.
    """

    task_id: str
    title: str
    description: str
    status: TaskStatus
    estimated_duration: int
    created_at: datetime
    updated_at: datetime
    priority: TaskPriority | None = None
    tags: tuple[str, ...] = ()
    due_date: datetime | None = None
    actual_duration: int = 0
    total_elapsed_time: int = 0
    is_timer_running: bool = False
    start_time: datetime | None = None
    completion_percentage: float = 0
    dependencies: tuple[str, ...] = ()
    metadata: TaskMetadata = field(default_factory=TaskMetadata)
    recurring_config: RecurringTaskConfig | None = None
    activities: tuple[Activity, ...] = ()
    last_activity: Activity | None = None
    completed_at: datetime | None = None
    assigned_to: str | None = None

    def __post_init__(self) -> None:
        _normalize_datetimes(
            self, "created_at", "updated_at", "due_date", "start_time", "completed_at"
        )

    @classmethod
    def from_input(cls, task_id: str, task_input: TaskInput, now: datetime) -> Task:
        """Build a new task from creation input with system fields initialized.

        Raises:
            TaskValidationError: If the input fails validation.
        """
        task_input.validate()
        completed = task_input.status == TaskStatus.COMPLETED
        return cls(
            task_id=task_id,
            title=task_input.title,
            description=task_input.description,
            status=task_input.status,
            estimated_duration=task_input.estimated_duration,
            created_at=now,
            updated_at=now,
            priority=task_input.priority,
            tags=normalize_tags(task_input.tags),
            due_date=task_input.due_date,
            actual_duration=task_input.actual_duration,
            total_elapsed_time=0,
            is_timer_running=False,
            start_time=None,
            completion_percentage=100 if completed else 0,
            dependencies=tuple(task_input.dependencies),
            metadata=task_input.metadata,
            recurring_config=task_input.recurring_config,
            assigned_to=task_input.assigned_to,
            completed_at=now if completed else None,
        )

    @property
    def is_completed(self) -> bool:
        """Whether the task reached its terminal status."""
        return self.status == TaskStatus.COMPLETED

    @property
    def time_budget_ms(self) -> int:
        """Estimated duration expressed in elapsed-time units."""
        return self.estimated_duration * MS_PER_MINUTE

    def with_changes(self, **changes: Any) -> Task:
        """Return a copy with the given fields replaced.

        Raises:
            TaskValidationError: If a field name is unknown.
        """
        unknown = set(changes) - TASK_FIELD_NAMES
        if unknown:
            raise TaskValidationError(f"Unknown task fields: {sorted(unknown)}")
        if "tags" in changes:
            changes["tags"] = normalize_tags(changes["tags"])
        if "dependencies" in changes:
            changes["dependencies"] = tuple(changes["dependencies"])
        return dataclasses.replace(self, **changes)

    def with_activity(self, activity: Activity) -> Task:
        """Return a copy with the activity appended and marked as latest."""
        return dataclasses.replace(
            self,
            activities=self.activities + (activity,),
            last_activity=activity,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the persisted record shape."""
        return {
            "id": self.task_id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "priority": self.priority.value if self.priority else None,
            "tags": list(self.tags),
            "dueDate": _iso(self.due_date),
            "estimatedDuration": self.estimated_duration,
            "actualDuration": self.actual_duration,
            "totalElapsedTime": self.total_elapsed_time,
            "isTimerRunning": self.is_timer_running,
            "startTime": _iso(self.start_time),
            "completionPercentage": self.completion_percentage,
            "dependencies": list(self.dependencies),
            "metadata": self.metadata.to_dict(),
            "recurringConfig": self.recurring_config.to_dict()
            if self.recurring_config
            else None,
            "activities": [a.to_dict() for a in self.activities],
            "lastActivity": self.last_activity.to_dict()
            if self.last_activity
            else None,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "completedAt": _iso(self.completed_at),
            "assignedTo": self.assigned_to,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """Create from a persisted record."""
        created_at = _parse_dt(data["createdAt"])
        updated_at = _parse_dt(data.get("updatedAt")) or created_at
        assert created_at is not None and updated_at is not None
        priority = data.get("priority")
        recurring = data.get("recurringConfig")
        last_activity = data.get("lastActivity")
        return cls(
            task_id=data["id"],
            title=data["title"],
            description=data.get("description", ""),
            status=TaskStatus(data.get("status", TaskStatus.TODO.value)),
            estimated_duration=int(data["estimatedDuration"]),
            created_at=created_at,
            updated_at=updated_at,
            priority=TaskPriority(priority) if priority else None,
            tags=normalize_tags(data.get("tags")),
            due_date=_parse_dt(data.get("dueDate")),
            actual_duration=int(data.get("actualDuration") or 0),
            total_elapsed_time=int(data.get("totalElapsedTime") or 0),
            is_timer_running=bool(data.get("isTimerRunning", False)),
            start_time=_parse_dt(data.get("startTime")),
            completion_percentage=data.get("completionPercentage") or 0,
            dependencies=tuple(data.get("dependencies") or ()),
            metadata=TaskMetadata.from_dict(data.get("metadata")),
            recurring_config=RecurringTaskConfig.from_dict(recurring)
            if recurring
            else None,
            activities=tuple(
                Activity.from_dict(a) for a in data.get("activities") or ()
            ),
            last_activity=Activity.from_dict(last_activity) if last_activity else None,
            completed_at=_parse_dt(data.get("completedAt")),
            assigned_to=data.get("assignedTo"),
        )


TASK_FIELD_NAMES: frozenset[str] = frozenset(f.name for f in dataclasses.fields(Task))

# Fields the repository owns; partial updates may not touch them
SYSTEM_MANAGED_FIELDS: frozenset[str] = frozenset(
    {"task_id", "created_at", "updated_at", "activities", "last_activity"}
)

# Timer and progress fields; changed only through the timer and progress operations
LIFECYCLE_MANAGED_FIELDS: frozenset[str] = frozenset(
    {
        "total_elapsed_time",
        "is_timer_running",
        "start_time",
        "completion_percentage",
        "completed_at",
    }
)
