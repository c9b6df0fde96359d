"""Task API request/response models.

Pydantic models for the task lifecycle endpoints. Requests carry only
structural validation; business rules (blank titles, non-positive
durations, progress policy) are enforced by the engine and surface as
400 problem details.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.application.dtos.task_engine import (
    BatchResult,
    ScoredTask,
    SplitResult,
    TaskActivityEntry,
    TaskRecommendation,
    TimerUpdateResult,
)
from src.domain.models.comment import TaskComment
from src.domain.models.task import (
    Activity,
    PerformanceHistory,
    RecurringTaskConfig,
    Task,
    TaskInput,
    TaskMetadata,
    TaskPriority,
    TaskStatus,
)


class TaskStatusEnum(str, Enum):
    """Task status as exposed over HTTP."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"

    def to_domain(self) -> TaskStatus:
        return TaskStatus(self.value)


class TaskPriorityEnum(str, Enum):
    """Task priority as exposed over HTTP."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    def to_domain(self) -> TaskPriority:
        return TaskPriority(self.value)


# =============================================================================
# Requests
# =============================================================================


class RecurringConfigRequest(BaseModel):
    """Repeat rule supplied when creating or editing a task."""

    is_recurring: bool = True
    pattern: str = Field(default="daily", description="daily, weekly, biweekly or monthly")
    interval: int = Field(default=1, ge=1)
    days_of_week: list[int] | None = None
    next_occurrence: datetime | None = None
    end_date: datetime | None = None
    end_after_occurrences: int | None = Field(default=None, ge=0)

    def to_domain(self) -> RecurringTaskConfig:
        return RecurringTaskConfig(
            is_recurring=self.is_recurring,
            pattern=self.pattern,
            interval=self.interval,
            days_of_week=tuple(self.days_of_week)
            if self.days_of_week is not None
            else None,
            next_occurrence=self.next_occurrence,
            end_date=self.end_date,
            end_after_occurrences=self.end_after_occurrences,
        )


class PerformanceHistoryModel(BaseModel):
    accuracy_rate: float | None = Field(default=None, ge=0.0, le=1.0)
    average_completion_time: float | None = Field(default=None, ge=0.0)

    def to_domain(self) -> PerformanceHistory:
        return PerformanceHistory(
            accuracy_rate=self.accuracy_rate,
            average_completion_time=self.average_completion_time,
        )


class CreateTaskRequest(BaseModel):
    """Request to create a task.

    Attributes:
        title: Short name shown on the board.
        estimated_duration: Time budget in minutes.
        metadata: Optional metadata in persisted (camelCase) shape.
        recurring_config: Optional repeat rule.
    """

    title: str
    estimated_duration: int
    description: str = ""
    status: TaskStatusEnum = TaskStatusEnum.TODO
    priority: TaskPriorityEnum | None = None
    tags: list[str] = Field(default_factory=list)
    due_date: datetime | None = None
    actual_duration: int = 0
    dependencies: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)
    recurring_config: RecurringConfigRequest | None = None
    assigned_to: str | None = None

    def to_task_input(self) -> TaskInput:
        return TaskInput(
            title=self.title,
            estimated_duration=self.estimated_duration,
            description=self.description,
            status=self.status.to_domain(),
            priority=self.priority.to_domain() if self.priority else None,
            tags=tuple(self.tags),
            due_date=self.due_date,
            actual_duration=self.actual_duration,
            dependencies=tuple(self.dependencies),
            metadata=TaskMetadata.from_dict(self.metadata),
            recurring_config=self.recurring_config.to_domain()
            if self.recurring_config
            else None,
            assigned_to=self.assigned_to,
        )


class UpdateTaskRequest(BaseModel):
    """Partial update; only fields present in the body are applied.

    System-managed fields (id, timestamps, activities) are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    status: TaskStatusEnum | None = None
    priority: TaskPriorityEnum | None = None
    tags: list[str] | None = None
    due_date: datetime | None = None
    estimated_duration: int | None = None
    actual_duration: int | None = None
    dependencies: list[str] | None = None
    recurring_config: RecurringConfigRequest | None = None
    assigned_to: str | None = None

    def to_changes(self) -> dict[str, Any]:
        """Convert the fields set on the request into engine changes."""
        changes: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if name == "status":
                value = value.value if value is not None else None
            elif name == "priority":
                value = value.to_domain() if value is not None else None
            elif name in ("tags", "dependencies"):
                value = tuple(value or ())
            elif name == "recurring_config":
                value = value.to_domain() if value is not None else None
            changes[name] = value
        if changes.get("status", "") is None:
            del changes["status"]
        return changes


class UpdateMetadataRequest(BaseModel):
    """Metadata merge; ``extra`` keys are preserved verbatim."""

    skill_requirements: list[str] | None = None
    complexity: str | None = None
    category: str | None = None
    performance_history: PerformanceHistoryModel | None = None
    extra: dict[str, Any] = Field(default_factory=dict)

    def to_updates(self) -> dict[str, Any]:
        updates: dict[str, Any] = dict(self.extra)
        if self.skill_requirements is not None:
            updates["skill_requirements"] = tuple(self.skill_requirements)
        if self.complexity is not None:
            updates["complexity"] = self.complexity
        if self.category is not None:
            updates["category"] = self.category
        if self.performance_history is not None:
            updates["performance_history"] = self.performance_history.to_domain()
        return updates


class StatusUpdateRequest(BaseModel):
    status: TaskStatusEnum
    enforce_dependencies: bool = False


class ProgressUpdateRequest(BaseModel):
    percentage: float


class TimerUpdateRequest(BaseModel):
    """Start (``is_running=true``) or stop a task timer.

    ``elapsed_delta_ms`` is only read on stop; when omitted the session
    length is derived from the recorded start time.
    """

    is_running: bool
    elapsed_delta_ms: int | None = None


class BatchStatusRequest(BaseModel):
    task_ids: list[str] = Field(..., min_length=1)
    status: TaskStatusEnum


class BatchPriorityRequest(BaseModel):
    task_ids: list[str] = Field(..., min_length=1)
    priority: TaskPriorityEnum


class BatchTagsRequest(BaseModel):
    task_ids: list[str] = Field(..., min_length=1)
    tags: list[str] = Field(..., min_length=1)


class BatchDeleteRequest(BaseModel):
    task_ids: list[str] = Field(..., min_length=1)


class SubtaskRequest(BaseModel):
    title: str
    estimated_duration: int
    description: str = ""
    priority: TaskPriorityEnum | None = None
    tags: list[str] = Field(default_factory=list)

    def to_task_input(self) -> TaskInput:
        return TaskInput(
            title=self.title,
            estimated_duration=self.estimated_duration,
            description=self.description,
            priority=self.priority.to_domain() if self.priority else None,
            tags=tuple(self.tags),
        )


class BreakdownRequest(BaseModel):
    subtasks: list[SubtaskRequest] = Field(..., min_length=1)


class CommentRequest(BaseModel):
    content: str
    attachments: list[str] = Field(default_factory=list)
    parent_comment_id: str | None = None


# =============================================================================
# Responses
# =============================================================================


class ActivityResponse(BaseModel):
    type: str
    timestamp: datetime
    details: str

    @classmethod
    def from_activity(cls, activity: Activity) -> "ActivityResponse":
        return cls(
            type=activity.activity_type.value,
            timestamp=activity.timestamp,
            details=activity.details,
        )


class TaskResponse(BaseModel):
    """Full task representation.

    ``metadata`` and ``recurring_config`` use the persisted (camelCase)
    shape so callers can round-trip them into create requests.
    """

    id: str
    title: str
    description: str
    status: str
    priority: str | None = None
    tags: list[str]
    due_date: datetime | None = None
    estimated_duration: int
    actual_duration: int
    total_elapsed_time: int
    is_timer_running: bool
    start_time: datetime | None = None
    completion_percentage: float
    dependencies: list[str]
    metadata: dict[str, Any]
    recurring_config: dict[str, Any] | None = None
    activities: list[ActivityResponse]
    last_activity: ActivityResponse | None = None
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None
    assigned_to: str | None = None

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(
            id=task.task_id,
            title=task.title,
            description=task.description,
            status=task.status.value,
            priority=task.priority.value if task.priority else None,
            tags=list(task.tags),
            due_date=task.due_date,
            estimated_duration=task.estimated_duration,
            actual_duration=task.actual_duration,
            total_elapsed_time=task.total_elapsed_time,
            is_timer_running=task.is_timer_running,
            start_time=task.start_time,
            completion_percentage=task.completion_percentage,
            dependencies=list(task.dependencies),
            metadata=task.metadata.to_dict(),
            recurring_config=task.recurring_config.to_dict()
            if task.recurring_config
            else None,
            activities=[ActivityResponse.from_activity(a) for a in task.activities],
            last_activity=ActivityResponse.from_activity(task.last_activity)
            if task.last_activity
            else None,
            created_at=task.created_at,
            updated_at=task.updated_at,
            completed_at=task.completed_at,
            assigned_to=task.assigned_to,
        )


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]
    total: int


class CreateTaskResponse(BaseModel):
    task_id: str


class ProgressResponse(BaseModel):
    task_id: str
    completion_percentage: float


class DependencyCheckResponse(BaseModel):
    task_id: str
    dependencies_satisfied: bool


class TimerUpdateResponse(BaseModel):
    task_id: str
    changed: bool
    is_timer_running: bool
    total_elapsed_time: int
    progress_ratio: float
    budget_level: str | None = None

    @classmethod
    def from_result(cls, result: TimerUpdateResult) -> "TimerUpdateResponse":
        return cls(
            task_id=result.task_id,
            changed=result.changed,
            is_timer_running=result.is_timer_running,
            total_elapsed_time=result.total_elapsed_time,
            progress_ratio=result.progress_ratio,
            budget_level=result.budget_level,
        )


class SplitCheckResponse(BaseModel):
    task_id: str
    split_needed: bool


class SplitResponse(BaseModel):
    original_task_id: str
    successor_ids: list[str]
    durations: list[int]

    @classmethod
    def from_result(cls, result: SplitResult) -> "SplitResponse":
        return cls(
            original_task_id=result.original_task_id,
            successor_ids=list(result.successor_ids),
            durations=list(result.durations),
        )


class ScoreResponse(BaseModel):
    task_id: str
    personalization_score: int


class ScoredTaskResponse(BaseModel):
    task: TaskResponse
    score: int

    @classmethod
    def from_scored(cls, scored: ScoredTask) -> "ScoredTaskResponse":
        return cls(task=TaskResponse.from_task(scored.task), score=scored.score)


class RecommendedTasksResponse(BaseModel):
    items: list[ScoredTaskResponse]


class BatchFailureResponse(BaseModel):
    task_id: str
    error_type: str
    message: str


class BatchResultResponse(BaseModel):
    operation: str
    succeeded: list[str]
    failed: list[BatchFailureResponse]

    @classmethod
    def from_result(cls, result: BatchResult) -> "BatchResultResponse":
        return cls(
            operation=result.operation,
            succeeded=list(result.succeeded),
            failed=[
                BatchFailureResponse(
                    task_id=f.task_id, error_type=f.error_type, message=f.message
                )
                for f in result.failed
            ],
        )


class HistoryResponse(BaseModel):
    task_id: str
    activities: list[ActivityResponse]


class RecentActivityEntryResponse(BaseModel):
    task_id: str
    task_title: str
    activity: ActivityResponse

    @classmethod
    def from_entry(cls, entry: TaskActivityEntry) -> "RecentActivityEntryResponse":
        return cls(
            task_id=entry.task_id,
            task_title=entry.task_title,
            activity=ActivityResponse.from_activity(entry.activity),
        )


class RecentActivityResponse(BaseModel):
    entries: list[RecentActivityEntryResponse]


class BreakdownResponse(BaseModel):
    parent_task_id: str
    subtask_ids: list[str]


class RecommendationResponse(BaseModel):
    task_id: str
    type: str
    priority: str
    message: str
    impact: int

    @classmethod
    def from_recommendation(
        cls, recommendation: TaskRecommendation
    ) -> "RecommendationResponse":
        return cls(
            task_id=recommendation.task_id,
            type=recommendation.recommendation_type,
            priority=recommendation.priority,
            message=recommendation.message,
            impact=recommendation.impact,
        )


class AnalysisResponse(BaseModel):
    task_id: str
    recommendations: list[RecommendationResponse]


class GuidanceResponse(BaseModel):
    task_id: str
    guidance: str


class CommentResponse(BaseModel):
    comment_id: str
    task_id: str
    author_id: str
    content: str
    created_at: datetime
    parent_comment_id: str | None = None
    attachments: list[str]
    edited_at: datetime | None = None

    @classmethod
    def from_comment(cls, comment: TaskComment) -> "CommentResponse":
        return cls(
            comment_id=comment.comment_id,
            task_id=comment.task_id,
            author_id=comment.author_id,
            content=comment.content,
            created_at=comment.created_at,
            parent_comment_id=comment.parent_comment_id,
            attachments=list(comment.attachments),
            edited_at=comment.edited_at,
        )


class CommentListResponse(BaseModel):
    comments: list[CommentResponse]


class TaskErrorResponse(BaseModel):
    """RFC 7807 problem details."""

    type: str
    title: str
    status: int
    detail: str
    instance: str
