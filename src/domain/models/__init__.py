"""Domain models for the task lifecycle engine.

Contains value objects and entities that represent the engine's core
concepts. These models are immutable and contain no infrastructure
dependencies.
"""

from src.domain.models.advisory import Advisory, AdvisoryLevel, AdvisoryType
from src.domain.models.comment import TaskComment
from src.domain.models.owner_profile import DEFAULT_DISPLAY_NAME, OwnerProfile
from src.domain.models.task import (
    MS_PER_MINUTE,
    Activity,
    ActivityType,
    PerformanceHistory,
    RecurrencePattern,
    RecurringTaskConfig,
    Task,
    TaskInput,
    TaskMetadata,
    TaskPriority,
    TaskStatus,
)

__all__: list[str] = [
    "Activity",
    "ActivityType",
    "Advisory",
    "AdvisoryLevel",
    "AdvisoryType",
    "DEFAULT_DISPLAY_NAME",
    "MS_PER_MINUTE",
    "OwnerProfile",
    "PerformanceHistory",
    "RecurrencePattern",
    "RecurringTaskConfig",
    "Task",
    "TaskComment",
    "TaskInput",
    "TaskMetadata",
    "TaskPriority",
    "TaskStatus",
]
