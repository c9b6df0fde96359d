"""Application DTOs (Data Transfer Objects).

These DTOs carry service results across layer boundaries. They are
distinct from domain models (the task entity and its value objects) and
from API models (Pydantic models for serialization).
"""

from src.application.dtos.task_engine import (
    BatchResult,
    BatchTaskFailure,
    RecurrencePassResult,
    ScoredTask,
    SplitResult,
    TaskActivityEntry,
    TaskRecommendation,
    TimerUpdateResult,
)

__all__: list[str] = [
    "BatchResult",
    "BatchTaskFailure",
    "RecurrencePassResult",
    "ScoredTask",
    "SplitResult",
    "TaskActivityEntry",
    "TaskRecommendation",
    "TimerUpdateResult",
]
