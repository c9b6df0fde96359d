"""Time budget rules.

A task's time budget is its estimated duration in milliseconds. Elapsed time
is compared against the budget to derive display progress, split eligibility
and advisory levels.

Ratios are compared with ``Decimal`` so that configured thresholds such as
0.9 land exactly on whole-millisecond boundaries.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from src.domain.errors.task import TaskValidationError
from src.domain.models.task import MS_PER_MINUTE, Task, TaskStatus

DEFAULT_SPLIT_THRESHOLD_RATIO: float = 0.9
DEFAULT_APPROACHING_RATIO: float = 0.8
DEFAULT_EXCEEDED_RATIO: float = 1.0

# Shortest estimate that halves into two non-empty parts
MIN_SPLIT_DURATION: int = 2


class BudgetLevel(Enum):
    """Where elapsed time sits relative to the budget."""

    WITHIN = "within"
    APPROACHING = "approaching"
    EXCEEDED = "exceeded"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]


_LEVEL_RANKS = {
    BudgetLevel.WITHIN: 0,
    BudgetLevel.APPROACHING: 1,
    BudgetLevel.EXCEEDED: 2,
}


def budget_ms(estimated_duration: int) -> int:
    """Convert an estimate in minutes to milliseconds."""
    return estimated_duration * MS_PER_MINUTE


def _at_or_above(elapsed_ms: int, estimated_duration: int, ratio: float) -> bool:
    return Decimal(elapsed_ms) >= Decimal(str(ratio)) * budget_ms(estimated_duration)


def progress_ratio(elapsed_ms: int, estimated_duration: int) -> float:
    """Elapsed share of the budget, clamped to [0, 1] for display."""
    if estimated_duration <= 0:
        return 1.0
    ratio = elapsed_ms / budget_ms(estimated_duration)
    return max(0.0, min(1.0, ratio))


def is_split_eligible(
    task: Task, threshold_ratio: float = DEFAULT_SPLIT_THRESHOLD_RATIO
) -> bool:
    """Whether an open task consumed at least ``threshold_ratio`` of its budget.

    Estimates shorter than ``MIN_SPLIT_DURATION`` are never eligible.
    """
    if task.status == TaskStatus.COMPLETED:
        return False
    if task.estimated_duration < MIN_SPLIT_DURATION:
        return False
    return _at_or_above(task.total_elapsed_time, task.estimated_duration, threshold_ratio)


def split_durations(estimated_duration: int) -> tuple[int, int]:
    """Halve an estimate: first part rounds up, second part rounds down.

    Raises:
        TaskValidationError: If the estimate is too short to yield two parts.
    """
    if estimated_duration < MIN_SPLIT_DURATION:
        raise TaskValidationError(
            f"An estimate of {estimated_duration} minute(s) is too short to split"
        )
    return (estimated_duration + 1) // 2, estimated_duration // 2


def budget_level(
    elapsed_ms: int,
    estimated_duration: int,
    approaching_ratio: float = DEFAULT_APPROACHING_RATIO,
    exceeded_ratio: float = DEFAULT_EXCEEDED_RATIO,
) -> BudgetLevel:
    """Classify elapsed time against the budget."""
    if _at_or_above(elapsed_ms, estimated_duration, exceeded_ratio):
        return BudgetLevel.EXCEEDED
    if _at_or_above(elapsed_ms, estimated_duration, approaching_ratio):
        return BudgetLevel.APPROACHING
    return BudgetLevel.WITHIN


def crossed_level(
    before_ms: int,
    after_ms: int,
    estimated_duration: int,
    approaching_ratio: float = DEFAULT_APPROACHING_RATIO,
    exceeded_ratio: float = DEFAULT_EXCEEDED_RATIO,
) -> BudgetLevel | None:
    """Return the level newly reached between two elapsed readings, if any.

    Only upward crossings count; staying inside a level or moving down
    returns None.
    """
    before = budget_level(before_ms, estimated_duration, approaching_ratio, exceeded_ratio)
    after = budget_level(after_ms, estimated_duration, approaching_ratio, exceeded_ratio)
    if after.rank > before.rank:
        return after
    return None
