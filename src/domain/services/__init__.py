"""Domain services for the task lifecycle engine.

Domain services hold the rules that don't naturally belong to a single
entity. They are pure functions over domain models and must NOT depend on
infrastructure or the application layer.

Available services:
- dependency_gate: whether a task's prerequisites are completed
- recurrence: next-occurrence arithmetic and end conditions
- time_budget: progress ratio, split eligibility, advisory levels
- personalization: additive 0-100 fit score
- narration: activity details text
"""

from src.domain.services.dependency_gate import (
    blocking_dependencies,
    dependencies_satisfied,
)
from src.domain.services.personalization import compute_personalization_score
from src.domain.services.recurrence import (
    add_months,
    add_pattern_interval,
    is_regeneration_due,
    should_create_occurrence,
)
from src.domain.services.time_budget import (
    BudgetLevel,
    budget_level,
    crossed_level,
    is_split_eligible,
    progress_ratio,
    split_durations,
)

__all__ = [
    "BudgetLevel",
    "add_months",
    "add_pattern_interval",
    "blocking_dependencies",
    "budget_level",
    "compute_personalization_score",
    "crossed_level",
    "dependencies_satisfied",
    "is_regeneration_due",
    "is_split_eligible",
    "progress_ratio",
    "should_create_occurrence",
    "split_durations",
]
