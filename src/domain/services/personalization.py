"""Personalization score heuristic.

Additive fit score for a task and its owner. Each satisfied condition
contributes independently and the total is capped at 100:

- +30 when every required skill is among the owner's skills
  (no requirements counts as satisfied)
- +20 when the owner's in-progress count is below their workload threshold
- +25 when historical accuracy exceeds 0.9, else +15 when it exceeds 0.8
- +25 when the historical average completion time beats the estimate
"""

from __future__ import annotations

from src.domain.models.owner_profile import OwnerProfile
from src.domain.models.task import Task

SKILL_MATCH_POINTS: int = 30
WORKLOAD_POINTS: int = 20
HIGH_ACCURACY_POINTS: int = 25
GOOD_ACCURACY_POINTS: int = 15
FAST_COMPLETION_POINTS: int = 25

HIGH_ACCURACY_RATE: float = 0.9
GOOD_ACCURACY_RATE: float = 0.8

MAX_SCORE: int = 100


def compute_personalization_score(
    task: Task, profile: OwnerProfile, in_progress_count: int
) -> int:
    """Compute the 0-100 fit score for ``task``.

    Args:
        task: Task being scored.
        profile: Owner skills and workload preference.
        in_progress_count: Owner's tasks currently in progress.

    Returns:
        Score within [0, 100].
    """
    score = 0
    if profile.has_skills(task.metadata.skill_requirements):
        score += SKILL_MATCH_POINTS

    threshold = profile.workload_threshold
    if threshold is not None and in_progress_count < threshold:
        score += WORKLOAD_POINTS

    history = task.metadata.performance_history
    if history.accuracy_rate is not None:
        if history.accuracy_rate > HIGH_ACCURACY_RATE:
            score += HIGH_ACCURACY_POINTS
        elif history.accuracy_rate > GOOD_ACCURACY_RATE:
            score += GOOD_ACCURACY_POINTS

    if (
        history.average_completion_time is not None
        and history.average_completion_time < task.estimated_duration
    ):
        score += FAST_COMPLETION_POINTS

    return max(0, min(MAX_SCORE, score))
