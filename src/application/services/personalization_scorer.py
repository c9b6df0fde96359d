"""Personalization scorer service.

Computes the 0-100 fit score of a task for its owner and ranks open tasks
into a recommendation list. Scores written back to task metadata are a
derived-field refresh: callers must tolerate stale values, and the
write-back appends no activity.
"""

from __future__ import annotations

import structlog

from src.application.dtos.task_engine import ScoredTask
from src.application.ports.identity_provider import IdentityProviderProtocol
from src.application.ports.task_repository import TaskRepositoryProtocol
from src.config.task_engine_config import DEFAULT_TASK_ENGINE_CONFIG, TaskEngineConfig
from src.domain.errors.task import TaskNotFoundError
from src.domain.models.owner_profile import OwnerProfile
from src.domain.models.task import Task, TaskStatus
from src.domain.services.personalization import compute_personalization_score

log = structlog.get_logger()


def _in_progress_count(tasks: list[Task]) -> int:
    return sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS)


class PersonalizationScorer:
    """Scores tasks against their owner's skills, workload and history."""

    def __init__(
        self,
        repository: TaskRepositoryProtocol,
        identity_provider: IdentityProviderProtocol,
        config: TaskEngineConfig = DEFAULT_TASK_ENGINE_CONFIG,
    ) -> None:
        self._repository = repository
        self._identity = identity_provider
        self._config = config

    async def score(
        self, owner_id: str, task_id: str, write_back: bool = True
    ) -> int:
        """Compute a task's score and optionally store it in its metadata.

        Args:
            owner_id: Owner of the task.
            task_id: Task to score.
            write_back: Store the score when it differs from the stored one.

        Returns:
            Score within [0, 100].

        Raises:
            TaskNotFoundError: If the task does not exist.
        """
        tasks = await self._repository.fetch_all(owner_id)
        task = next((t for t in tasks if t.task_id == task_id), None)
        if task is None:
            raise TaskNotFoundError(owner_id, task_id)

        profile = await self._identity.get_profile(owner_id)
        value = compute_personalization_score(task, profile, _in_progress_count(tasks))

        if write_back and task.metadata.personalization_score != value:
            await self._repository.update(
                owner_id,
                task_id,
                {"metadata": task.metadata.with_changes(personalization_score=value)},
            )
            log.debug(
                "personalization_score_refreshed",
                owner_id=owner_id,
                task_id=task_id,
                score=value,
            )
        return value

    async def get_recommended_tasks(
        self, owner_id: str, limit: int | None = None
    ) -> list[ScoredTask]:
        """Rank the owner's open tasks by fit.

        Completed tasks are excluded. Ties on score are broken by priority
        (high first); tasks without a priority sort last. Scores are computed
        fresh and not written back.
        """
        tasks = await self._repository.fetch_all(owner_id)
        profile = await self._identity.get_profile(owner_id)
        return self.rank(tasks, profile, limit)

    def rank(
        self, tasks: list[Task], profile: OwnerProfile, limit: int | None = None
    ) -> list[ScoredTask]:
        in_progress = _in_progress_count(tasks)
        scored = [
            ScoredTask(
                task=t, score=compute_personalization_score(t, profile, in_progress)
            )
            for t in tasks
            if t.status != TaskStatus.COMPLETED
        ]
        scored.sort(
            key=lambda s: (s.score, s.task.priority.rank if s.task.priority else 0),
            reverse=True,
        )
        size = limit if limit is not None else self._config.recommended_tasks_limit
        return scored[: max(size, 0)]
