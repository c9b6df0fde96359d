"""Task progress monitor.

Subscribe-on-change watcher over an owner's task collection. Every snapshot
is compared with the previous one; tasks whose elapsed time changed are
re-evaluated against the split threshold and split when they crossed it,
otherwise their personalization score is refreshed.

Repeated snapshots above the threshold are harmless: a split task is
completed, and completed tasks are never eligible again.
"""

from __future__ import annotations

import asyncio

import structlog

from src.application.dtos.task_engine import SplitResult
from src.application.ports.task_repository import (
    TaskRepositoryProtocol,
    TaskSubscriptionProtocol,
)
from src.application.services.auto_split_engine import AutoSplitEngine
from src.application.services.personalization_scorer import PersonalizationScorer
from src.domain.exceptions import TaskEngineError
from src.domain.models.task import Task, TaskStatus

log = structlog.get_logger()


class TaskProgressMonitor:
    """Watches task collections and reacts to elapsed-time changes."""

    def __init__(
        self,
        repository: TaskRepositoryProtocol,
        auto_split_engine: AutoSplitEngine,
        scorer: PersonalizationScorer | None = None,
    ) -> None:
        self._repository = repository
        self._splitter = auto_split_engine
        self._scorer = scorer
        self._last_elapsed: dict[str, dict[str, int]] = {}
        self._watchers: dict[
            str, tuple[TaskSubscriptionProtocol, asyncio.Task[None]]
        ] = {}

    @property
    def watched_owners(self) -> list[str]:
        return list(self._watchers)

    async def process_snapshot(self, owner_id: str, tasks: list[Task]) -> list[SplitResult]:
        """React to one snapshot of an owner's collection.

        Returns:
            The splits performed for this snapshot.
        """
        previous = self._last_elapsed.get(owner_id, {})
        self._last_elapsed[owner_id] = {t.task_id: t.total_elapsed_time for t in tasks}
        changed = [t for t in tasks if previous.get(t.task_id) != t.total_elapsed_time]

        splits: list[SplitResult] = []
        for task in changed:
            if task.status == TaskStatus.COMPLETED:
                continue
            try:
                if self._splitter.is_eligible(task):
                    splits.append(await self._splitter.auto_split(owner_id, task.task_id))
                elif self._scorer is not None:
                    await self._scorer.score(owner_id, task.task_id)
            except TaskEngineError as exc:
                # The task may have changed or vanished since the snapshot
                log.warning(
                    "progress_monitor_task_skipped",
                    owner_id=owner_id,
                    task_id=task.task_id,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
        return splits

    async def watch(self, owner_id: str, subscription: TaskSubscriptionProtocol) -> None:
        """Consume snapshots until the subscription ends."""
        log.info("progress_monitor_started", owner_id=owner_id)
        async for snapshot in subscription:
            await self.process_snapshot(owner_id, snapshot)
        log.info("progress_monitor_stopped", owner_id=owner_id)

    def start(self, owner_id: str) -> asyncio.Task[None]:
        """Start watching an owner's collection in the background.

        Starting an owner that is already watched returns the existing task.
        """
        if owner_id in self._watchers:
            return self._watchers[owner_id][1]
        subscription = self._repository.subscribe(owner_id)
        watcher = asyncio.create_task(self.watch(owner_id, subscription))
        self._watchers[owner_id] = (subscription, watcher)
        return watcher

    async def stop(self, owner_id: str) -> None:
        """Stop watching an owner and wait for the watcher to finish."""
        entry = self._watchers.pop(owner_id, None)
        if entry is None:
            return
        subscription, watcher = entry
        subscription.unsubscribe()
        await watcher
        self._last_elapsed.pop(owner_id, None)

    async def stop_all(self) -> None:
        for owner_id in list(self._watchers):
            await self.stop(owner_id)
