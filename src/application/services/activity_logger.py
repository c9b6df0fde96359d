"""Activity logger service.

Single append primitive for the audit trail. Every task mutation in the
engine funnels its activity through ``ActivityLogger.append`` so that all
entries share one shape, one clock and one metrics counter.

Ordering:
    Callers append after the field write completes. The two writes are not
    transactional: a failure between them leaves the state change without
    its audit entry. The trail is best-effort narration, not a source of
    truth for task state.
"""

from __future__ import annotations

import structlog

from src.application.dtos.task_engine import TaskActivityEntry
from src.application.ports.identity_provider import IdentityProviderProtocol
from src.application.ports.task_metrics import NullTaskMetrics, TaskMetricsPort
from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.domain.models.owner_profile import DEFAULT_DISPLAY_NAME
from src.domain.models.task import Activity, ActivityType

log = structlog.get_logger()

DEFAULT_HISTORY_LIMIT = 20


class ActivityLogger:
    """Appends immutable activities and answers audit-trail queries."""

    def __init__(
        self,
        repository: TaskRepositoryProtocol,
        time_authority: TimeAuthorityProtocol,
        identity_provider: IdentityProviderProtocol | None = None,
        metrics: TaskMetricsPort | None = None,
        default_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        """Initialize the logger.

        Args:
            repository: Task storage the activities are appended to.
            time_authority: Clock used to stamp activities.
            identity_provider: Resolves display names for narration. When
                absent every actor is narrated as "User".
            metrics: Counter sink for appended activities.
            default_limit: History length when a query passes no limit.
        """
        self._repository = repository
        self._time = time_authority
        self._identity = identity_provider
        self._metrics = metrics or NullTaskMetrics()
        self._default_limit = default_limit

    async def display_name(self, actor_id: str | None) -> str:
        """Resolve the name used to narrate an actor."""
        if actor_id is None or self._identity is None:
            return DEFAULT_DISPLAY_NAME
        name = await self._identity.get_display_name(actor_id)
        return name or DEFAULT_DISPLAY_NAME

    async def append(self, owner_id: str, task_id: str, activity: Activity) -> None:
        """Append an activity to a task and make it the latest one.

        Raises:
            TaskNotFoundError: If the task does not exist.
            StoreUnavailableError: On transport failure.
        """
        await self._repository.append_activity(owner_id, task_id, activity)
        self._metrics.record_activity(activity.activity_type.value)
        log.debug(
            "task_activity_appended",
            owner_id=owner_id,
            task_id=task_id,
            activity_type=activity.activity_type.value,
        )

    async def record(
        self,
        owner_id: str,
        task_id: str,
        activity_type: ActivityType,
        details: str,
    ) -> Activity:
        """Stamp a new activity with the current time and append it.

        Returns:
            The appended activity.
        """
        activity = Activity(
            activity_type=activity_type,
            timestamp=self._time.now(),
            details=details,
        )
        await self.append(owner_id, task_id, activity)
        return activity

    async def history(
        self, owner_id: str, task_id: str, limit: int | None = None
    ) -> list[Activity]:
        """Return a task's activities, newest first, truncated to ``limit``."""
        task = await self._repository.get(owner_id, task_id)
        size = limit if limit is not None else self._default_limit
        ordered = list(reversed(task.activities))
        return ordered[: max(size, 0)]

    async def recent_across_tasks(
        self, owner_id: str, limit: int | None = None
    ) -> list[TaskActivityEntry]:
        """Flatten every task's activities into one feed, newest first."""
        tasks = await self._repository.fetch_all(owner_id)
        entries = [
            TaskActivityEntry(task_id=t.task_id, task_title=t.title, activity=a)
            for t in tasks
            for a in reversed(t.activities)
        ]
        entries.sort(key=lambda e: e.activity.timestamp, reverse=True)
        size = limit if limit is not None else self._default_limit
        return entries[: max(size, 0)]
