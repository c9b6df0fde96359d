"""Timer tracker service.

Start/stop elapsed-time accounting for tasks. A task has at most one open
timer session; the toggle lives with the caller.

Re-entrancy policy:
    ``start`` on a running timer and ``stop`` on a stopped timer are no-ops.
    They log a warning, append no activity and report ``changed=False``.

Time budget advisories:
    When a stop pushes elapsed time across the approaching or exceeded share
    of the budget, one advisory is dispatched. Advisories are observational
    and never mutate the task.
"""

from __future__ import annotations

import structlog

from src.application.dtos.task_engine import TimerUpdateResult
from src.application.ports.notification_dispatcher import (
    NotificationDispatcherProtocol,
)
from src.application.ports.task_metrics import NullTaskMetrics, TaskMetricsPort
from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.activity_logger import ActivityLogger
from src.config.task_engine_config import DEFAULT_TASK_ENGINE_CONFIG, TaskEngineConfig
from src.domain.errors.task import TaskValidationError
from src.domain.models.advisory import Advisory, AdvisoryLevel, AdvisoryType
from src.domain.models.task import ActivityType, Task
from src.domain.services import narration
from src.domain.services.time_budget import BudgetLevel, crossed_level, progress_ratio

log = structlog.get_logger()


class TimerTracker:
    """Tracks timer sessions and accumulated elapsed time."""

    def __init__(
        self,
        repository: TaskRepositoryProtocol,
        activity_logger: ActivityLogger,
        time_authority: TimeAuthorityProtocol,
        dispatcher: NotificationDispatcherProtocol,
        config: TaskEngineConfig = DEFAULT_TASK_ENGINE_CONFIG,
        metrics: TaskMetricsPort | None = None,
    ) -> None:
        self._repository = repository
        self._activities = activity_logger
        self._time = time_authority
        self._dispatcher = dispatcher
        self._config = config
        self._metrics = metrics or NullTaskMetrics()

    async def start(
        self, owner_id: str, task_id: str, actor_id: str | None = None
    ) -> TimerUpdateResult:
        """Open a timer session.

        Returns:
            The timer state; ``changed`` is False if a session was already open.

        Raises:
            TaskNotFoundError: If the task does not exist.
        """
        task = await self._repository.get(owner_id, task_id)
        if task.is_timer_running:
            log.warning("timer_already_running", owner_id=owner_id, task_id=task_id)
            return self._result(task, changed=False)

        started_at = self._time.now()
        await self._repository.update(
            owner_id,
            task_id,
            {"is_timer_running": True, "start_time": started_at},
        )
        user_name = await self._activities.display_name(actor_id)
        await self._activities.record(
            owner_id, task_id, ActivityType.TIMER_UPDATE, narration.timer_started(user_name)
        )
        log.info("timer_started", owner_id=owner_id, task_id=task_id)
        return TimerUpdateResult(
            task_id=task_id,
            changed=True,
            is_timer_running=True,
            total_elapsed_time=task.total_elapsed_time,
            progress_ratio=progress_ratio(
                task.total_elapsed_time, task.estimated_duration
            ),
        )

    async def stop(
        self,
        owner_id: str,
        task_id: str,
        elapsed_delta_ms: int | None = None,
        actor_id: str | None = None,
    ) -> TimerUpdateResult:
        """Close the open timer session and accumulate its elapsed time.

        Args:
            owner_id: Owner of the task.
            task_id: Task whose timer stops.
            elapsed_delta_ms: Milliseconds worked in this session. When
                omitted it is derived from the session's start time.
            actor_id: User stopping the timer, for narration.

        Returns:
            The timer state; ``changed`` is False if no session was open.

        Raises:
            TaskNotFoundError: If the task does not exist.
            TaskValidationError: If the elapsed delta is negative.
        """
        task = await self._repository.get(owner_id, task_id)
        if not task.is_timer_running:
            log.warning("timer_not_running", owner_id=owner_id, task_id=task_id)
            return self._result(task, changed=False)

        delta = (
            elapsed_delta_ms
            if elapsed_delta_ms is not None
            else self._session_elapsed_ms(task)
        )
        if delta < 0:
            raise TaskValidationError(
                f"elapsed_delta_ms must be non-negative, got {delta}"
            )

        total = task.total_elapsed_time + delta
        await self._repository.update(
            owner_id,
            task_id,
            {
                "is_timer_running": False,
                "start_time": None,
                "total_elapsed_time": total,
            },
        )
        user_name = await self._activities.display_name(actor_id)
        await self._activities.record(
            owner_id,
            task_id,
            ActivityType.TIMER_UPDATE,
            narration.timer_stopped(user_name, delta),
        )
        log.info(
            "timer_stopped",
            owner_id=owner_id,
            task_id=task_id,
            elapsed_delta_ms=delta,
            total_elapsed_time=total,
        )

        level = crossed_level(
            task.total_elapsed_time,
            total,
            task.estimated_duration,
            self._config.approaching_budget_ratio,
            self._config.exceeded_budget_ratio,
        )
        if level is not None:
            await self._dispatch_budget_advisory(owner_id, task, total, level)

        return TimerUpdateResult(
            task_id=task_id,
            changed=True,
            is_timer_running=False,
            total_elapsed_time=total,
            progress_ratio=progress_ratio(total, task.estimated_duration),
            budget_level=level.value if level is not None else None,
        )

    async def progress_ratio(self, owner_id: str, task_id: str) -> float:
        """Elapsed share of the task's budget, clamped to [0, 1]."""
        task = await self._repository.get(owner_id, task_id)
        return progress_ratio(task.total_elapsed_time, task.estimated_duration)

    def _session_elapsed_ms(self, task: Task) -> int:
        if task.start_time is None:
            return 0
        elapsed = self._time.now() - task.start_time
        return max(0, int(elapsed.total_seconds() * 1000))

    def _result(self, task: Task, changed: bool) -> TimerUpdateResult:
        return TimerUpdateResult(
            task_id=task.task_id,
            changed=changed,
            is_timer_running=task.is_timer_running,
            total_elapsed_time=task.total_elapsed_time,
            progress_ratio=progress_ratio(
                task.total_elapsed_time, task.estimated_duration
            ),
        )

    async def _dispatch_budget_advisory(
        self, owner_id: str, task: Task, total_elapsed: int, level: BudgetLevel
    ) -> None:
        if level == BudgetLevel.EXCEEDED:
            advisory_type = AdvisoryType.BUDGET_EXCEEDED
            severity = AdvisoryLevel.WARNING
            message = f'"{task.title}" has exceeded its estimated duration'
        else:
            advisory_type = AdvisoryType.BUDGET_APPROACHING
            severity = AdvisoryLevel.INFO
            message = f'"{task.title}" is approaching its estimated duration'

        ratio = total_elapsed / task.time_budget_ms
        await self._dispatcher.dispatch(
            Advisory(
                advisory_type=advisory_type,
                level=severity,
                owner_id=owner_id,
                task_id=task.task_id,
                message=message,
                created_at=self._time.now(),
                data={
                    "total_elapsed_time": total_elapsed,
                    "estimated_duration": task.estimated_duration,
                    "ratio": round(ratio, 4),
                },
            )
        )
        self._metrics.record_budget_advisory(level.value)
        log.info(
            "time_budget_advisory_dispatched",
            owner_id=owner_id,
            task_id=task.task_id,
            level=level.value,
        )
