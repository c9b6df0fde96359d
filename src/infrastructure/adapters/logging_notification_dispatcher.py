"""Notification dispatcher that writes advisories to the structured log.

Used when no delivery channel is configured. Warning-level advisories are
logged at warning level so they surface in log-based alerting.
"""

from __future__ import annotations

import structlog

from src.application.ports.notification_dispatcher import (
    NotificationDispatcherProtocol,
)
from src.domain.models.advisory import Advisory, AdvisoryLevel

log = structlog.get_logger()


class LoggingNotificationDispatcher(NotificationDispatcherProtocol):
    """Delivers advisories as log entries."""

    async def dispatch(self, advisory: Advisory) -> None:
        emit = log.warning if advisory.level == AdvisoryLevel.WARNING else log.info
        emit(
            "task_advisory",
            advisory_type=advisory.advisory_type.value,
            owner_id=advisory.owner_id,
            task_id=advisory.task_id,
            message=advisory.message,
            **advisory.data,
        )
