"""Notification dispatcher stub that records advisories in memory."""

from __future__ import annotations

from src.application.ports.notification_dispatcher import (
    NotificationDispatcherProtocol,
)
from src.domain.models.advisory import Advisory, AdvisoryType


class NotificationDispatcherStub(NotificationDispatcherProtocol):
    """Collects dispatched advisories for inspection.

    Attributes:
        advisories: Every advisory dispatched, in order.
    """

    def __init__(self) -> None:
        self.advisories: list[Advisory] = []

    async def dispatch(self, advisory: Advisory) -> None:
        self.advisories.append(advisory)

    def of_type(self, advisory_type: AdvisoryType) -> list[Advisory]:
        """Return dispatched advisories of one type."""
        return [a for a in self.advisories if a.advisory_type == advisory_type]

    def clear(self) -> None:
        self.advisories.clear()
