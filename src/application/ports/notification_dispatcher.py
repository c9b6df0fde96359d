"""Notification dispatcher port.

Advisories are fire-and-forget: the engine never consumes a return value and
never waits on delivery. Channel routing and quiet hours belong to the
dispatcher implementation, not to the engine.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.models.advisory import Advisory


class NotificationDispatcherProtocol(Protocol):
    """Protocol for delivering advisory notifications."""

    async def dispatch(self, advisory: Advisory) -> None:
        """Hand an advisory to the delivery layer.

        Args:
            advisory: The advisory to deliver.
        """
        ...
