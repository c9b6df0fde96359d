"""Infrastructure adapters implementing application ports."""

from src.infrastructure.adapters.logging_notification_dispatcher import (
    LoggingNotificationDispatcher,
)
from src.infrastructure.adapters.system_time_authority import SystemTimeAuthority

__all__: list[str] = ["LoggingNotificationDispatcher", "SystemTimeAuthority"]
