"""Time Authority Protocol - interface for timestamp provisioning.

Every service that stamps a task (activities, ``updated_at``, timer starts,
recurrence checks) injects a TimeAuthorityProtocol implementation instead of
calling datetime.now() directly. Tests inject FakeTimeAuthority so elapsed
time and due occurrences are deterministic.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Abstract interface for time authority.

    Example usage:
        class TimerTracker:
            def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
                self._time = time_authority

            async def start(self, owner_id: str, task_id: str) -> bool:
                started_at = self._time.now()  # NOT datetime.now()
                ...

    For production:
        Use SystemTimeAuthority from src/infrastructure/adapters/

    For testing:
        Use FakeTimeAuthority from tests/helpers/fake_time_authority.py
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return current time with timezone awareness (UTC).

        Returns:
            Current datetime with timezone information.
        """
        ...

    @abstractmethod
    def utcnow(self) -> datetime:
        """Return current UTC time.

        Returns:
            Current datetime in UTC timezone.
        """
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return monotonic clock value for measuring elapsed time.

        Returns:
            Monotonically increasing float value (in seconds). Only
            differences between readings are meaningful.
        """
        ...
