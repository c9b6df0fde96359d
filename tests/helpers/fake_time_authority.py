"""FakeTimeAuthority - Controllable time authority for deterministic tests.

Timer sessions, budget crossings and recurrence due-checks all read the
injected clock, so tests freeze it and advance it explicitly.

Usage Patterns:
--------------

1. Frozen Time Pattern:

    >>> fake_time = FakeTimeAuthority(frozen_at=datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc))
    >>> service = TimerTracker(..., time_authority=fake_time, ...)
    >>> assert fake_time.now() == datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc)

2. Time Advancement Pattern (simulate a 54 minute work session):

    >>> await engine.update_task_timer(owner, task_id, is_running=True)
    >>> fake_time.advance(minutes=54)
    >>> await engine.update_task_timer(owner, task_id, is_running=False)

3. Pytest Fixture Pattern:
    Use the ``fake_time`` fixture from tests/conftest.py.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.application.ports.time_authority import TimeAuthorityProtocol

DEFAULT_FROZEN_AT = datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


class FakeTimeAuthority(TimeAuthorityProtocol):
    """Controllable time authority for deterministic tests.

    Time never moves on its own. ``advance`` moves both the wall clock and
    the monotonic clock; ``set_time`` jumps the wall clock only.
    """

    def __init__(
        self,
        frozen_at: datetime | None = None,
        *,
        start_monotonic: float = 0.0,
    ) -> None:
        """Initialize the fake time authority.

        Args:
            frozen_at: Time to freeze at. Defaults to 2026-01-01T00:00:00 UTC.
                A naive value is taken as UTC.
            start_monotonic: Starting value for the monotonic clock.
        """
        if frozen_at is None:
            frozen_at = DEFAULT_FROZEN_AT
        if frozen_at.tzinfo is None:
            frozen_at = frozen_at.replace(tzinfo=timezone.utc)

        self._current_time: datetime = frozen_at
        self._monotonic_base: float = start_monotonic
        self._monotonic_advances: float = 0.0

    def now(self) -> datetime:
        return self._current_time

    def utcnow(self) -> datetime:
        return self._current_time

    def monotonic(self) -> float:
        return self._monotonic_base + self._monotonic_advances

    def advance(
        self,
        seconds: float | int | None = None,
        delta: timedelta | None = None,
        *,
        minutes: float | int | None = None,
    ) -> None:
        """Advance time by the specified amount.

        Exactly one of ``seconds``, ``delta`` or ``minutes`` is read, in
        that order of precedence: delta, minutes, seconds.

        Raises:
            ValueError: If no amount is given or the amount is negative.
        """
        if delta is not None:
            advance_seconds = delta.total_seconds()
        elif minutes is not None:
            advance_seconds = float(minutes) * 60
        elif seconds is not None:
            advance_seconds = float(seconds)
        else:
            raise ValueError("Must provide 'seconds', 'minutes' or 'delta'")

        if advance_seconds < 0:
            raise ValueError(
                f"Cannot advance time backwards. Got {advance_seconds} seconds. "
                "Use set_time() for explicit time changes."
            )

        self._current_time += timedelta(seconds=advance_seconds)
        self._monotonic_advances += advance_seconds

    def set_time(self, dt: datetime) -> None:
        """Jump the wall clock to ``dt`` (naive values are taken as UTC)."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        self._current_time = dt

    def __repr__(self) -> str:
        return (
            f"FakeTimeAuthority("
            f"current_time={self._current_time.isoformat()}, "
            f"monotonic={self.monotonic():.3f})"
        )
