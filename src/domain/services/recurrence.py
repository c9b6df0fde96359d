"""Recurrence rules for recurring tasks.

Pure date arithmetic and eligibility checks used by the recurrence
generator. Nothing here touches storage or the clock.

Pattern arithmetic:
- daily: +interval days
- weekly: +interval weeks
- biweekly: +(2 x interval) weeks
- monthly: +interval calendar months (day clamped to the target month's end)
- anything else: treated as daily
"""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta

from src.domain.models.task import RecurrencePattern, RecurringTaskConfig, Task, TaskStatus


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the end of the target month.

    Args:
        value: Starting instant.
        months: Number of months to add (may be negative).

    Returns:
        The shifted instant with the same time of day and tzinfo.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def add_pattern_interval(value: datetime, pattern: str, interval: int) -> datetime:
    """Advance ``value`` by ``interval`` units of ``pattern``.

    Unrecognized patterns fall back to daily arithmetic.
    """
    if pattern == RecurrencePattern.WEEKLY.value:
        return value + timedelta(weeks=interval)
    if pattern == RecurrencePattern.BIWEEKLY.value:
        return value + timedelta(weeks=2 * interval)
    if pattern == RecurrencePattern.MONTHLY.value:
        return add_months(value, interval)
    return value + timedelta(days=interval)


def should_create_occurrence(config: RecurringTaskConfig) -> bool:
    """Whether the end conditions still allow another occurrence.

    False when ``end_date`` is set and the pending occurrence falls after it,
    or when ``end_after_occurrences`` is set and has been reached.
    """
    if (
        config.end_date is not None
        and config.next_occurrence is not None
        and config.next_occurrence > config.end_date
    ):
        return False
    if (
        config.end_after_occurrences is not None
        and config.occurrences_completed >= config.end_after_occurrences
    ):
        return False
    return True


def is_regeneration_due(task: Task, now: datetime) -> bool:
    """Whether a completed recurring task's next occurrence has arrived.

    Sources that already produced a successor for the pending occurrence are
    not due again.
    """
    config = task.recurring_config
    if config is None or not config.is_recurring:
        return False
    if task.status != TaskStatus.COMPLETED:
        return False
    if config.next_occurrence is None or config.next_occurrence > now:
        return False
    return config.successor_task_id is None
