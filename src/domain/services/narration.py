"""Activity narration.

Builds the human-readable ``details`` text of activities. Every narration
names the acting user; callers pass the display name already resolved.
"""

from __future__ import annotations

from collections.abc import Sequence

from src.domain.models.task import MS_PER_MINUTE, TaskPriority, TaskStatus

BATCH_SUFFIX = " (batch update)"


def _with_suffix(details: str, batch: bool) -> str:
    return details + BATCH_SUFFIX if batch else details


def _format_number(value: float) -> str:
    return f"{value:g}"


def task_created(user_name: str) -> str:
    return f"{user_name} created this task"


def task_details_updated(user_name: str, fields: Sequence[str]) -> str:
    return f"{user_name} updated {', '.join(fields)}"


def status_changed(
    user_name: str, from_status: TaskStatus, to_status: TaskStatus, batch: bool = False
) -> str:
    return _with_suffix(
        f"{user_name} moved task from {from_status.value} to {to_status.value}", batch
    )


def task_completed(user_name: str, batch: bool = False) -> str:
    return _with_suffix(f"{user_name} marked the task as completed", batch)


def progress_updated(percentage: float) -> str:
    return f"Progress updated to {_format_number(percentage)}%"


def timer_started(user_name: str) -> str:
    return f"{user_name} started working on this task"


def timer_stopped(user_name: str, elapsed_ms: int) -> str:
    minutes = round(elapsed_ms / MS_PER_MINUTE)
    return f"{user_name} paused work on this task (worked for {minutes} minutes)"


def priority_changed(
    user_name: str,
    from_priority: TaskPriority | None,
    to_priority: TaskPriority,
    batch: bool = False,
) -> str:
    previous = from_priority.value if from_priority is not None else "none"
    return _with_suffix(
        f"{user_name} changed priority from {previous} to {to_priority.value}", batch
    )


def tags_added(user_name: str, tags: Sequence[str], batch: bool = False) -> str:
    return _with_suffix(f"{user_name} added tags: {', '.join(tags)}", batch)


def dependencies_updated(user_name: str, count: int) -> str:
    return f"{user_name} updated dependencies ({count} total)"


def auto_split(user_name: str, remaining_work: float, durations: tuple[int, int]) -> str:
    return (
        f"{user_name} split this task into 2 parts "
        f"({durations[0]} and {durations[1]} minutes, "
        f"{_format_number(remaining_work)}% of work remaining)"
    )


def subtasks_created(user_name: str, count: int) -> str:
    return f"{user_name} split this task into {count} subtasks"


def created_as_subtask() -> str:
    return "Created as subtask"


def recurring_task_created() -> str:
    return "Recurring task created"


def comment_added(user_name: str, is_reply: bool = False) -> str:
    if is_reply:
        return f"{user_name} replied to a comment"
    return f"{user_name} added a comment"
