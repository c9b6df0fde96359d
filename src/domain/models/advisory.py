"""Advisory notification model.

Advisories are observational events the engine hands to the notification
dispatcher. They never mutate a task and nothing waits on their delivery.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class AdvisoryType(Enum):
    """Kinds of advisory the engine emits."""

    BUDGET_APPROACHING = "budget_approaching"
    BUDGET_EXCEEDED = "budget_exceeded"
    RECURRING_TASKS_CREATED = "recurring_tasks_created"
    DEPENDENCY_BLOCKED = "dependency_blocked"


class AdvisoryLevel(Enum):
    """Severity attached to an advisory."""

    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class Advisory:
    """A fire-and-forget notification about a task collection.

    Attributes:
        advisory_type: What happened.
        level: Severity for the delivery channel.
        owner_id: Owner whose collection the advisory concerns.
        message: Short human-readable summary.
        created_at: When the advisory was raised.
        task_id: Task concerned, if the advisory is about a single task.
        data: Structured payload (counts, ratios, blocking ids).
    """

    advisory_type: AdvisoryType
    level: AdvisoryLevel
    owner_id: str
    message: str
    created_at: datetime
    task_id: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for delivery."""
        return {
            "type": self.advisory_type.value,
            "level": self.level.value,
            "owner_id": self.owner_id,
            "task_id": self.task_id,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
            "data": dict(self.data),
        }
