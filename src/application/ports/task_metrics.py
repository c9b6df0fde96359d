"""Task metrics port.

Services record engine counters through this port so they stay free of any
metrics library. The Prometheus adapter lives in infrastructure.
"""

from __future__ import annotations

from typing import Protocol


class TaskMetricsPort(Protocol):
    """Protocol for recording task engine counters."""

    def record_activity(self, activity_type: str) -> None:
        """Count one appended activity of the given type."""
        ...

    def record_auto_split(self) -> None:
        """Count one task split into successors."""
        ...

    def record_recurring_generated(self, count: int) -> None:
        """Count recurring tasks generated in one pass."""
        ...

    def record_batch_failure(self, operation: str) -> None:
        """Count one per-task failure inside a batch operation."""
        ...

    def record_budget_advisory(self, level: str) -> None:
        """Count one time budget advisory at the given level."""
        ...


class NullTaskMetrics:
    """Metrics sink that records nothing."""

    def record_activity(self, activity_type: str) -> None:
        pass

    def record_auto_split(self) -> None:
        pass

    def record_recurring_generated(self, count: int) -> None:
        pass

    def record_batch_failure(self, operation: str) -> None:
        pass

    def record_budget_advisory(self, level: str) -> None:
        pass
