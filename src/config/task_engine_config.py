"""Task engine configuration.

This module defines the tunable thresholds and policies of the task
lifecycle engine, plus storage selection, with environment variable
overrides for deployment tuning.

Environment Variables (Engine):
- TASK_ENGINE_SPLIT_THRESHOLD: Budget share that makes a task split-eligible (default: 0.9)
- TASK_ENGINE_APPROACHING_BUDGET: Budget share for the approaching advisory (default: 0.8)
- TASK_ENGINE_EXCEEDED_BUDGET: Budget share for the exceeded advisory (default: 1.0)
- TASK_ENGINE_PERSIST_RECURRENCES: Persist regenerated recurring tasks (default: true)
- TASK_ENGINE_PROGRESS_POLICY: "clamp" or "reject" out-of-range progress (default: clamp)
- TASK_ENGINE_ACTIVITY_LIMIT: Default activity history length (default: 20)
- TASK_ENGINE_RECOMMENDED_LIMIT: Default recommendation list length (default: 10)

Environment Variables (Storage):
- TASK_STORE: "memory" or "postgres" (default: memory)
- DATABASE_URL: PostgreSQL URL used when TASK_STORE=postgres
- TASK_STORE_POLL_SECONDS: Subscription poll interval for postgres (default: 2.0)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

PROGRESS_POLICY_CLAMP = "clamp"
PROGRESS_POLICY_REJECT = "reject"
PROGRESS_POLICIES = frozenset({PROGRESS_POLICY_CLAMP, PROGRESS_POLICY_REJECT})

STORE_MEMORY = "memory"
STORE_POSTGRES = "postgres"
TASK_STORES = frozenset({STORE_MEMORY, STORE_POSTGRES})


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable with default.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    """
    value = os.environ.get(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


@dataclass(frozen=True)
class TaskEngineConfig:
    """Configuration for the task lifecycle engine.

    Attributes:
        split_threshold_ratio: Share of the time budget at which an open task
            becomes split-eligible. Default: 0.9.
        approaching_budget_ratio: Share at which the approaching-budget
            advisory fires. Default: 0.8.
        exceeded_budget_ratio: Share at which the exceeded-budget advisory
            fires. Default: 1.0.
        persist_regenerated_tasks: Whether recurring successors are written
            to the repository (True) or only returned with the fetched list.
        progress_policy: "clamp" clamps out-of-range progress to [0, 100]
            with a warning; "reject" raises TaskValidationError.
        activity_history_limit: Default length of activity history queries.
        recommended_tasks_limit: Default length of recommendation lists.
    """

    split_threshold_ratio: float = 0.9
    approaching_budget_ratio: float = 0.8
    exceeded_budget_ratio: float = 1.0
    persist_regenerated_tasks: bool = True
    progress_policy: str = PROGRESS_POLICY_CLAMP
    activity_history_limit: int = 20
    recommended_tasks_limit: int = 10

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not 0 < self.split_threshold_ratio <= 1:
            raise ValueError(
                "split_threshold_ratio must be within (0, 1], "
                f"got {self.split_threshold_ratio}"
            )
        if self.approaching_budget_ratio <= 0:
            raise ValueError(
                "approaching_budget_ratio must be positive, "
                f"got {self.approaching_budget_ratio}"
            )
        if self.exceeded_budget_ratio <= self.approaching_budget_ratio:
            raise ValueError(
                f"exceeded_budget_ratio ({self.exceeded_budget_ratio}) must be greater "
                f"than approaching_budget_ratio ({self.approaching_budget_ratio})"
            )
        if self.progress_policy not in PROGRESS_POLICIES:
            raise ValueError(
                f"progress_policy must be one of {sorted(PROGRESS_POLICIES)}, "
                f"got {self.progress_policy!r}"
            )
        if self.activity_history_limit < 1:
            raise ValueError(
                "activity_history_limit must be positive, "
                f"got {self.activity_history_limit}"
            )
        if self.recommended_tasks_limit < 1:
            raise ValueError(
                "recommended_tasks_limit must be positive, "
                f"got {self.recommended_tasks_limit}"
            )

    @classmethod
    def from_environment(cls) -> "TaskEngineConfig":
        """Create config from environment variables with defaults.

        Returns:
            TaskEngineConfig with values from environment or defaults.
        """
        return cls(
            split_threshold_ratio=_get_float_env("TASK_ENGINE_SPLIT_THRESHOLD", 0.9),
            approaching_budget_ratio=_get_float_env(
                "TASK_ENGINE_APPROACHING_BUDGET", 0.8
            ),
            exceeded_budget_ratio=_get_float_env("TASK_ENGINE_EXCEEDED_BUDGET", 1.0),
            persist_regenerated_tasks=_get_bool_env(
                "TASK_ENGINE_PERSIST_RECURRENCES", True
            ),
            progress_policy=os.environ.get(
                "TASK_ENGINE_PROGRESS_POLICY", PROGRESS_POLICY_CLAMP
            )
            .strip()
            .lower(),
            activity_history_limit=_get_int_env("TASK_ENGINE_ACTIVITY_LIMIT", 20),
            recommended_tasks_limit=_get_int_env("TASK_ENGINE_RECOMMENDED_LIMIT", 10),
        )


@dataclass(frozen=True)
class TaskStoreConfig:
    """Storage selection for the task repository.

    Attributes:
        backend: "memory" for the in-process store, "postgres" for PostgreSQL.
        database_url: Connection URL, required for postgres.
        poll_interval_seconds: How often postgres subscriptions re-read the
            owner's collection.
    """

    backend: str = STORE_MEMORY
    database_url: str | None = None
    poll_interval_seconds: float = 2.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.backend not in TASK_STORES:
            raise ValueError(
                f"backend must be one of {sorted(TASK_STORES)}, got {self.backend!r}"
            )
        if self.backend == STORE_POSTGRES and not self.database_url:
            raise ValueError("database_url is required when backend is postgres")
        if self.poll_interval_seconds <= 0:
            raise ValueError(
                "poll_interval_seconds must be positive, "
                f"got {self.poll_interval_seconds}"
            )

    @classmethod
    def from_environment(cls) -> "TaskStoreConfig":
        """Create config from TASK_STORE, DATABASE_URL and TASK_STORE_POLL_SECONDS."""
        return cls(
            backend=os.environ.get("TASK_STORE", STORE_MEMORY).strip().lower(),
            database_url=os.environ.get("DATABASE_URL"),
            poll_interval_seconds=_get_float_env("TASK_STORE_POLL_SECONDS", 2.0),
        )


# Pre-defined configurations for common use cases

# Default production config
DEFAULT_TASK_ENGINE_CONFIG = TaskEngineConfig()

# Testing config: rejects bad progress so tests see validation errors
TEST_TASK_ENGINE_CONFIG = TaskEngineConfig(
    progress_policy=PROGRESS_POLICY_REJECT,
    activity_history_limit=5,
    recommended_tasks_limit=3,
)

# Read-time-only recurrence: successors are returned but never written
EPHEMERAL_RECURRENCE_TASK_ENGINE_CONFIG = TaskEngineConfig(
    persist_regenerated_tasks=False,
)
