"""Configuration module for the task lifecycle engine.

This module provides centralized configuration for engine thresholds and
storage selection.

Available Configurations:
- TaskEngineConfig: split/advisory thresholds, progress policy, list limits
- TaskStoreConfig: repository backend selection
"""

from src.config.task_engine_config import (
    DEFAULT_TASK_ENGINE_CONFIG,
    EPHEMERAL_RECURRENCE_TASK_ENGINE_CONFIG,
    TEST_TASK_ENGINE_CONFIG,
    TaskEngineConfig,
    TaskStoreConfig,
)

__all__ = [
    "TaskEngineConfig",
    "TaskStoreConfig",
    "DEFAULT_TASK_ENGINE_CONFIG",
    "TEST_TASK_ENGINE_CONFIG",
    "EPHEMERAL_RECURRENCE_TASK_ENGINE_CONFIG",
]
