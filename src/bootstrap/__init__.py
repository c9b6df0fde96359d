"""Composition root for wiring dependencies.

This package centralizes infrastructure-aware wiring so API and application
layers can depend on ports without importing infrastructure directly.
"""

from src.bootstrap.task_engine import (
    build_task_engine,
    get_progress_monitor,
    get_task_engine,
    reset_task_engine,
    set_task_engine,
)

__all__ = [
    "build_task_engine",
    "get_progress_monitor",
    "get_task_engine",
    "reset_task_engine",
    "set_task_engine",
]
