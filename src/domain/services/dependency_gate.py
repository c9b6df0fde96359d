"""Dependency gate rule.

A task may leave ``todo`` only when every dependency resolves to a completed
task in the same owner's collection. Ids that do not resolve (deleted tasks)
count as unsatisfied.
"""

from __future__ import annotations

from collections.abc import Mapping

from src.domain.models.task import Task, TaskStatus


def blocking_dependencies(task: Task, tasks_by_id: Mapping[str, Task]) -> tuple[str, ...]:
    """Return dependency ids that keep the gate closed, in declared order."""
    blocking = []
    for dependency_id in task.dependencies:
        dependency = tasks_by_id.get(dependency_id)
        if dependency is None or dependency.status != TaskStatus.COMPLETED:
            blocking.append(dependency_id)
    return tuple(blocking)


def dependencies_satisfied(task: Task, tasks_by_id: Mapping[str, Task]) -> bool:
    """True iff the task has no dependencies or all of them are completed."""
    return not blocking_dependencies(task, tasks_by_id)
