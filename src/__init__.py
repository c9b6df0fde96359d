"""
Task Lifecycle Engine - state, timing and scoring of work items.

The engine creates, advances, times, splits and scores tasks for a single
logical owner per task collection:
- Status transitions gated on task dependencies
- Elapsed-time accounting across timer sessions
- Recurring task regeneration
- Automatic splitting when a task overruns its time budget
- Personalization scoring and recommendations
- Per-task activity (audit) trail for every mutation
- Batch mutation with per-task audit and failure granularity
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
