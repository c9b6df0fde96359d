"""Application services - Use case orchestration.

This module contains application services that orchestrate domain
operations and coordinate with infrastructure adapters through ports.

Available services:
- TaskEngine: Facade over every task lifecycle operation
- ActivityLogger: Audit trail writes and history reads
- TaskLifecycleManager: Status transitions, progress, dependency gate
- TimerTracker: Timer sessions and time budget advisories
- RecurrenceGenerator: Next-occurrence generation for recurring tasks
- AutoSplitEngine: Splitting overrunning tasks into two halves
- PersonalizationScorer: Fit scores and recommendations
- BatchCoordinator: Fan-out of one change over many tasks
- TaskAnalysisService: Subtask breakdown, analysis and guidance
- CommentService: Task comments and replies
- TaskProgressMonitor: Split/rescore reactions to live task snapshots
"""

from src.application.services.activity_logger import ActivityLogger
from src.application.services.auto_split_engine import AUTO_SPLIT_TAG, AutoSplitEngine
from src.application.services.batch_coordinator import BatchCoordinator
from src.application.services.comment_service import CommentService
from src.application.services.personalization_scorer import PersonalizationScorer
from src.application.services.recurrence_generator import RecurrenceGenerator
from src.application.services.task_analysis_service import TaskAnalysisService
from src.application.services.task_engine import TaskEngine
from src.application.services.task_lifecycle_manager import TaskLifecycleManager
from src.application.services.task_progress_monitor import TaskProgressMonitor
from src.application.services.timer_tracker import TimerTracker

__all__: list[str] = [
    "AUTO_SPLIT_TAG",
    "ActivityLogger",
    "AutoSplitEngine",
    "BatchCoordinator",
    "CommentService",
    "PersonalizationScorer",
    "RecurrenceGenerator",
    "TaskAnalysisService",
    "TaskEngine",
    "TaskLifecycleManager",
    "TaskProgressMonitor",
    "TimerTracker",
]
