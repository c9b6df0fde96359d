"""Bootstrap wiring for the task engine.

Builds the TaskEngine facade and its collaborators. Storage follows
TaskStoreConfig: the in-memory stub by default, PostgreSQL when
TASK_STORE=postgres.
"""

from __future__ import annotations

from src.application.ports.comment_store import CommentStoreProtocol
from src.application.ports.identity_provider import IdentityProviderProtocol
from src.application.ports.notification_dispatcher import (
    NotificationDispatcherProtocol,
)
from src.application.ports.task_metrics import TaskMetricsPort
from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.activity_logger import ActivityLogger
from src.application.services.auto_split_engine import AutoSplitEngine
from src.application.services.batch_coordinator import BatchCoordinator
from src.application.services.comment_service import CommentService
from src.application.services.personalization_scorer import PersonalizationScorer
from src.application.services.recurrence_generator import RecurrenceGenerator
from src.application.services.task_analysis_service import TaskAnalysisService
from src.application.services.task_engine import TaskEngine
from src.application.services.task_lifecycle_manager import TaskLifecycleManager
from src.application.services.task_progress_monitor import TaskProgressMonitor
from src.application.services.timer_tracker import TimerTracker
from src.bootstrap.database import close_database_engine, get_session_factory
from src.bootstrap.metrics import get_task_metrics
from src.config.task_engine_config import (
    STORE_POSTGRES,
    TaskEngineConfig,
    TaskStoreConfig,
)
from src.infrastructure.adapters.logging_notification_dispatcher import (
    LoggingNotificationDispatcher,
)
from src.infrastructure.adapters.persistence.task_repository import (
    PostgresTaskRepository,
)
from src.infrastructure.adapters.system_time_authority import SystemTimeAuthority
from src.infrastructure.stubs.comment_store_stub import CommentStoreStub
from src.infrastructure.stubs.identity_provider_stub import IdentityProviderStub
from src.infrastructure.stubs.task_repository_stub import TaskRepositoryStub

_task_engine: TaskEngine | None = None
_progress_monitor: TaskProgressMonitor | None = None


def create_task_repository(
    store_config: TaskStoreConfig, time_authority: TimeAuthorityProtocol
) -> TaskRepositoryProtocol:
    """Create the repository selected by the store config."""
    if store_config.backend == STORE_POSTGRES:
        return PostgresTaskRepository(
            session_factory=get_session_factory(store_config.database_url),
            time_authority=time_authority,
            poll_interval_seconds=store_config.poll_interval_seconds,
        )
    return TaskRepositoryStub(time_authority=time_authority)


def build_task_engine(
    config: TaskEngineConfig | None = None,
    *,
    repository: TaskRepositoryProtocol | None = None,
    time_authority: TimeAuthorityProtocol | None = None,
    dispatcher: NotificationDispatcherProtocol | None = None,
    identity_provider: IdentityProviderProtocol | None = None,
    comment_store: CommentStoreProtocol | None = None,
    metrics: TaskMetricsPort | None = None,
    store_config: TaskStoreConfig | None = None,
) -> TaskEngine:
    """Wire a TaskEngine; any collaborator may be overridden (tests)."""
    config = config or TaskEngineConfig.from_environment()
    time_authority = time_authority or SystemTimeAuthority()
    if repository is None:
        repository = create_task_repository(
            store_config or TaskStoreConfig.from_environment(), time_authority
        )
    dispatcher = dispatcher or LoggingNotificationDispatcher()
    identity_provider = identity_provider or IdentityProviderStub()
    comment_store = comment_store or CommentStoreStub()
    metrics = metrics or get_task_metrics()

    activity_logger = ActivityLogger(
        repository,
        time_authority,
        identity_provider=identity_provider,
        metrics=metrics,
        default_limit=config.activity_history_limit,
    )
    lifecycle = TaskLifecycleManager(
        repository, activity_logger, time_authority, dispatcher, config
    )
    return TaskEngine(
        repository=repository,
        activity_logger=activity_logger,
        lifecycle_manager=lifecycle,
        timer_tracker=TimerTracker(
            repository, activity_logger, time_authority, dispatcher, config, metrics
        ),
        recurrence_generator=RecurrenceGenerator(
            repository, activity_logger, time_authority, dispatcher, config, metrics
        ),
        auto_split_engine=AutoSplitEngine(
            repository, activity_logger, time_authority, config, metrics
        ),
        personalization_scorer=PersonalizationScorer(
            repository, identity_provider, config
        ),
        batch_coordinator=BatchCoordinator(
            repository, lifecycle, activity_logger, metrics
        ),
        analysis_service=TaskAnalysisService(
            repository, activity_logger, time_authority
        ),
        comment_service=CommentService(
            comment_store, repository, activity_logger, time_authority
        ),
    )


def build_progress_monitor(
    engine: TaskEngine, repository: TaskRepositoryProtocol
) -> TaskProgressMonitor:
    return TaskProgressMonitor(repository, engine.splitter, engine.scorer)


def get_task_engine() -> TaskEngine:
    """Get the process-wide TaskEngine (built on first call)."""
    global _task_engine
    if _task_engine is None:
        _task_engine = build_task_engine()
    return _task_engine


def get_progress_monitor() -> TaskProgressMonitor:
    """Get the process-wide progress monitor for the engine's repository."""
    global _progress_monitor
    if _progress_monitor is None:
        engine = get_task_engine()
        _progress_monitor = build_progress_monitor(engine, engine.repository)
    return _progress_monitor


def set_task_engine(engine: TaskEngine) -> None:
    """Set custom engine (testing/override)."""
    global _task_engine, _progress_monitor
    _task_engine = engine
    _progress_monitor = None


def reset_task_engine() -> None:
    """Reset engine singletons (testing cleanup)."""
    global _task_engine, _progress_monitor
    _task_engine = None
    _progress_monitor = None


async def initialize_task_store() -> None:
    """Create the PostgreSQL schema when the engine is backed by PostgreSQL."""
    repository = get_task_engine().repository
    if isinstance(repository, PostgresTaskRepository):
        await repository.create_schema()


async def shutdown_task_engine() -> None:
    """Stop progress watchers and release the database engine."""
    if _progress_monitor is not None:
        await _progress_monitor.stop_all()
    await close_database_engine()
