"""
Pytest configuration and shared fixtures for task engine tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Time-dependent tests use FakeTimeAuthority, never the wall clock
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry

from src.application.services.task_engine import TaskEngine
from src.bootstrap.task_engine import build_task_engine
from src.config.task_engine_config import DEFAULT_TASK_ENGINE_CONFIG
from src.infrastructure.monitoring.metrics import TaskEngineMetrics
from src.infrastructure.stubs.comment_store_stub import CommentStoreStub
from src.infrastructure.stubs.identity_provider_stub import IdentityProviderStub
from src.infrastructure.stubs.notification_dispatcher_stub import (
    NotificationDispatcherStub,
)
from src.infrastructure.stubs.task_repository_stub import TaskRepositoryStub
from tests.helpers import FakeTimeAuthority

OWNER_ID = "owner-1"


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from src import __version__

    return __version__


@pytest.fixture
def owner_id() -> str:
    return OWNER_ID


@pytest.fixture
def fake_time() -> FakeTimeAuthority:
    """Clock frozen at 2026-01-01T00:00:00Z."""
    return FakeTimeAuthority()


@pytest.fixture
def repository(fake_time: FakeTimeAuthority) -> TaskRepositoryStub:
    return TaskRepositoryStub(time_authority=fake_time)


@pytest.fixture
def dispatcher() -> NotificationDispatcherStub:
    return NotificationDispatcherStub()


@pytest.fixture
def identity_provider() -> IdentityProviderStub:
    return IdentityProviderStub()


@pytest.fixture
def comment_store() -> CommentStoreStub:
    return CommentStoreStub()


@pytest.fixture
def metrics() -> TaskEngineMetrics:
    """Metrics bound to an isolated registry."""
    return TaskEngineMetrics(registry=CollectorRegistry())


@pytest.fixture
def engine(
    repository: TaskRepositoryStub,
    fake_time: FakeTimeAuthority,
    dispatcher: NotificationDispatcherStub,
    identity_provider: IdentityProviderStub,
    comment_store: CommentStoreStub,
    metrics: TaskEngineMetrics,
) -> TaskEngine:
    """Fully wired engine over in-memory adapters and a frozen clock."""
    return build_task_engine(
        DEFAULT_TASK_ENGINE_CONFIG,
        repository=repository,
        time_authority=fake_time,
        dispatcher=dispatcher,
        identity_provider=identity_provider,
        comment_store=comment_store,
        metrics=metrics,
    )
