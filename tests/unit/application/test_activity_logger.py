"""Unit tests for the activity append primitive and audit queries."""

from __future__ import annotations

from datetime import timedelta

import pytest

from src.application.services.activity_logger import ActivityLogger
from src.domain.errors.task import TaskNotFoundError
from src.domain.models.owner_profile import OwnerProfile
from src.domain.models.task import Activity, ActivityType
from src.infrastructure.monitoring.metrics import TaskEngineMetrics
from src.infrastructure.stubs.identity_provider_stub import IdentityProviderStub
from src.infrastructure.stubs.task_repository_stub import TaskRepositoryStub
from tests.helpers import DEFAULT_FROZEN_AT, FakeTimeAuthority, make_task, sample_total

OWNER = "owner-1"


@pytest.fixture
def logger(
    repository: TaskRepositoryStub,
    fake_time: FakeTimeAuthority,
    identity_provider: IdentityProviderStub,
    metrics: TaskEngineMetrics,
) -> ActivityLogger:
    return ActivityLogger(
        repository,
        fake_time,
        identity_provider=identity_provider,
        metrics=metrics,
        default_limit=3,
    )


def _activity(minutes: int, details: str) -> Activity:
    return Activity(
        activity_type=ActivityType.STATUS_CHANGE,
        timestamp=DEFAULT_FROZEN_AT + timedelta(minutes=minutes),
        details=details,
    )


class TestAppend:
    @pytest.mark.asyncio
    async def test_append_sets_last_activity(
        self,
        logger: ActivityLogger,
        repository: TaskRepositoryStub,
        metrics: TaskEngineMetrics,
    ) -> None:
        repository.add_task(OWNER, make_task("t1"))

        await logger.append(OWNER, "t1", _activity(1, "one"))
        await logger.append(OWNER, "t1", _activity(2, "two"))

        task = await repository.get(OWNER, "t1")
        assert [a.details for a in task.activities] == ["one", "two"]
        assert task.last_activity == task.activities[-1]
        assert sample_total(metrics, "task_activities_total", type="status_change") == 2

    @pytest.mark.asyncio
    async def test_append_to_missing_task(self, logger: ActivityLogger) -> None:
        with pytest.raises(TaskNotFoundError):
            await logger.append(OWNER, "missing", _activity(1, "x"))

    @pytest.mark.asyncio
    async def test_record_stamps_current_time(
        self,
        logger: ActivityLogger,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
    ) -> None:
        repository.add_task(OWNER, make_task("t1"))
        fake_time.advance(seconds=30)

        activity = await logger.record(OWNER, "t1", ActivityType.COMMENT, "hi")

        assert activity.timestamp == fake_time.now()


class TestDisplayName:
    @pytest.mark.asyncio
    async def test_known_and_unknown_actors(
        self, logger: ActivityLogger, identity_provider: IdentityProviderStub
    ) -> None:
        identity_provider.set_profile(OwnerProfile(owner_id="u1", display_name="Ada"))

        assert await logger.display_name("u1") == "Ada"
        assert await logger.display_name("u2") == "User"
        assert await logger.display_name(None) == "User"


class TestQueries:
    """History is newest first and truncated."""

    @pytest.mark.asyncio
    async def test_history_newest_first_with_default_limit(
        self, logger: ActivityLogger, repository: TaskRepositoryStub
    ) -> None:
        repository.add_task(OWNER, make_task("t1"))
        for minute in range(5):
            await logger.append(OWNER, "t1", _activity(minute, f"a{minute}"))

        history = await logger.history(OWNER, "t1")

        assert [a.details for a in history] == ["a4", "a3", "a2"]
        assert len(await logger.history(OWNER, "t1", limit=10)) == 5

    @pytest.mark.asyncio
    async def test_recent_across_tasks_merges_by_timestamp(
        self, logger: ActivityLogger, repository: TaskRepositoryStub
    ) -> None:
        repository.add_task(OWNER, make_task("a", title="A"))
        repository.add_task(OWNER, make_task("b", title="B"))
        await logger.append(OWNER, "a", _activity(1, "a1"))
        await logger.append(OWNER, "b", _activity(2, "b2"))
        await logger.append(OWNER, "a", _activity(3, "a3"))
        await logger.append(OWNER, "b", _activity(4, "b4"))

        feed = await logger.recent_across_tasks(OWNER, limit=3)

        assert [(e.task_title, e.activity.details) for e in feed] == [
            ("B", "b4"),
            ("A", "a3"),
            ("B", "b2"),
        ]
