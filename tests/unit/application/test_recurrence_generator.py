"""Unit tests for recurring task regeneration on list load."""

from __future__ import annotations

from datetime import timedelta

import pytest

from src.application.services.task_engine import TaskEngine
from src.bootstrap.task_engine import build_task_engine
from src.config.task_engine_config import EPHEMERAL_RECURRENCE_TASK_ENGINE_CONFIG
from src.domain.models.advisory import AdvisoryLevel, AdvisoryType
from src.domain.models.task import (
    RecurringTaskConfig,
    Task,
    TaskPriority,
    TaskStatus,
)
from src.infrastructure.monitoring.metrics import TaskEngineMetrics
from src.infrastructure.stubs.notification_dispatcher_stub import (
    NotificationDispatcherStub,
)
from src.infrastructure.stubs.task_repository_stub import TaskRepositoryStub
from tests.helpers import FakeTimeAuthority, make_task, sample_total

OWNER = "owner-1"


def _recurring_source(
    fake_time: FakeTimeAuthority,
    task_id: str = "source",
    **config: object,
) -> Task:
    occurrence = fake_time.now() - timedelta(hours=1)
    return make_task(
        task_id,
        title="Water plants",
        status=TaskStatus.COMPLETED,
        completion_percentage=100,
        priority=TaskPriority.LOW,
        tags=("home",),
        due_date=occurrence + timedelta(hours=2),
        dependencies=("other",),
        recurring_config=RecurringTaskConfig(
            next_occurrence=occurrence, **config  # type: ignore[arg-type]
        ),
    )


def _successors(tasks: list[Task], source_id: str = "source") -> list[Task]:
    return [t for t in tasks if t.task_id != source_id and t.title == "Water plants"]


class TestPersistedRegeneration:
    """Default behaviour: successors are written through the repository."""

    @pytest.mark.asyncio
    async def test_completed_due_task_spawns_successor(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
    ) -> None:
        source = _recurring_source(fake_time, pattern="weekly", interval=2)
        repository.add_task(OWNER, source)

        tasks = await engine.fetch_tasks(OWNER)

        [successor] = _successors(tasks)
        assert successor.status == TaskStatus.TODO
        assert successor.priority == TaskPriority.LOW
        assert successor.tags == ("home",)
        assert successor.dependencies == ()
        assert successor.total_elapsed_time == 0
        assert successor.completion_percentage == 0
        config = successor.recurring_config
        assert config is not None
        assert source.recurring_config is not None
        assert source.due_date is not None
        original_occurrence = source.recurring_config.next_occurrence
        assert original_occurrence is not None
        assert config.next_occurrence == original_occurrence + timedelta(weeks=2)
        assert config.occurrences_completed == 1
        assert config.successor_task_id is None
        assert successor.due_date == source.due_date + timedelta(weeks=2)
        assert successor.last_activity is not None
        assert successor.last_activity.details == "Recurring task created"

    @pytest.mark.asyncio
    async def test_source_records_bookkeeping_without_reopening(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
    ) -> None:
        repository.add_task(OWNER, _recurring_source(fake_time))

        tasks = await engine.fetch_tasks(OWNER)

        [successor] = _successors(tasks)
        source = await repository.get(OWNER, "source")
        assert source.status == TaskStatus.COMPLETED
        assert source.recurring_config is not None
        assert source.recurring_config.occurrences_completed == 1
        assert source.recurring_config.successor_task_id == successor.task_id

    @pytest.mark.asyncio
    async def test_second_load_creates_nothing(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
    ) -> None:
        repository.add_task(OWNER, _recurring_source(fake_time))

        await engine.fetch_tasks(OWNER)
        tasks = await engine.fetch_tasks(OWNER)

        assert len(tasks) == 2
        assert len(await repository.fetch_all(OWNER)) == 2

    @pytest.mark.asyncio
    async def test_one_advisory_per_pass(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
        dispatcher: NotificationDispatcherStub,
        metrics: TaskEngineMetrics,
    ) -> None:
        repository.add_task(OWNER, _recurring_source(fake_time, "a"))
        repository.add_task(OWNER, _recurring_source(fake_time, "b"))

        await engine.fetch_tasks(OWNER)

        [advisory] = dispatcher.of_type(AdvisoryType.RECURRING_TASKS_CREATED)
        assert advisory.level == AdvisoryLevel.INFO
        assert advisory.message == "2 recurring tasks created"
        assert advisory.data == {"count": 2}
        assert sample_total(metrics, "recurring_tasks_generated_total") == 2

    @pytest.mark.asyncio
    async def test_end_after_occurrences_stops_regeneration(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
        dispatcher: NotificationDispatcherStub,
    ) -> None:
        repository.add_task(
            OWNER,
            _recurring_source(
                fake_time, end_after_occurrences=3, occurrences_completed=3
            ),
        )

        tasks = await engine.fetch_tasks(OWNER)

        assert len(tasks) == 1
        assert dispatcher.advisories == []

    @pytest.mark.asyncio
    async def test_future_occurrence_not_due(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
    ) -> None:
        repository.add_task(OWNER, _recurring_source(fake_time))
        fake_time.set_time(fake_time.now() - timedelta(days=1))

        assert len(await engine.fetch_tasks(OWNER)) == 1

    @pytest.mark.asyncio
    async def test_open_recurring_task_not_regenerated(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
    ) -> None:
        source = _recurring_source(fake_time).with_changes(status=TaskStatus.IN_PROGRESS)
        repository.add_task(OWNER, source)

        assert len(await engine.fetch_tasks(OWNER)) == 1


class TestEphemeralRegeneration:
    """With persistence disabled successors live only in the returned list."""

    @pytest.fixture
    def ephemeral_engine(
        self,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
        dispatcher: NotificationDispatcherStub,
        metrics: TaskEngineMetrics,
    ) -> TaskEngine:
        return build_task_engine(
            EPHEMERAL_RECURRENCE_TASK_ENGINE_CONFIG,
            repository=repository,
            time_authority=fake_time,
            dispatcher=dispatcher,
            metrics=metrics,
        )

    @pytest.mark.asyncio
    async def test_successor_returned_but_not_stored(
        self,
        ephemeral_engine: TaskEngine,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
    ) -> None:
        repository.add_task(OWNER, _recurring_source(fake_time))

        tasks = await ephemeral_engine.fetch_tasks(OWNER)

        [successor] = _successors(tasks)
        assert successor.last_activity is not None
        assert successor.last_activity.details == "Recurring task created"
        stored = await repository.fetch_all(OWNER)
        assert [t.task_id for t in stored] == ["source"]
        assert stored[0].recurring_config is not None
        assert stored[0].recurring_config.occurrences_completed == 0

    @pytest.mark.asyncio
    async def test_source_in_returned_list_carries_bookkeeping(
        self,
        ephemeral_engine: TaskEngine,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
    ) -> None:
        repository.add_task(OWNER, _recurring_source(fake_time))

        tasks = await ephemeral_engine.fetch_tasks(OWNER)

        source = next(t for t in tasks if t.task_id == "source")
        assert source.recurring_config is not None
        assert source.recurring_config.occurrences_completed == 1
