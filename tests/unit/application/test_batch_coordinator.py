"""Unit tests for batch operations."""

from __future__ import annotations

import pytest

from src.application.services.task_engine import TaskEngine
from src.domain.models.task import ActivityType, TaskPriority, TaskStatus
from src.infrastructure.monitoring.metrics import TaskEngineMetrics
from src.infrastructure.stubs.task_repository_stub import TaskRepositoryStub
from tests.helpers import make_task, sample_total

OWNER = "owner-1"


@pytest.fixture
def three_tasks(repository: TaskRepositoryStub) -> list[str]:
    repository.add_task(OWNER, make_task("a", status=TaskStatus.TODO))
    repository.add_task(OWNER, make_task("b", status=TaskStatus.IN_PROGRESS))
    repository.add_task(
        OWNER, make_task("c", status=TaskStatus.BLOCKED, priority=TaskPriority.LOW)
    )
    return ["a", "b", "c"]


class TestBatchStatus:
    """Batch status changes narrate each task's own prior status."""

    @pytest.mark.asyncio
    async def test_batch_completion_appends_two_activities_per_task(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        three_tasks: list[str],
    ) -> None:
        result = await engine.update_batch_task_status(
            OWNER, three_tasks, TaskStatus.COMPLETED
        )

        assert result.all_succeeded
        assert result.succeeded == ("a", "b", "c")
        tasks = await repository.fetch_all(OWNER)
        assert sum(len(t.activities) for t in tasks) == 6
        for task in tasks:
            assert task.status == TaskStatus.COMPLETED
            assert task.completion_percentage == 100
            assert task.completed_at is not None
            assert [a.activity_type for a in task.activities] == [
                ActivityType.STATUS_CHANGE,
                ActivityType.COMPLETION,
            ]
            assert all(a.details.endswith("(batch update)") for a in task.activities)

    @pytest.mark.asyncio
    async def test_from_status_read_per_task(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        three_tasks: list[str],
    ) -> None:
        await engine.update_batch_task_status(OWNER, three_tasks, TaskStatus.IN_PROGRESS)

        details = {
            t.task_id: t.activities[0].details
            for t in await repository.fetch_all(OWNER)
        }
        assert details["a"] == "User moved task from todo to in-progress (batch update)"
        assert details["c"] == "User moved task from blocked to in-progress (batch update)"

    @pytest.mark.asyncio
    async def test_missing_id_reported_without_rollback(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        metrics: TaskEngineMetrics,
    ) -> None:
        repository.add_task(OWNER, make_task("a"))

        result = await engine.update_batch_task_status(
            OWNER, ["a", "ghost"], TaskStatus.COMPLETED
        )

        assert result.succeeded == ("a",)
        [failure] = result.failed
        assert failure.task_id == "ghost"
        assert failure.error_type == "TaskNotFoundError"
        assert (await repository.get(OWNER, "a")).status == TaskStatus.COMPLETED
        assert sample_total(metrics, "batch_task_failures_total", operation="status") == 1

    @pytest.mark.asyncio
    async def test_duplicate_ids_applied_once(
        self, engine: TaskEngine, repository: TaskRepositoryStub
    ) -> None:
        repository.add_task(OWNER, make_task("a"))

        result = await engine.update_batch_task_status(
            OWNER, ["a", "a"], TaskStatus.BLOCKED
        )

        assert result.succeeded == ("a",)
        assert len((await repository.get(OWNER, "a")).activities) == 1


class TestBatchPriorityTagsDelete:
    @pytest.mark.asyncio
    async def test_priority_narrates_previous_value(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        three_tasks: list[str],
    ) -> None:
        await engine.update_batch_task_priority(OWNER, ["a", "c"], TaskPriority.HIGH)

        a = await repository.get(OWNER, "a")
        c = await repository.get(OWNER, "c")
        assert a.priority == TaskPriority.HIGH
        assert a.activities[0].activity_type == ActivityType.PRIORITY_CHANGE
        assert a.activities[0].details == (
            "User changed priority from none to high (batch update)"
        )
        assert c.activities[0].details == (
            "User changed priority from low to high (batch update)"
        )

    @pytest.mark.asyncio
    async def test_tags_merged_without_duplicates(
        self, engine: TaskEngine, repository: TaskRepositoryStub
    ) -> None:
        repository.add_task(OWNER, make_task("a", tags=("urgent", "ops")))

        await engine.add_tags_to_batch_tasks(OWNER, ["a"], ["ops", "q3"])

        task = await repository.get(OWNER, "a")
        assert task.tags == ("urgent", "ops", "q3")
        assert task.activities[0].activity_type == ActivityType.TAG_UPDATE
        assert task.activities[0].details == "User added tags: ops, q3 (batch update)"

    @pytest.mark.asyncio
    async def test_delete(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        three_tasks: list[str],
    ) -> None:
        result = await engine.delete_batch_tasks(OWNER, ["a", "b", "missing"])

        assert result.succeeded == ("a", "b")
        assert [f.task_id for f in result.failed] == ["missing"]
        assert [t.task_id for t in await repository.fetch_all(OWNER)] == ["c"]
