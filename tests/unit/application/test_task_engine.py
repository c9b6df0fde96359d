"""Unit tests for the TaskEngine facade."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.application.services.task_engine import TaskEngine
from src.domain.errors.task import TaskNotFoundError, TaskValidationError
from src.domain.models.task import (
    ActivityType,
    TaskInput,
    TaskPriority,
    TaskStatus,
)
from src.infrastructure.stubs.task_repository_stub import TaskRepositoryStub
from tests.helpers import FakeTimeAuthority, make_task

OWNER = "owner-1"


class TestCreateTask:
    @pytest.mark.asyncio
    async def test_create_initializes_system_fields(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
    ) -> None:
        task_id = await engine.create_task(
            OWNER,
            TaskInput(title="Plan sprint", estimated_duration=30, tags=("a", "a", "b")),
        )

        task = await repository.get(OWNER, task_id)
        assert task.created_at == task.updated_at == fake_time.now()
        assert task.is_timer_running is False
        assert task.total_elapsed_time == 0
        assert task.completion_percentage == 0
        assert task.tags == ("a", "b")
        assert [a.details for a in task.activities] == ["User created this task"]

    @pytest.mark.asyncio
    async def test_blank_title_rejected(
        self, engine: TaskEngine, repository: TaskRepositoryStub
    ) -> None:
        with pytest.raises(TaskValidationError):
            await engine.create_task(OWNER, TaskInput(title="", estimated_duration=30))
        assert await repository.fetch_all(OWNER) == []

    @pytest.mark.asyncio
    async def test_non_positive_duration_rejected(self, engine: TaskEngine) -> None:
        with pytest.raises(TaskValidationError):
            await engine.create_task(OWNER, TaskInput(title="x", estimated_duration=0))


class TestUpdateTask:
    """Partial updates are validated, written and narrated once."""

    @pytest.mark.asyncio
    async def test_priority_only_update(
        self, engine: TaskEngine, repository: TaskRepositoryStub
    ) -> None:
        repository.add_task(OWNER, make_task("t1", priority=TaskPriority.LOW))

        await engine.update_task(OWNER, "t1", {"priority": TaskPriority.HIGH})

        task = await repository.get(OWNER, "t1")
        assert task.priority == TaskPriority.HIGH
        [activity] = task.activities
        assert activity.activity_type == ActivityType.PRIORITY_CHANGE
        assert activity.details == "User changed priority from low to high"

    @pytest.mark.asyncio
    async def test_dependencies_update(
        self, engine: TaskEngine, repository: TaskRepositoryStub
    ) -> None:
        repository.add_task(OWNER, make_task("t1"))

        await engine.update_task(OWNER, "t1", {"dependencies": ("a", "b")})

        [activity] = (await repository.get(OWNER, "t1")).activities
        assert activity.activity_type == ActivityType.DEPENDENCY_UPDATE
        assert activity.details == "User updated dependencies (2 total)"

    @pytest.mark.asyncio
    async def test_generic_fields_update(
        self, engine: TaskEngine, repository: TaskRepositoryStub
    ) -> None:
        repository.add_task(OWNER, make_task("t1"))

        await engine.update_task(
            OWNER, "t1", {"title": "New", "tags": ("x",), "description": "d"}
        )

        task = await repository.get(OWNER, "t1")
        assert task.title == "New"
        [activity] = task.activities
        assert activity.activity_type == ActivityType.TAG_UPDATE
        assert activity.details == "User updated description, tags, title"

    @pytest.mark.asyncio
    async def test_status_change_goes_through_lifecycle(
        self, engine: TaskEngine, repository: TaskRepositoryStub
    ) -> None:
        repository.add_task(OWNER, make_task("t1"))

        await engine.update_task(OWNER, "t1", {"title": "Done", "status": "completed"})

        task = await repository.get(OWNER, "t1")
        assert task.status == TaskStatus.COMPLETED
        assert task.completion_percentage == 100
        assert [a.activity_type for a in task.activities] == [
            ActivityType.STATUS_CHANGE,
            ActivityType.STATUS_CHANGE,
            ActivityType.COMPLETION,
        ]

    @pytest.mark.asyncio
    async def test_fields_and_status_append_one_activity_each(
        self, engine: TaskEngine, repository: TaskRepositoryStub
    ) -> None:
        repository.add_task(OWNER, make_task("t1"))

        await engine.update_task(
            OWNER, "t1", {"title": "Started", "status": "in-progress"}
        )

        task = await repository.get(OWNER, "t1")
        assert [a.details for a in task.activities] == [
            "User updated title",
            "User moved task from todo to in-progress",
        ]

    @pytest.mark.parametrize(
        "changes",
        [
            {"created_at": None},
            {"activities": ()},
            {"colour": "red"},
            {"title": "  "},
            {"estimated_duration": 0},
            {"total_elapsed_time": 0},
            {"completion_percentage": 500},
            {"is_timer_running": True},
            {"start_time": None},
            {"completed_at": None},
        ],
    )
    @pytest.mark.asyncio
    async def test_invalid_changes_rejected(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        changes: dict[str, object],
    ) -> None:
        repository.add_task(OWNER, make_task("t1"))

        with pytest.raises(TaskValidationError):
            await engine.update_task(OWNER, "t1", changes)

        assert (await repository.get(OWNER, "t1")).activities == ()

    @pytest.mark.asyncio
    async def test_tracked_time_and_completion_cannot_be_rewritten(
        self,
        engine: TaskEngine,
        repository: TaskRepositoryStub,
        fake_time: FakeTimeAuthority,
    ) -> None:
        task_id = await engine.create_task(
            OWNER, TaskInput(title="Review", estimated_duration=30)
        )
        await engine.update_task_timer(OWNER, task_id, is_running=True)
        fake_time.advance(minutes=10)
        await engine.update_task_timer(OWNER, task_id, is_running=False)
        await engine.update_task_status(OWNER, task_id, TaskStatus.COMPLETED)
        before = await repository.get(OWNER, task_id)

        with pytest.raises(TaskValidationError, match="total_elapsed_time"):
            await engine.update_task(
                OWNER,
                task_id,
                {"total_elapsed_time": 0, "completion_percentage": 500},
            )

        task = await repository.get(OWNER, task_id)
        assert task == before
        assert task.total_elapsed_time == 600_000
        assert task.completion_percentage == 100
        assert task.status == TaskStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_update_missing_task(self, engine: TaskEngine) -> None:
        with pytest.raises(TaskNotFoundError):
            await engine.update_task(OWNER, "missing", {"title": "x"})


class TestMetadataAndDelete:
    @pytest.mark.asyncio
    async def test_metadata_merge_keeps_unknown_keys(
        self, engine: TaskEngine, repository: TaskRepositoryStub
    ) -> None:
        repository.add_task(OWNER, make_task("t1"))

        await engine.update_task_metadata(
            OWNER,
            "t1",
            {"complexity": "high", "skill_requirements": ["go"], "color": "blue"},
        )

        metadata = (await repository.get(OWNER, "t1")).metadata
        assert metadata.complexity == "high"
        assert metadata.skill_requirements == ("go",)
        assert metadata.extra == {"color": "blue"}

    @pytest.mark.asyncio
    async def test_delete_removes_task(
        self, engine: TaskEngine, repository: TaskRepositoryStub
    ) -> None:
        repository.add_task(OWNER, make_task("t1"))

        await engine.delete_task(OWNER, "t1")

        with pytest.raises(TaskNotFoundError):
            await repository.get(OWNER, "t1")


class TestFetchTasks:
    @pytest.mark.asyncio
    async def test_fetch_runs_recurrence_pass(self, engine: TaskEngine) -> None:
        engine.recurrence.process = AsyncMock(wraps=engine.recurrence.process)  # type: ignore[method-assign]

        await engine.fetch_tasks(OWNER)

        engine.recurrence.process.assert_awaited_once_with(OWNER, [])
