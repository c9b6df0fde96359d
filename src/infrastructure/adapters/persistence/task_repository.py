"""PostgreSQL task repository (SQLAlchemy async).

One row per task, keyed by owner then task id. The task itself is stored
as a JSONB document in the persisted record shape (``Task.to_dict()``).

Schema:
    CREATE TABLE tasks (
        owner_id   TEXT NOT NULL,
        task_id    TEXT NOT NULL,
        document   JSONB NOT NULL,
        created_at TIMESTAMPTZ NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL,
        PRIMARY KEY (owner_id, task_id)
    )

Transport failures (SQLAlchemy errors, socket errors) surface as
StoreUnavailableError. The repository never retries.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any
from uuid import uuid4

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.domain.errors.task import (
    StoreUnavailableError,
    TaskNotFoundError,
    TaskValidationError,
)
from src.domain.models.task import SYSTEM_MANAGED_FIELDS, Activity, Task, TaskInput

log = structlog.get_logger()

CREATE_TASKS_TABLE = """
CREATE TABLE IF NOT EXISTS tasks (
    owner_id   TEXT NOT NULL,
    task_id    TEXT NOT NULL,
    document   JSONB NOT NULL,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL,
    PRIMARY KEY (owner_id, task_id)
)
"""

CREATE_OWNER_INDEX = """
CREATE INDEX IF NOT EXISTS idx_tasks_owner_created
    ON tasks (owner_id, created_at)
"""


def _load_document(raw: Any) -> Task:
    data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    return Task.from_dict(data)


class PostgresTaskRepository(TaskRepositoryProtocol):
    """TaskRepositoryProtocol backed by PostgreSQL."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        time_authority: TimeAuthorityProtocol,
        poll_interval_seconds: float = 2.0,
    ) -> None:
        """Initialize the repository.

        Args:
            session_factory: SQLAlchemy async session factory.
            time_authority: Clock for ``created_at``/``updated_at``.
            poll_interval_seconds: Subscription re-read interval.
        """
        self._session_factory = session_factory
        self._time = time_authority
        self._poll_interval = poll_interval_seconds

    async def create_schema(self) -> None:
        """Create the tasks table and index if they do not exist."""
        async with self._transport("create_schema"):
            async with self._session_factory() as session:
                await session.execute(text(CREATE_TASKS_TABLE))
                await session.execute(text(CREATE_OWNER_INDEX))
                await session.commit()

    async def fetch_all(self, owner_id: str) -> list[Task]:
        async with self._transport("fetch_all", owner_id=owner_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        SELECT document FROM tasks
                        WHERE owner_id = :owner_id
                        ORDER BY created_at, task_id
                    """),
                    {"owner_id": owner_id},
                )
                return [_load_document(row.document) for row in result]

    async def get(self, owner_id: str, task_id: str) -> Task:
        async with self._transport("get", owner_id=owner_id, task_id=task_id):
            async with self._session_factory() as session:
                task = await self._select(session, owner_id, task_id, for_update=False)
        return task

    async def create(self, owner_id: str, task_input: TaskInput) -> str:
        task_id = uuid4().hex
        task = Task.from_input(task_id, task_input, self._time.now())
        async with self._transport("create", owner_id=owner_id, task_id=task_id):
            async with self._session_factory() as session:
                await session.execute(
                    text("""
                        INSERT INTO tasks (owner_id, task_id, document, created_at, updated_at)
                        VALUES (:owner_id, :task_id, CAST(:document AS JSONB),
                                :created_at, :updated_at)
                    """),
                    {
                        "owner_id": owner_id,
                        "task_id": task_id,
                        "document": json.dumps(task.to_dict()),
                        "created_at": task.created_at,
                        "updated_at": task.updated_at,
                    },
                )
                await session.commit()
        return task_id

    async def update(
        self, owner_id: str, task_id: str, changes: Mapping[str, Any]
    ) -> None:
        managed = set(changes) & SYSTEM_MANAGED_FIELDS
        if managed:
            raise TaskValidationError(
                f"System managed fields cannot be updated: {sorted(managed)}"
            )
        async with self._transport("update", owner_id=owner_id, task_id=task_id):
            async with self._session_factory() as session:
                task = await self._select(session, owner_id, task_id, for_update=True)
                updated = task.with_changes(**dict(changes))
                await self._write(session, owner_id, updated, task.updated_at)
                await session.commit()

    async def delete(self, owner_id: str, task_id: str) -> None:
        async with self._transport("delete", owner_id=owner_id, task_id=task_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        DELETE FROM tasks
                        WHERE owner_id = :owner_id AND task_id = :task_id
                    """),
                    {"owner_id": owner_id, "task_id": task_id},
                )
                if result.rowcount == 0:
                    raise TaskNotFoundError(owner_id, task_id)
                await session.commit()

    async def append_activity(
        self, owner_id: str, task_id: str, activity: Activity
    ) -> None:
        async with self._transport(
            "append_activity", owner_id=owner_id, task_id=task_id
        ):
            async with self._session_factory() as session:
                task = await self._select(session, owner_id, task_id, for_update=True)
                await self._write(
                    session, owner_id, task.with_activity(activity), task.updated_at
                )
                await session.commit()

    def subscribe(self, owner_id: str) -> PollingTaskSubscription:
        return PollingTaskSubscription(self, owner_id, self._poll_interval)

    async def _select(
        self,
        session: AsyncSession,
        owner_id: str,
        task_id: str,
        for_update: bool,
    ) -> Task:
        lock = " FOR UPDATE" if for_update else ""
        result = await session.execute(
            text(
                "SELECT document FROM tasks "
                "WHERE owner_id = :owner_id AND task_id = :task_id" + lock
            ),
            {"owner_id": owner_id, "task_id": task_id},
        )
        row = result.first()
        if row is None:
            raise TaskNotFoundError(owner_id, task_id)
        return _load_document(row.document)

    async def _write(
        self,
        session: AsyncSession,
        owner_id: str,
        task: Task,
        previous_updated_at: datetime,
    ) -> None:
        touched = task.with_changes(
            updated_at=max(self._time.now(), previous_updated_at)
        )
        await session.execute(
            text("""
                UPDATE tasks
                SET document = CAST(:document AS JSONB), updated_at = :updated_at
                WHERE owner_id = :owner_id AND task_id = :task_id
            """),
            {
                "owner_id": owner_id,
                "task_id": task.task_id,
                "document": json.dumps(touched.to_dict()),
                "updated_at": touched.updated_at,
            },
        )

    @asynccontextmanager
    async def _transport(self, operation: str, **context: str) -> AsyncIterator[None]:
        """Translate transport failures into StoreUnavailableError."""
        try:
            yield
        except (SQLAlchemyError, OSError) as exc:
            log.error(
                "task_store_unavailable",
                operation=operation,
                error_type=type(exc).__name__,
                error=str(exc),
                **context,
            )
            raise StoreUnavailableError(
                f"Task store unavailable during {operation}: {exc}"
            ) from exc


class PollingTaskSubscription:
    """Subscription that re-reads the owner's collection on an interval.

    The first snapshot is delivered immediately; later snapshots only when
    the collection differs from the last one delivered.
    """

    def __init__(
        self,
        repository: PostgresTaskRepository,
        owner_id: str,
        poll_interval_seconds: float,
    ) -> None:
        self._repository = repository
        self.owner_id = owner_id
        self._interval = poll_interval_seconds
        self._closed = asyncio.Event()
        self._last: list[dict[str, Any]] | None = None

    @property
    def is_active(self) -> bool:
        return not self._closed.is_set()

    def unsubscribe(self) -> None:
        self._closed.set()

    def __aiter__(self) -> PollingTaskSubscription:
        return self

    async def __anext__(self) -> list[Task]:
        while True:
            if self._closed.is_set():
                raise StopAsyncIteration
            if self._last is not None:
                closer = asyncio.ensure_future(self._closed.wait())
                done, _ = await asyncio.wait({closer}, timeout=self._interval)
                if not done:
                    closer.cancel()
                if self._closed.is_set():
                    raise StopAsyncIteration
            tasks = await self._repository.fetch_all(self.owner_id)
            documents = [t.to_dict() for t in tasks]
            if documents != self._last:
                self._last = documents
                return tasks
