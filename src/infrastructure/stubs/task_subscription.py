"""Queue-backed task subscription used by the in-memory repository."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

from src.domain.models.task import Task


class TaskSubscription:
    """Async iterator of task-list snapshots with explicit unsubscribe.

    Snapshots are queued as they are pushed; a consumer that falls behind
    sees every intermediate snapshot in order.
    """

    def __init__(
        self,
        owner_id: str,
        on_close: Callable[[TaskSubscription], None] | None = None,
    ) -> None:
        self.owner_id = owner_id
        self._queue: asyncio.Queue[list[Task] | None] = asyncio.Queue()
        self._active = True
        self._on_close = on_close

    @property
    def is_active(self) -> bool:
        return self._active

    def push(self, snapshot: list[Task]) -> None:
        """Queue a snapshot for the consumer (ignored once closed)."""
        if self._active:
            self._queue.put_nowait(list(snapshot))

    def unsubscribe(self) -> None:
        """End the iteration after already-queued snapshots are consumed."""
        if not self._active:
            return
        self._active = False
        self._queue.put_nowait(None)
        if self._on_close is not None:
            self._on_close(self)

    def __aiter__(self) -> TaskSubscription:
        return self

    async def __anext__(self) -> list[Task]:
        snapshot = await self._queue.get()
        if snapshot is None:
            raise StopAsyncIteration
        return snapshot
