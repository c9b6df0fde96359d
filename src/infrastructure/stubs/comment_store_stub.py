"""Comment store stub implementation."""

from __future__ import annotations

from src.application.ports.comment_store import CommentStoreProtocol
from src.domain.models.comment import TaskComment


class CommentStoreStub(CommentStoreProtocol):
    """In-memory comment storage keyed by owner, task and comment id."""

    def __init__(self) -> None:
        self._comments: dict[tuple[str, str], dict[str, TaskComment]] = {}

    async def save(self, owner_id: str, comment: TaskComment) -> None:
        self._comments.setdefault((owner_id, comment.task_id), {})[
            comment.comment_id
        ] = comment

    async def get(
        self, owner_id: str, task_id: str, comment_id: str
    ) -> TaskComment | None:
        return self._comments.get((owner_id, task_id), {}).get(comment_id)

    async def list_for_task(self, owner_id: str, task_id: str) -> list[TaskComment]:
        comments = list(self._comments.get((owner_id, task_id), {}).values())
        comments.sort(key=lambda c: c.created_at)
        return comments

    async def delete(self, owner_id: str, task_id: str, comment_id: str) -> None:
        comments = self._comments.get((owner_id, task_id), {})
        comments.pop(comment_id, None)
        replies = [c.comment_id for c in comments.values() if c.parent_comment_id == comment_id]
        for reply_id in replies:
            comments.pop(reply_id, None)

    def clear(self) -> None:
        self._comments.clear()
