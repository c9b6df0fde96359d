"""Task comment model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TaskComment:
    """A comment posted on a task.

    Comments are stored outside the task record; the lifecycle engine only
    sees them through the ``comment`` activity appended when one is posted.

    Attributes:
        comment_id: Unique id assigned by the comment store.
        task_id: Task the comment belongs to.
        author_id: User who posted the comment.
        content: Comment body.
        created_at: When the comment was posted.
        parent_comment_id: Comment this one replies to, if any.
        attachments: Opaque attachment references (URLs or storage keys).
        edited_at: When the body was last edited.
    """

    comment_id: str
    task_id: str
    author_id: str
    content: str
    created_at: datetime
    parent_comment_id: str | None = None
    attachments: tuple[str, ...] = ()
    edited_at: datetime | None = None

    @property
    def is_reply(self) -> bool:
        return self.parent_comment_id is not None
