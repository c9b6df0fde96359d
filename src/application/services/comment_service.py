"""Comment service.

Comments are stored by the comment store; the engine's part is appending
a ``comment`` activity when one is posted and refusing to let users delete
comments they did not write.
"""

from __future__ import annotations

from collections.abc import Sequence
from uuid import uuid4

import structlog

from src.application.ports.comment_store import CommentStoreProtocol
from src.application.ports.task_repository import TaskRepositoryProtocol
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.application.services.activity_logger import ActivityLogger
from src.domain.errors.task import (
    CommentNotFoundError,
    PermissionDeniedError,
    TaskValidationError,
)
from src.domain.models.comment import TaskComment
from src.domain.models.task import ActivityType
from src.domain.services import narration

log = structlog.get_logger()


class CommentService:
    """Posts, lists and deletes task comments."""

    def __init__(
        self,
        comment_store: CommentStoreProtocol,
        repository: TaskRepositoryProtocol,
        activity_logger: ActivityLogger,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        self._comments = comment_store
        self._repository = repository
        self._activities = activity_logger
        self._time = time_authority

    async def add_comment(
        self,
        owner_id: str,
        task_id: str,
        author_id: str,
        content: str,
        attachments: Sequence[str] = (),
    ) -> TaskComment:
        """Post a top-level comment on a task.

        Raises:
            TaskNotFoundError: If the task does not exist.
            TaskValidationError: If the comment is empty.
        """
        return await self._post(owner_id, task_id, author_id, content, attachments, None)

    async def reply(
        self,
        owner_id: str,
        task_id: str,
        parent_comment_id: str,
        author_id: str,
        content: str,
        attachments: Sequence[str] = (),
    ) -> TaskComment:
        """Post a reply to an existing comment.

        Raises:
            TaskNotFoundError: If the task does not exist.
            CommentNotFoundError: If the parent comment does not exist.
            TaskValidationError: If the reply is empty.
        """
        parent = await self._comments.get(owner_id, task_id, parent_comment_id)
        if parent is None:
            raise CommentNotFoundError(task_id, parent_comment_id)
        return await self._post(
            owner_id, task_id, author_id, content, attachments, parent_comment_id
        )

    async def list_comments(self, owner_id: str, task_id: str) -> list[TaskComment]:
        await self._repository.get(owner_id, task_id)
        return await self._comments.list_for_task(owner_id, task_id)

    async def delete_comment(
        self, owner_id: str, task_id: str, comment_id: str, actor_id: str
    ) -> None:
        """Delete a comment written by ``actor_id``.

        Raises:
            CommentNotFoundError: If the comment does not exist.
            PermissionDeniedError: If the actor is not the author.
        """
        comment = await self._comments.get(owner_id, task_id, comment_id)
        if comment is None:
            raise CommentNotFoundError(task_id, comment_id)
        if comment.author_id != actor_id:
            log.warning(
                "comment_delete_denied",
                owner_id=owner_id,
                task_id=task_id,
                comment_id=comment_id,
                actor_id=actor_id,
            )
            raise PermissionDeniedError(actor_id, comment_id)
        await self._comments.delete(owner_id, task_id, comment_id)
        log.info(
            "comment_deleted", owner_id=owner_id, task_id=task_id, comment_id=comment_id
        )

    async def _post(
        self,
        owner_id: str,
        task_id: str,
        author_id: str,
        content: str,
        attachments: Sequence[str],
        parent_comment_id: str | None,
    ) -> TaskComment:
        if not content or not content.strip():
            raise TaskValidationError("Comment content must not be empty")
        await self._repository.get(owner_id, task_id)

        comment = TaskComment(
            comment_id=uuid4().hex,
            task_id=task_id,
            author_id=author_id,
            content=content,
            created_at=self._time.now(),
            parent_comment_id=parent_comment_id,
            attachments=tuple(attachments),
        )
        await self._comments.save(owner_id, comment)

        user_name = await self._activities.display_name(author_id)
        await self._activities.record(
            owner_id,
            task_id,
            ActivityType.COMMENT,
            narration.comment_added(user_name, is_reply=comment.is_reply),
        )
        log.info(
            "comment_posted",
            owner_id=owner_id,
            task_id=task_id,
            comment_id=comment.comment_id,
            is_reply=comment.is_reply,
        )
        return comment
