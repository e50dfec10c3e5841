"""CommentService -- 任务评论

发表评论在任务级锁内校验任务状态，与任务状态流转串行；
删除评论在评论级锁内完成，同一评论只会成功删除一次。
"""

import structlog
from projectcamp.core.domain import comments
from projectcamp.core.errors import NotFoundError
from projectcamp.core.models import (
    Page,
    Pagination,
    SortOrder,
    TaskAction,
    TaskComment,
    User,
)
from projectcamp.core.store import (
    create_comment_with_activity,
    delete_comment_with_activity,
)

from .task_service import TaskService

log = structlog.get_logger()


class CommentService(TaskService):
    """评论业务服务 -- 复用 TaskService 的任务加载与权限校验"""

    async def add_comment(
        self,
        actor: User,
        task_id: str,
        content: str,
        mentions: list[str] | None = None,
    ) -> TaskComment:
        """assignee 在 active 任务上发表评论"""

        async def attempt() -> TaskComment:
            task, project = await self._load_task_with_project(task_id)
            comment, entry = comments.new_comment(
                task,
                project,
                self._snapshot(actor),
                content,
                self._clock(),
                mentions=mentions,
            )
            await create_comment_with_activity(self._stores, comment, entry)
            return comment

        comment = await self._with_retry(f"task:{task_id}", attempt)
        log.info("comment_added", task_id=task_id, comment_id=comment.comment_id)
        return comment

    async def list_comments(
        self,
        actor: User,
        task_id: str,
        pagination: Pagination,
        sort: SortOrder = SortOrder.ASC,
    ) -> Page[TaskComment]:
        """评论列表（assignee 或 owner）"""
        await self.require_permission(actor, task_id, TaskAction.VIEW_COMMENTS)
        items, total = await self._stores.comment_store.list_comments(
            task_id, pagination, sort
        )
        return Page[TaskComment].build(items, total, pagination)

    async def delete_comment(self, actor: User, task_id: str, comment_id: str) -> None:
        """作者删除自己的评论

        Raises:
            NotFoundError: 评论不存在或已被删除
            ForbiddenError: 调用者不是作者
        """

        async def attempt() -> None:
            task = await self._load_task(task_id)
            comment = await self._stores.comment_store.get_comment(comment_id)
            if comment is None:
                raise NotFoundError(
                    f"Comment {comment_id} does not exist", code="COMMENT_NOT_FOUND"
                )
            entry = comments.delete_comment(
                comment, task, self._snapshot(actor), self._clock()
            )
            await delete_comment_with_activity(self._stores, comment_id, entry)

        await self._with_retry(f"comment:{comment_id}", attempt)
        log.info("comment_deleted", task_id=task_id, comment_id=comment_id)
