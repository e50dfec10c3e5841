"""任务评论

评论写入与删除都会在任务日志中追加条目；删除在任何任务状态下都允许，仅限作者本人。
"""

from datetime import datetime

from ulid import ULID

from ..errors import ConflictError, ForbiddenError, ValidationFailedError
from ..models.activity import ActivityLogEntry
from ..models.comment import TaskComment
from ..models.enums import TaskAction, TaskActivityType
from ..models.payloads import CommentPayload
from ..models.project import Project
from ..models.task import Task
from ..models.user import ActorSnapshot
from .ledger import task_entry
from .task_engine import can

# 日志 metadata 中评论预览的最大长度
PREVIEW_LENGTH = 200


def _preview(content: str) -> str:
    if len(content) <= PREVIEW_LENGTH:
        return content
    return content[: PREVIEW_LENGTH - 3] + "..."


def new_comment(
    task: Task,
    project: Project,
    author: ActorSnapshot,
    content: str,
    now: datetime,
    mentions: list[str] | None = None,
) -> tuple[TaskComment, ActivityLogEntry]:
    """创建评论

    Raises:
        ForbiddenError: 作者不是 assignee，或任务已完成
        ValidationFailedError: 内容为空，或提及了非项目成员
    """
    if not can(task, TaskAction.ADD_COMMENT, author.user_id, project):
        raise ForbiddenError(
            "Only assigned members can comment on an active task",
            code="CANNOT_COMMENT",
        )
    text = content.strip()
    if not text:
        raise ValidationFailedError(
            "Comment content is required", code="CONTENT_REQUIRED"
        )

    # 去重并保持顺序
    unique_mentions = list(dict.fromkeys(mentions or []))
    outsiders = [uid for uid in unique_mentions if not project.has_member(uid)]
    if outsiders:
        raise ValidationFailedError(
            f"Mentioned users are not project members: {', '.join(outsiders)}",
            code="MENTION_NOT_MEMBER",
        )

    comment = TaskComment(
        comment_id=str(ULID()),
        task_id=task.task_id,
        project_id=task.project_id,
        commented_by=author.user_id,
        mentions=unique_mentions,
        content=text,
        created_at=now,
        updated_at=now,
    )
    entry = task_entry(
        task.task_id,
        task.project_id,
        TaskActivityType.COMMENT_ADDED,
        author,
        now,
        payload=CommentPayload(
            comment_id=comment.comment_id,
            content_preview=_preview(text),
            mentions=unique_mentions,
        ),
    )
    return comment, entry


def delete_comment(
    comment: TaskComment,
    task: Task,
    actor: ActorSnapshot,
    now: datetime,
) -> ActivityLogEntry:
    """删除评论，返回 COMMENT_DELETED 条目

    Raises:
        ConflictError: 评论不属于该任务
        ForbiddenError: 调用者不是作者
    """
    if comment.task_id != task.task_id:
        raise ConflictError(
            "Comment does not belong to this task", code="COMMENT_TASK_MISMATCH"
        )
    if comment.commented_by != actor.user_id:
        raise ForbiddenError(
            "Only the author can delete this comment", code="NOT_COMMENT_AUTHOR"
        )
    return task_entry(
        task.task_id,
        task.project_id,
        TaskActivityType.COMMENT_DELETED,
        actor,
        now,
        payload=CommentPayload(comment_id=comment.comment_id),
    )
