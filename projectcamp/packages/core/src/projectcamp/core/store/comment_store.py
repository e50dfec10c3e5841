"""CommentStore SQLite 实现"""

import json

import aiosqlite

from ..models.comment import TaskComment
from ..models.enums import SortOrder
from ..models.page import Pagination
from .codec import from_db_ts, to_db_ts


class SqliteCommentStore:
    """CommentStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_comment(self, comment: TaskComment) -> None:
        """创建评论记录"""
        await self._conn.execute(
            """
            INSERT INTO task_comments (comment_id, task_id, project_id, commented_by,
                                       mentions, content, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                comment.comment_id,
                comment.task_id,
                comment.project_id,
                comment.commented_by,
                json.dumps(comment.mentions),
                comment.content,
                to_db_ts(comment.created_at),
                to_db_ts(comment.updated_at),
            ),
        )

    async def get_comment(self, comment_id: str) -> TaskComment | None:
        """根据 comment_id 查询评论"""
        cursor = await self._conn.execute(
            "SELECT * FROM task_comments WHERE comment_id = ?",
            (comment_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_comment(row)

    async def delete_comment(self, comment_id: str) -> bool:
        """删除评论，返回是否删除了记录"""
        cursor = await self._conn.execute(
            "DELETE FROM task_comments WHERE comment_id = ?",
            (comment_id,),
        )
        return cursor.rowcount > 0

    async def list_comments(
        self,
        task_id: str,
        pagination: Pagination,
        sort: SortOrder = SortOrder.ASC,
    ) -> tuple[list[TaskComment], int]:
        """查询任务评论，按 created_at 排序"""
        cursor = await self._conn.execute(
            "SELECT COUNT(*) FROM task_comments WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        total = row[0] if row else 0

        direction = "ASC" if sort == SortOrder.ASC else "DESC"
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM task_comments WHERE task_id = ?
            ORDER BY created_at {direction}, comment_id {direction}
            LIMIT ? OFFSET ?
            """,
            (task_id, pagination.limit, pagination.offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_comment(r) for r in rows], total

    @staticmethod
    def _row_to_comment(row: aiosqlite.Row) -> TaskComment:
        """将数据库行转换为 TaskComment 模型"""
        return TaskComment(
            comment_id=row["comment_id"],
            task_id=row["task_id"],
            project_id=row["project_id"],
            commented_by=row["commented_by"],
            mentions=json.loads(row["mentions"]) if row["mentions"] else [],
            content=row["content"],
            created_at=from_db_ts(row["created_at"]),
            updated_at=from_db_ts(row["updated_at"]),
        )
