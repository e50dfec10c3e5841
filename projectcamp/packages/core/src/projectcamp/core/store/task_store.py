"""TaskStore SQLite 实现

assigned_to 以 JSON 数组存储；更新带版本校验，与 ProjectStore 相同。
"""

import json

import aiosqlite

from ..errors import StaleWriteError
from ..models.enums import TaskStatus
from ..models.page import Pagination
from ..models.task import Task
from .codec import from_db_ts, to_db_ts


class SqliteTaskStore:
    """TaskStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_task(self, task: Task) -> None:
        """创建任务记录"""
        await self._conn.execute(
            """
            INSERT INTO tasks (task_id, title, description, project_id, created_by,
                               assigned_to, completion_deadline, task_status,
                               version, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                task.task_id,
                task.title,
                task.description,
                task.project_id,
                task.created_by,
                json.dumps(task.assigned_to),
                to_db_ts(task.completion_deadline),
                task.task_status.value,
                task.version,
                to_db_ts(task.created_at),
                to_db_ts(task.updated_at),
            ),
        )

    async def get_task(self, task_id: str) -> Task | None:
        """根据 task_id 查询任务"""
        cursor = await self._conn.execute(
            "SELECT * FROM tasks WHERE task_id = ?",
            (task_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_task(row)

    async def save_task(self, task: Task) -> Task:
        """版本校验写入

        Raises:
            StaleWriteError: 数据库中的版本已不是 task.version
        """
        cursor = await self._conn.execute(
            """
            UPDATE tasks
            SET title = ?, description = ?, assigned_to = ?,
                completion_deadline = ?, task_status = ?,
                version = version + 1, updated_at = ?
            WHERE task_id = ? AND version = ?
            """,
            (
                task.title,
                task.description,
                json.dumps(task.assigned_to),
                to_db_ts(task.completion_deadline),
                task.task_status.value,
                to_db_ts(task.updated_at),
                task.task_id,
                task.version,
            ),
        )
        if cursor.rowcount == 0:
            raise StaleWriteError("task", task.task_id, task.version)
        return task.model_copy(update={"version": task.version + 1})

    async def list_tasks_for_project(
        self,
        project_id: str,
        pagination: Pagination,
        status: TaskStatus | None = None,
    ) -> tuple[list[Task], int]:
        """查询项目内任务，按 created_at 倒序，可按状态筛选"""
        where = "project_id = ?"
        params: tuple = (project_id,)
        if status is not None:
            where += " AND task_status = ?"
            params = (*params, status.value)

        cursor = await self._conn.execute(
            f"SELECT COUNT(*) FROM tasks WHERE {where}", params
        )
        row = await cursor.fetchone()
        total = row[0] if row else 0

        cursor = await self._conn.execute(
            f"""
            SELECT * FROM tasks WHERE {where}
            ORDER BY created_at DESC, task_id DESC
            LIMIT ? OFFSET ?
            """,
            (*params, pagination.limit, pagination.offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_task(r) for r in rows], total

    @staticmethod
    def _row_to_task(row: aiosqlite.Row) -> Task:
        """将数据库行转换为 Task 模型"""
        return Task(
            task_id=row["task_id"],
            title=row["title"],
            description=row["description"],
            project_id=row["project_id"],
            created_by=row["created_by"],
            assigned_to=json.loads(row["assigned_to"]) if row["assigned_to"] else [],
            completion_deadline=from_db_ts(row["completion_deadline"]),
            task_status=TaskStatus(row["task_status"]),
            version=row["version"],
            created_at=from_db_ts(row["created_at"]),
            updated_at=from_db_ts(row["updated_at"]),
        )
