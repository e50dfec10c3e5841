"""ProjectStore SQLite 实现

members 以 JSON 数组存储在 projects 行内，项目文档（含成员列表）的写入是单行原子的。
更新带版本校验：UPDATE ... WHERE project_id = ? AND version = ?，
影响 0 行即说明文档在读取之后已被修改，抛出 StaleWriteError。
"""

import json

import aiosqlite

from ..errors import StaleWriteError
from ..models.enums import ProjectStatus
from ..models.page import Pagination
from ..models.project import Project, ProjectMember
from .codec import from_db_ts, to_db_ts


class SqliteProjectStore:
    """ProjectStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_project(self, project: Project) -> None:
        """创建项目记录"""
        await self._conn.execute(
            """
            INSERT INTO projects (project_id, name, description, status, members,
                                  version, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                project.project_id,
                project.name,
                project.description,
                project.status.value,
                self._dump_members(project.members),
                project.version,
                to_db_ts(project.created_at),
                to_db_ts(project.updated_at),
            ),
        )

    async def get_project(self, project_id: str) -> Project | None:
        """根据 project_id 查询项目"""
        cursor = await self._conn.execute(
            "SELECT * FROM projects WHERE project_id = ?",
            (project_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_project(row)

    async def save_project(self, project: Project) -> Project:
        """版本校验写入

        Args:
            project: 基于版本 project.version 修改得到的新文档

        Returns:
            版本号 +1 后的项目

        Raises:
            StaleWriteError: 数据库中的版本已不是 project.version
        """
        cursor = await self._conn.execute(
            """
            UPDATE projects
            SET name = ?, description = ?, status = ?, members = ?,
                version = version + 1, updated_at = ?
            WHERE project_id = ? AND version = ?
            """,
            (
                project.name,
                project.description,
                project.status.value,
                self._dump_members(project.members),
                to_db_ts(project.updated_at),
                project.project_id,
                project.version,
            ),
        )
        if cursor.rowcount == 0:
            raise StaleWriteError("project", project.project_id, project.version)
        return project.model_copy(update={"version": project.version + 1})

    async def list_projects_for_user(
        self,
        user_id: str,
        pagination: Pagination,
    ) -> tuple[list[Project], int]:
        """查询用户参与的项目，按 updated_at 倒序

        Returns:
            (当前页项目, 总数)
        """
        membership_filter = """
            EXISTS (
                SELECT 1 FROM json_each(projects.members) AS m
                WHERE json_extract(m.value, '$.user_id') = ?
            )
        """
        cursor = await self._conn.execute(
            f"SELECT COUNT(*) FROM projects WHERE {membership_filter}",
            (user_id,),
        )
        row = await cursor.fetchone()
        total = row[0] if row else 0

        cursor = await self._conn.execute(
            f"""
            SELECT * FROM projects WHERE {membership_filter}
            ORDER BY updated_at DESC, project_id DESC
            LIMIT ? OFFSET ?
            """,
            (user_id, pagination.limit, pagination.offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_project(r) for r in rows], total

    async def list_member_projects(self, user_id: str) -> list[Project]:
        """查询用户参与的全部项目（不分页，用于管理员删除用户）"""
        cursor = await self._conn.execute(
            """
            SELECT * FROM projects WHERE EXISTS (
                SELECT 1 FROM json_each(projects.members) AS m
                WHERE json_extract(m.value, '$.user_id') = ?
            )
            ORDER BY created_at ASC
            """,
            (user_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_project(r) for r in rows]

    async def list_all_projects(self) -> list[Project]:
        """查询全部项目（用于一致性校验）"""
        cursor = await self._conn.execute(
            "SELECT * FROM projects ORDER BY created_at ASC"
        )
        rows = await cursor.fetchall()
        return [self._row_to_project(r) for r in rows]

    @staticmethod
    def _dump_members(members: list[ProjectMember]) -> str:
        return json.dumps(
            [m.model_dump(mode="json") for m in members], ensure_ascii=False
        )

    @staticmethod
    def _row_to_project(row: aiosqlite.Row) -> Project:
        """将数据库行转换为 Project 模型"""
        members_data = json.loads(row["members"]) if row["members"] else []
        return Project(
            project_id=row["project_id"],
            name=row["name"],
            description=row["description"],
            status=ProjectStatus(row["status"]),
            members=[ProjectMember(**m) for m in members_data],
            version=row["version"],
            created_at=from_db_ts(row["created_at"]),
            updated_at=from_db_ts(row["updated_at"]),
        )
