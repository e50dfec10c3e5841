"""InvitationStore SQLite 实现

状态变更都是带条件的写入（WHERE invitation_status = 'pending'），
终态行不会被覆盖；调用方根据返回值判断自己是否赢得了竞争。
"""

import sqlite3
from datetime import datetime

import aiosqlite

from ..errors import ConflictError
from ..models.enums import InvitationStatus, MemberRole
from ..models.invitation import ProjectInvitation
from ..models.page import Pagination
from .codec import from_db_ts, to_db_ts


class SqliteInvitationStore:
    """InvitationStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_invitation(self, invitation: ProjectInvitation) -> None:
        """创建邀请记录

        Raises:
            ConflictError: 同一 (project, user) 已存在 pending 邀请
        """
        try:
            await self._conn.execute(
                """
                INSERT INTO project_invitations (invitation_id, project_id,
                    invited_user, invited_by, role, invitation_status,
                    expires_at, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    invitation.invitation_id,
                    invitation.project_id,
                    invitation.invited_user,
                    invitation.invited_by,
                    invitation.role.value,
                    invitation.invitation_status.value,
                    to_db_ts(invitation.expires_at),
                    to_db_ts(invitation.created_at),
                    to_db_ts(invitation.updated_at),
                ),
            )
        except sqlite3.IntegrityError as exc:
            if "project_invitations.project_id" in str(exc):
                raise ConflictError(
                    "A pending invitation already exists for this user",
                    code="INVITATION_ALREADY_PENDING",
                ) from exc
            raise

    async def get_invitation(self, invitation_id: str) -> ProjectInvitation | None:
        """根据 invitation_id 查询邀请"""
        cursor = await self._conn.execute(
            "SELECT * FROM project_invitations WHERE invitation_id = ?",
            (invitation_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_invitation(row)

    async def find_pending(
        self, project_id: str, user_id: str
    ) -> ProjectInvitation | None:
        """查询 (project, user) 的 pending 邀请"""
        cursor = await self._conn.execute(
            """
            SELECT * FROM project_invitations
            WHERE project_id = ? AND invited_user = ? AND invitation_status = 'pending'
            """,
            (project_id, user_id),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_invitation(row)

    async def mark_status(
        self,
        invitation_id: str,
        new_status: InvitationStatus,
        updated_at: datetime,
    ) -> bool:
        """pending -> new_status 的条件写入

        Returns:
            True 如果本次写入生效；False 表示邀请已不是 pending
        """
        cursor = await self._conn.execute(
            """
            UPDATE project_invitations
            SET invitation_status = ?, updated_at = ?
            WHERE invitation_id = ? AND invitation_status = 'pending'
            """,
            (new_status.value, to_db_ts(updated_at), invitation_id),
        )
        return cursor.rowcount > 0

    async def expire_pending_before(self, now: datetime) -> int:
        """将 expires_at < now 的 pending 邀请批量标记为 expired

        Returns:
            本次标记的行数
        """
        ts = to_db_ts(now)
        cursor = await self._conn.execute(
            """
            UPDATE project_invitations
            SET invitation_status = 'expired', updated_at = ?
            WHERE invitation_status = 'pending' AND expires_at < ?
            """,
            (ts, ts),
        )
        return cursor.rowcount

    async def list_for_user(
        self,
        user_id: str,
        statuses: list[InvitationStatus],
        pagination: Pagination,
    ) -> tuple[list[ProjectInvitation], int]:
        """查询用户收到的邀请，按 created_at 倒序"""
        placeholders = ", ".join("?" for _ in statuses)
        params = (user_id, *[s.value for s in statuses])
        where = f"invited_user = ? AND invitation_status IN ({placeholders})"

        cursor = await self._conn.execute(
            f"SELECT COUNT(*) FROM project_invitations WHERE {where}",
            params,
        )
        row = await cursor.fetchone()
        total = row[0] if row else 0

        cursor = await self._conn.execute(
            f"""
            SELECT * FROM project_invitations WHERE {where}
            ORDER BY created_at DESC, invitation_id DESC
            LIMIT ? OFFSET ?
            """,
            (*params, pagination.limit, pagination.offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_invitation(r) for r in rows], total

    async def delete_for_user(self, user_id: str) -> int:
        """删除用户收到的全部邀请（管理员删除用户时调用）

        Returns:
            删除的行数
        """
        cursor = await self._conn.execute(
            "DELETE FROM project_invitations WHERE invited_user = ?",
            (user_id,),
        )
        return cursor.rowcount

    async def find_duplicate_pending(self) -> list[tuple[str, str, int]]:
        """查找违反"至多一条 pending"约束的 (project_id, invited_user, count)"""
        cursor = await self._conn.execute(
            """
            SELECT project_id, invited_user, COUNT(*) FROM project_invitations
            WHERE invitation_status = 'pending'
            GROUP BY project_id, invited_user
            HAVING COUNT(*) > 1
            """
        )
        rows = await cursor.fetchall()
        return [(r[0], r[1], r[2]) for r in rows]

    @staticmethod
    def _row_to_invitation(row: aiosqlite.Row) -> ProjectInvitation:
        """将数据库行转换为 ProjectInvitation 模型"""
        return ProjectInvitation(
            invitation_id=row["invitation_id"],
            project_id=row["project_id"],
            invited_user=row["invited_user"],
            invited_by=row["invited_by"],
            role=MemberRole(row["role"]),
            invitation_status=InvitationStatus(row["invitation_status"]),
            expires_at=from_db_ts(row["expires_at"]),
            created_at=from_db_ts(row["created_at"]),
            updated_at=from_db_ts(row["updated_at"]),
        )
