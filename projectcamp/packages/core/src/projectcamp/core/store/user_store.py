"""UserStore SQLite 实现 -- 身份存储

注册、验证、封禁等流程只读写这张表；密码哈希与令牌由外部身份服务生成。
"""

import aiosqlite

from ..models.enums import UserRole
from ..models.page import Pagination
from ..models.user import User
from .codec import from_db_ts, from_db_ts_opt, to_db_ts, to_db_ts_opt


class SqliteUserStore:
    """UserStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    async def create_user(self, user: User) -> None:
        """创建用户记录

        注意：此方法不自动提交事务，需由调用方管理事务。
        """
        await self._conn.execute(
            """
            INSERT INTO users (user_id, username, email, password_hash, role,
                               is_blocked, is_email_verified,
                               email_verification_token, email_verification_expiry,
                               forgot_password_token, forgot_password_expiry,
                               refresh_token, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                user.user_id,
                user.username,
                user.email.lower(),
                user.password_hash,
                user.role.value,
                int(user.is_blocked),
                int(user.is_email_verified),
                user.email_verification_token,
                to_db_ts_opt(user.email_verification_expiry),
                user.forgot_password_token,
                to_db_ts_opt(user.forgot_password_expiry),
                user.refresh_token,
                to_db_ts(user.created_at),
                to_db_ts(user.updated_at),
            ),
        )

    async def get_user(self, user_id: str) -> User | None:
        """根据 user_id 查询用户"""
        cursor = await self._conn.execute(
            "SELECT * FROM users WHERE user_id = ?",
            (user_id,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    async def get_user_by_email(self, email: str) -> User | None:
        """根据邮箱查询用户（大小写不敏感）"""
        cursor = await self._conn.execute(
            "SELECT * FROM users WHERE email = ?",
            (email.strip().lower(),),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_user(row)

    async def get_users(self, user_ids: list[str]) -> list[User]:
        """批量查询用户，结果顺序与数据库一致"""
        if not user_ids:
            return []
        placeholders = ", ".join("?" for _ in user_ids)
        cursor = await self._conn.execute(
            f"SELECT * FROM users WHERE user_id IN ({placeholders})",
            tuple(user_ids),
        )
        rows = await cursor.fetchall()
        return [self._row_to_user(row) for row in rows]

    async def update_user(self, user: User) -> None:
        """整体覆盖用户记录（封禁、验证、角色变更）"""
        await self._conn.execute(
            """
            UPDATE users
            SET username = ?, email = ?, password_hash = ?, role = ?,
                is_blocked = ?, is_email_verified = ?,
                email_verification_token = ?, email_verification_expiry = ?,
                forgot_password_token = ?, forgot_password_expiry = ?,
                refresh_token = ?, updated_at = ?
            WHERE user_id = ?
            """,
            (
                user.username,
                user.email.lower(),
                user.password_hash,
                user.role.value,
                int(user.is_blocked),
                int(user.is_email_verified),
                user.email_verification_token,
                to_db_ts_opt(user.email_verification_expiry),
                user.forgot_password_token,
                to_db_ts_opt(user.forgot_password_expiry),
                user.refresh_token,
                to_db_ts(user.updated_at),
                user.user_id,
            ),
        )

    async def list_users(self, pagination: Pagination) -> tuple[list[User], int]:
        """分页列出全部用户，按注册时间正序"""
        cursor = await self._conn.execute("SELECT COUNT(*) FROM users")
        row = await cursor.fetchone()
        total = row[0] if row else 0

        cursor = await self._conn.execute(
            """
            SELECT * FROM users
            ORDER BY created_at ASC, user_id ASC
            LIMIT ? OFFSET ?
            """,
            (pagination.limit, pagination.offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_user(r) for r in rows], total

    async def delete_user(self, user_id: str) -> bool:
        """硬删除用户记录，返回是否删除了记录"""
        cursor = await self._conn.execute(
            "DELETE FROM users WHERE user_id = ?",
            (user_id,),
        )
        return cursor.rowcount > 0

    @staticmethod
    def _row_to_user(row: aiosqlite.Row) -> User:
        """将数据库行转换为 User 模型"""
        return User(
            user_id=row["user_id"],
            username=row["username"],
            email=row["email"],
            password_hash=row["password_hash"],
            role=UserRole(row["role"]),
            is_blocked=bool(row["is_blocked"]),
            is_email_verified=bool(row["is_email_verified"]),
            email_verification_token=row["email_verification_token"],
            email_verification_expiry=from_db_ts_opt(row["email_verification_expiry"]),
            forgot_password_token=row["forgot_password_token"],
            forgot_password_expiry=from_db_ts_opt(row["forgot_password_expiry"]),
            refresh_token=row["refresh_token"],
            created_at=from_db_ts(row["created_at"]),
            updated_at=from_db_ts(row["updated_at"]),
        )
