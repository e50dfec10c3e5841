"""ProjectCamp Core Store -- SQLite 持久化实现

提供工厂函数创建共享数据库连接的 Store 实例组。
"""

import asyncio
from pathlib import Path

import aiosqlite

from .activity_store import SqliteActivityStore
from .comment_store import SqliteCommentStore
from .invitation_store import SqliteInvitationStore
from .project_store import SqliteProjectStore
from .sqlite_init import init_db
from .task_store import SqliteTaskStore
from .transaction import (
    accept_invitation_atomically,
    append_activity_only,
    create_comment_with_activity,
    create_invitation_with_activity,
    create_project_with_activity,
    create_task_with_activity,
    delete_comment_with_activity,
    expire_pending_invitations,
    mark_invitation_expired,
    reject_invitation_atomically,
    save_project_with_activity,
    save_task_with_activity,
    write_transaction,
)
from .user_store import SqliteUserStore


class StoreGroup:
    """Store 实例组 -- 共享同一个数据库连接

    write_lock 串行化所有写事务；tx_owner 记录当前持有写事务的协程。
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self.conn = conn
        self.write_lock = asyncio.Lock()
        self.tx_owner: asyncio.Task | None = None
        self.user_store = SqliteUserStore(conn)
        self.project_store = SqliteProjectStore(conn)
        self.invitation_store = SqliteInvitationStore(conn)
        self.task_store = SqliteTaskStore(conn)
        self.comment_store = SqliteCommentStore(conn)
        self.activity_store = SqliteActivityStore(conn)

    async def close(self) -> None:
        await self.conn.close()


async def create_store_group(db_path: str) -> StoreGroup:
    """创建 Store 实例组

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        StoreGroup 实例
    """
    # 确保数据库目录存在
    db_dir = Path(db_path).parent
    db_dir.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    await init_db(conn)

    return StoreGroup(conn=conn)


__all__ = [
    "StoreGroup",
    "create_store_group",
    "SqliteUserStore",
    "SqliteProjectStore",
    "SqliteInvitationStore",
    "SqliteTaskStore",
    "SqliteCommentStore",
    "SqliteActivityStore",
    "init_db",
    "write_transaction",
    "append_activity_only",
    "create_project_with_activity",
    "save_project_with_activity",
    "create_task_with_activity",
    "save_task_with_activity",
    "create_comment_with_activity",
    "delete_comment_with_activity",
    "create_invitation_with_activity",
    "accept_invitation_atomically",
    "reject_invitation_atomically",
    "mark_invitation_expired",
    "expire_pending_invitations",
]
