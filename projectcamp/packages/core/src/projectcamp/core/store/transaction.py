"""文档写入 + 活动日志原子事务封装

在同一 SQLite 事务内提交文档变更和对应的活动条目，任一写入失败则整体回滚。
所有写事务都在 StoreGroup.write_lock 下执行，共享连接上不同协程的语句不会交错进同一事务。

服务层把 读取 -> 校验 -> 写入 整体放进一个 write_transaction，校验读到的数据
不会是其他协程尚未提交的写入。同一协程内嵌套的 write_transaction 直接并入外层事务，
由外层统一提交或回滚。
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import TYPE_CHECKING

from ..errors import ConflictError, GoneError, NotFoundError
from ..models.activity import ActivityLogEntry
from ..models.comment import TaskComment
from ..models.enums import InvitationStatus
from ..models.invitation import ProjectInvitation
from ..models.project import Project
from ..models.task import Task

if TYPE_CHECKING:
    from . import StoreGroup


@asynccontextmanager
async def write_transaction(stores: "StoreGroup") -> AsyncIterator["StoreGroup"]:
    """写事务上下文：正常退出提交，异常回滚后继续抛出

    当前协程已持有写事务时并入外层事务，不单独提交。
    """
    current = asyncio.current_task()
    if stores.tx_owner is not None and stores.tx_owner is current:
        yield stores
        return

    async with stores.write_lock:
        stores.tx_owner = current
        try:
            yield stores
            await stores.conn.commit()
        except Exception:
            await stores.conn.rollback()
            raise
        finally:
            stores.tx_owner = None


async def append_activity_only(
    stores: "StoreGroup", entry: ActivityLogEntry
) -> ActivityLogEntry:
    """仅追加活动条目（不修改任何文档）"""
    async with write_transaction(stores):
        return await stores.activity_store.append_activity(entry)


async def create_project_with_activity(
    stores: "StoreGroup", project: Project, entry: ActivityLogEntry
) -> ActivityLogEntry:
    """创建项目并写入 PROJECT_CREATED"""
    async with write_transaction(stores):
        await stores.project_store.create_project(project)
        return await stores.activity_store.append_activity(entry)


async def save_project_with_activity(
    stores: "StoreGroup", project: Project, entry: ActivityLogEntry
) -> tuple[Project, ActivityLogEntry]:
    """版本校验保存项目并追加活动条目

    Raises:
        StaleWriteError: 项目在读取之后已被修改（事务已回滚）
    """
    async with write_transaction(stores):
        saved = await stores.project_store.save_project(project)
        stored = await stores.activity_store.append_activity(entry)
        return saved, stored


async def create_task_with_activity(
    stores: "StoreGroup", task: Task, entry: ActivityLogEntry
) -> ActivityLogEntry:
    """创建任务并写入 TASK_CREATED"""
    async with write_transaction(stores):
        await stores.task_store.create_task(task)
        return await stores.activity_store.append_activity(entry)


async def save_task_with_activity(
    stores: "StoreGroup", task: Task, entry: ActivityLogEntry
) -> tuple[Task, ActivityLogEntry]:
    """版本校验保存任务并追加活动条目"""
    async with write_transaction(stores):
        saved = await stores.task_store.save_task(task)
        stored = await stores.activity_store.append_activity(entry)
        return saved, stored


async def create_comment_with_activity(
    stores: "StoreGroup", comment: TaskComment, entry: ActivityLogEntry
) -> ActivityLogEntry:
    """写入评论并追加 COMMENT_ADDED"""
    async with write_transaction(stores):
        await stores.comment_store.create_comment(comment)
        return await stores.activity_store.append_activity(entry)


async def delete_comment_with_activity(
    stores: "StoreGroup", comment_id: str, entry: ActivityLogEntry
) -> ActivityLogEntry:
    """删除评论并追加 COMMENT_DELETED

    Raises:
        NotFoundError: 评论已不存在（事务已回滚，不写日志）
    """
    async with write_transaction(stores):
        if not await stores.comment_store.delete_comment(comment_id):
            raise NotFoundError(
                f"Comment {comment_id} does not exist", code="COMMENT_NOT_FOUND"
            )
        return await stores.activity_store.append_activity(entry)


async def create_invitation_with_activity(
    stores: "StoreGroup", invitation: ProjectInvitation, entry: ActivityLogEntry
) -> ActivityLogEntry:
    """创建邀请并写入 INVITATION_SENT

    Raises:
        ConflictError: 已存在 pending 邀请（部分唯一索引冲突）
    """
    async with write_transaction(stores):
        await stores.invitation_store.create_invitation(invitation)
        return await stores.activity_store.append_activity(entry)


async def _raise_for_lost_flip(stores: "StoreGroup", invitation_id: str) -> None:
    current = await stores.invitation_store.get_invitation(invitation_id)
    if current is not None and current.invitation_status == InvitationStatus.EXPIRED:
        raise GoneError("This invitation has expired", code="INVITATION_EXPIRED")
    raise ConflictError(
        "Invitation is no longer active", code="INVITATION_NOT_PENDING"
    )


async def accept_invitation_atomically(
    stores: "StoreGroup",
    invitation: ProjectInvitation,
    project: Project,
    entry: ActivityLogEntry,
    now: datetime,
) -> tuple[Project, ActivityLogEntry]:
    """接受邀请：项目成员写入 + MEMBER_ADDED + 邀请状态翻转，三者同一事务

    邀请翻转是条件写入；若清扫或另一请求已改变其状态，整个事务回滚。

    Raises:
        StaleWriteError: 项目在读取之后已被修改
        GoneError: 邀请已被标记为 expired
        ConflictError: 邀请已被接受或拒绝
    """
    async with write_transaction(stores):
        saved = await stores.project_store.save_project(project)
        stored = await stores.activity_store.append_activity(entry)
        flipped = await stores.invitation_store.mark_status(
            invitation.invitation_id, InvitationStatus.ACCEPTED, now
        )
        if not flipped:
            await _raise_for_lost_flip(stores, invitation.invitation_id)
        return saved, stored


async def reject_invitation_atomically(
    stores: "StoreGroup",
    invitation: ProjectInvitation,
    entry: ActivityLogEntry,
    now: datetime,
) -> ActivityLogEntry:
    """拒绝邀请：条件翻转 + INVITATION_REJECTED 写入项目日志"""
    async with write_transaction(stores):
        flipped = await stores.invitation_store.mark_status(
            invitation.invitation_id, InvitationStatus.REJECTED, now
        )
        if not flipped:
            await _raise_for_lost_flip(stores, invitation.invitation_id)
        return await stores.activity_store.append_activity(entry)


async def mark_invitation_expired(
    stores: "StoreGroup", invitation_id: str, now: datetime
) -> bool:
    """惰性过期：单条 pending -> expired 条件写入"""
    async with write_transaction(stores):
        return await stores.invitation_store.mark_status(
            invitation_id, InvitationStatus.EXPIRED, now
        )


async def expire_pending_invitations(stores: "StoreGroup", now: datetime) -> int:
    """批量过期：expires_at < now 的 pending 邀请全部标记为 expired"""
    async with write_transaction(stores):
        return await stores.invitation_store.expire_pending_before(now)
