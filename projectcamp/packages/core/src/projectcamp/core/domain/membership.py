"""成员与所有权引擎

所有函数都是纯函数：接收当前 Project，返回 (新 Project, 活动条目)。
输入对象不会被修改，校验失败时没有任何副作用；
change_owner 在同一次拷贝中完成降级与升级，不存在 0 个或 2 个 owner 的中间状态。

调用权限（谁可以调用）由服务层负责，这里只维护成员唯一性与单 owner 不变量。
"""

from datetime import datetime
from typing import Any

from ulid import ULID

from ..errors import ConflictError, NotFoundError
from ..models.enums import MemberRole, ProjectActivityType, ProjectStatus
from ..models.activity import ActivityLogEntry
from ..models.payloads import (
    MemberAddedPayload,
    MemberRemovedPayload,
    OwnershipTransferredPayload,
    ProjectCreatedPayload,
)
from ..models.project import Project, ProjectMember
from ..models.user import ActorSnapshot
from .ledger import project_entry

Mutation = tuple[Project, ActivityLogEntry]


def has_member(project: Project, user_id: str) -> bool:
    return project.has_member(user_id)


def is_owner(project: Project, user_id: str) -> bool:
    return project.is_owner(user_id)


def new_project(
    name: str,
    description: str,
    owner: ActorSnapshot,
    now: datetime,
) -> Mutation:
    """创建项目，创建者成为唯一 owner"""
    project_id = str(ULID())
    project = Project(
        project_id=project_id,
        name=name,
        description=description,
        status=ProjectStatus.ACTIVE,
        members=[
            ProjectMember(user_id=owner.user_id, role=MemberRole.OWNER, joined_at=now)
        ],
        created_at=now,
        updated_at=now,
    )
    entry = project_entry(
        project_id,
        ProjectActivityType.PROJECT_CREATED,
        owner,
        now,
        payload=ProjectCreatedPayload(name=name, owner_id=owner.user_id),
    )
    return project, entry


def add_member(
    project: Project,
    user_id: str,
    actor: ActorSnapshot,
    now: datetime,
    metadata: MemberAddedPayload | None = None,
    extra: dict[str, Any] | None = None,
) -> Mutation:
    """添加成员（role=member）

    Raises:
        ConflictError: 用户已是成员
    """
    if project.has_member(user_id):
        raise ConflictError(
            "User is already a member of the project", code="ALREADY_MEMBER"
        )

    members = [
        *project.members,
        ProjectMember(user_id=user_id, role=MemberRole.MEMBER, joined_at=now),
    ]
    updated = project.model_copy(update={"members": members, "updated_at": now})
    payload = metadata or MemberAddedPayload(member_id=user_id)
    entry = project_entry(
        project.project_id,
        ProjectActivityType.MEMBER_ADDED,
        actor,
        now,
        payload=payload,
        extra=extra,
    )
    return updated, entry


def remove_member(
    project: Project,
    target_id: str,
    actor: ActorSnapshot,
    now: datetime,
    metadata: MemberRemovedPayload | None = None,
) -> Mutation:
    """移除成员

    Raises:
        NotFoundError: 目标不是成员
        ConflictError: 目标是当前 owner（必须先转移所有权）
    """
    member = project.get_member(target_id)
    if member is None:
        raise NotFoundError(
            "The user is not a member of this project", code="MEMBER_NOT_FOUND"
        )
    if member.role == MemberRole.OWNER:
        raise ConflictError(
            "The project owner cannot be removed; transfer ownership first",
            code="OWNER_CANNOT_BE_REMOVED",
        )

    members = [m for m in project.members if m.user_id != target_id]
    updated = project.model_copy(update={"members": members, "updated_at": now})
    entry = project_entry(
        project.project_id,
        ProjectActivityType.MEMBER_REMOVED,
        actor,
        now,
        payload=metadata or MemberRemovedPayload(member_id=target_id),
    )
    return updated, entry


def change_owner(
    project: Project,
    new_owner_id: str,
    actor: ActorSnapshot,
    now: datetime,
    metadata: OwnershipTransferredPayload | None = None,
) -> Mutation:
    """转移所有权：当前 owner 降级为 member，目标成员升级为 owner

    Raises:
        ConflictError: 目标已经是 owner
        NotFoundError: 目标不是成员
    """
    target = project.get_member(new_owner_id)
    if target is None:
        raise NotFoundError(
            "The new owner must be an existing member of the project",
            code="MEMBER_NOT_FOUND",
        )
    if target.role == MemberRole.OWNER:
        raise ConflictError("The user is already the project owner", code="ALREADY_OWNER")

    old_owner_id = project.owner_id
    members = []
    for m in project.members:
        if m.user_id == new_owner_id:
            members.append(m.model_copy(update={"role": MemberRole.OWNER}))
        elif m.role == MemberRole.OWNER:
            members.append(m.model_copy(update={"role": MemberRole.MEMBER}))
        else:
            members.append(m)

    updated = project.model_copy(update={"members": members, "updated_at": now})
    payload = metadata or OwnershipTransferredPayload(
        old_owner_id=old_owner_id or "",
        new_owner_id=new_owner_id,
    )
    entry = project_entry(
        project.project_id,
        ProjectActivityType.OWNERSHIP_TRANSFERRED,
        actor,
        now,
        payload=payload,
    )
    return updated, entry


def leave_project(
    project: Project,
    user_id: str,
    actor: ActorSnapshot,
    now: datetime,
) -> Mutation:
    """成员主动离开项目

    Raises:
        NotFoundError: 用户不是成员
        ConflictError: 用户是 owner（必须先转移所有权）
    """
    member = project.get_member(user_id)
    if member is None:
        raise NotFoundError(
            "You are not a member of this project", code="MEMBER_NOT_FOUND"
        )
    if member.role == MemberRole.OWNER:
        raise ConflictError(
            "The owner cannot leave the project; transfer ownership first",
            code="OWNER_CANNOT_LEAVE",
        )

    members = [m for m in project.members if m.user_id != user_id]
    updated = project.model_copy(update={"members": members, "updated_at": now})
    entry = project_entry(
        project.project_id,
        ProjectActivityType.MEMBER_LEFT,
        actor,
        now,
        payload=MemberRemovedPayload(member_id=user_id),
    )
    return updated, entry
