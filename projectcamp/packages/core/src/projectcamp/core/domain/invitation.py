"""邀请生命周期

pending -> {accepted, rejected, expired}，三个终态都不可再流转。
接受邀请时委托成员引擎 add_member，metadata 记录 source=INVITATION 与 invitation_id。

"同一对 (project, user) 至多一条 pending" 依赖存储层查询与部分唯一索引，
这里只负责单条邀请的状态校验与流转。
"""

from datetime import datetime, timedelta

from ulid import ULID

from ..config import INVITATION_EXPIRY_DAYS
from ..errors import ConflictError, ForbiddenError, GoneError, ValidationFailedError
from ..models.activity import ActivityLogEntry
from ..models.enums import (
    InvitationStatus,
    MemberRole,
    MembershipSource,
    ProjectActivityType,
    validate_invitation_transition,
)
from ..models.invitation import ProjectInvitation
from ..models.payloads import InvitationPayload, MemberAddedPayload
from ..models.project import Project
from ..models.user import ActorSnapshot
from . import membership
from .ledger import project_entry


def transition(
    invitation: ProjectInvitation,
    new_status: InvitationStatus,
    now: datetime,
) -> ProjectInvitation:
    """校验并执行邀请状态流转

    Raises:
        ConflictError: 邀请已是终态或流转不合法
    """
    if not validate_invitation_transition(invitation.invitation_status, new_status):
        raise ConflictError(
            f"Invitation status can no longer change from "
            f"'{invitation.invitation_status}' to '{new_status}'",
            code="ILLEGAL_INVITATION_TRANSITION",
        )
    return invitation.model_copy(
        update={"invitation_status": new_status, "updated_at": now}
    )


def new_invitation(
    project: Project,
    invited_user_id: str,
    inviter: ActorSnapshot,
    now: datetime,
    role: MemberRole = MemberRole.MEMBER,
    expiry_days: int = INVITATION_EXPIRY_DAYS,
) -> tuple[ProjectInvitation, ActivityLogEntry]:
    """创建 pending 邀请及 INVITATION_SENT 条目

    Raises:
        ValidationFailedError: 请求以 owner 角色邀请
        ConflictError: 项目非 active，或被邀请人已是成员
    """
    if role != MemberRole.MEMBER:
        raise ValidationFailedError(
            "Invitations can only grant the member role; "
            "ownership is moved with a transfer",
            code="INVALID_INVITATION_ROLE",
        )
    if not project.is_active():
        raise ConflictError(
            "Invitations can only be sent for active projects",
            code="PROJECT_NOT_ACTIVE",
        )
    if project.has_member(invited_user_id):
        raise ConflictError(
            "User is already a member of the project", code="ALREADY_MEMBER"
        )

    invitation = ProjectInvitation(
        invitation_id=str(ULID()),
        project_id=project.project_id,
        invited_user=invited_user_id,
        invited_by=inviter.user_id,
        role=role,
        invitation_status=InvitationStatus.PENDING,
        expires_at=now + timedelta(days=expiry_days),
        created_at=now,
        updated_at=now,
    )
    entry = project_entry(
        project.project_id,
        ProjectActivityType.INVITATION_SENT,
        inviter,
        now,
        payload=InvitationPayload(
            invitation_id=invitation.invitation_id,
            invited_user=invited_user_id,
        ),
    )
    return invitation, entry


def ensure_can_respond(
    invitation: ProjectInvitation, user_id: str, now: datetime
) -> None:
    """接受 / 拒绝前的共同校验

    校验顺序：归属 -> 状态 -> 截止时间。

    Raises:
        ForbiddenError: 邀请不属于当前用户
        GoneError: 邀请已过期（已被标记或截止时间已过）
        ConflictError: 邀请已被接受或拒绝
    """
    if invitation.invited_user != user_id:
        raise ForbiddenError(
            "This invitation doesn't belong to you", code="NOT_INVITEE"
        )
    if invitation.invitation_status == InvitationStatus.EXPIRED:
        raise GoneError("This invitation has expired", code="INVITATION_EXPIRED")
    if not invitation.is_pending():
        raise ConflictError(
            "Invitation is no longer active", code="INVITATION_NOT_PENDING"
        )
    if invitation.is_past_deadline(now):
        raise GoneError("This invitation has expired", code="INVITATION_EXPIRED")


def accept(
    invitation: ProjectInvitation,
    project: Project,
    user: ActorSnapshot,
    now: datetime,
) -> tuple[ProjectInvitation, Project, ActivityLogEntry]:
    """接受邀请：成员加入 + 状态置为 accepted

    返回的三个对象必须在同一事务内持久化。

    Raises:
        ConflictError: 用户已是项目成员（不视为幂等成功）
    """
    ensure_can_respond(invitation, user.user_id, now)
    if project.project_id != invitation.project_id:
        raise ConflictError(
            "Invitation does not belong to this project", code="PROJECT_MISMATCH"
        )
    if project.has_member(user.user_id):
        raise ConflictError(
            "You are already a member of this project", code="ALREADY_MEMBER"
        )

    updated_project, entry = membership.add_member(
        project,
        user.user_id,
        user,
        now,
        metadata=MemberAddedPayload(
            member_id=user.user_id,
            source=MembershipSource.INVITATION,
            invitation_id=invitation.invitation_id,
        ),
    )
    accepted = transition(invitation, InvitationStatus.ACCEPTED, now)
    return accepted, updated_project, entry


def reject(
    invitation: ProjectInvitation,
    user: ActorSnapshot,
    now: datetime,
) -> tuple[ProjectInvitation, ActivityLogEntry]:
    """拒绝邀请，INVITATION_REJECTED 写入项目日志"""
    ensure_can_respond(invitation, user.user_id, now)
    rejected = transition(invitation, InvitationStatus.REJECTED, now)
    entry = project_entry(
        invitation.project_id,
        ProjectActivityType.INVITATION_REJECTED,
        user,
        now,
        payload=InvitationPayload(
            invitation_id=invitation.invitation_id,
            invited_user=invitation.invited_user,
        ),
    )
    return rejected, entry


def expire(invitation: ProjectInvitation, now: datetime) -> ProjectInvitation:
    """标记过期；非 pending 状态抛出 ConflictError"""
    return transition(invitation, InvitationStatus.EXPIRED, now)
