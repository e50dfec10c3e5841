"""InvitationService -- 邀请发送、接受、拒绝与过期

接受邀请在一个 SQLite 事务内完成项目成员写入、MEMBER_ADDED 与邀请状态翻转；
截止时间已过但尚未被清扫标记的邀请，在被访问时惰性标记为 expired。
"""

from datetime import datetime

import structlog
from projectcamp.core.config import INVITATION_EXPIRY_DAYS
from projectcamp.core.domain import invitation as invitation_domain
from projectcamp.core.errors import ConflictError, GoneError, NotFoundError
from projectcamp.core.models import (
    InvitationStatus,
    MemberRole,
    Page,
    Pagination,
    Project,
    ProjectInvitation,
    User,
)
from projectcamp.core.store import (
    accept_invitation_atomically,
    create_invitation_with_activity,
    expire_pending_invitations,
    mark_invitation_expired,
    reject_invitation_atomically,
    write_transaction,
)
from projectcamp.notify import invitation_email

from .base import ServiceBase

log = structlog.get_logger()

# 用户邀请列表包含的状态
_LISTED_STATUSES = [InvitationStatus.PENDING, InvitationStatus.EXPIRED]


class InvitationService(ServiceBase):
    """邀请业务服务"""

    async def can_invite_user(self, project_id: str, user_id: str) -> bool:
        """不存在 pending 邀请且用户不是成员时返回 True"""
        project = await self._load_project(project_id)
        if project.has_member(user_id):
            return False
        pending = await self._stores.invitation_store.find_pending(project_id, user_id)
        return pending is None

    async def send_invitation(
        self,
        actor: User,
        project_id: str,
        email: str,
        role: MemberRole = MemberRole.MEMBER,
    ) -> ProjectInvitation:
        """owner 按邮箱邀请用户

        Raises:
            ForbiddenError: 调用者不是 owner
            NotFoundError: 项目或被邀请用户不存在
            ValidationFailedError: role 不是 member
            ConflictError: 项目非 active、已是成员或已有 pending 邀请
        """
        async with write_transaction(self._stores):
            project = await self._load_project(project_id)
            self._require_owner(project, actor)

            invitee = await self._stores.user_store.get_user_by_email(email)
            if invitee is None:
                raise NotFoundError(
                    "User with this email does not exist", code="USER_NOT_FOUND"
                )

            invitation, entry = invitation_domain.new_invitation(
                project, invitee.user_id, self._snapshot(actor), self._clock(), role=role
            )
            if not await self.can_invite_user(project_id, invitee.user_id):
                raise ConflictError(
                    "A pending invitation already exists for this user",
                    code="INVITATION_ALREADY_PENDING",
                )

            await create_invitation_with_activity(self._stores, invitation, entry)
        log.info(
            "invitation_sent",
            invitation_id=invitation.invitation_id,
            project_id=project_id,
            invited_user=invitee.user_id,
        )

        self._notify(
            invitation_email(
                to=invitee.email,
                invitee_name=invitee.username,
                inviter_name=actor.username,
                project_name=project.name,
                invitation_id=invitation.invitation_id,
                expires_days=INVITATION_EXPIRY_DAYS,
            )
        )
        return invitation

    async def _load_invitation(self, invitation_id: str) -> ProjectInvitation:
        invitation = await self._stores.invitation_store.get_invitation(invitation_id)
        if invitation is None:
            raise NotFoundError(
                f"Invitation {invitation_id} does not exist",
                code="INVITATION_NOT_FOUND",
            )
        return invitation

    async def _expire_lazily(self, invitation_id: str) -> None:
        """截止时间已过但仍为 pending 的邀请，在响应事务回滚后单独标记为 expired"""
        marked = await mark_invitation_expired(
            self._stores, invitation_id, self._clock()
        )
        log.info("invitation_lazily_expired", invitation_id=invitation_id, marked=marked)

    async def accept_invitation(self, actor: User, invitation_id: str) -> Project:
        """接受邀请，返回加入后的项目

        Raises:
            ForbiddenError: 邀请不属于当前用户
            GoneError: 邀请已过期
            ConflictError: 邀请已处理，或用户已是成员
        """
        first = await self._load_invitation(invitation_id)

        async def attempt() -> Project:
            invitation = await self._load_invitation(invitation_id)
            now = self._clock()
            invitation_domain.ensure_can_respond(invitation, actor.user_id, now)
            project = await self._load_project(invitation.project_id)
            _, updated, entry = invitation_domain.accept(
                invitation, project, self._snapshot(actor), now
            )
            saved, _ = await accept_invitation_atomically(
                self._stores, invitation, updated, entry, now
            )
            return saved

        try:
            project = await self._with_retry(f"project:{first.project_id}", attempt)
        except GoneError:
            await self._expire_lazily(invitation_id)
            raise
        log.info(
            "invitation_accepted",
            invitation_id=invitation_id,
            project_id=project.project_id,
            member_id=actor.user_id,
        )
        return project

    async def reject_invitation(
        self, actor: User, invitation_id: str
    ) -> ProjectInvitation:
        """拒绝邀请"""
        try:
            async with write_transaction(self._stores):
                invitation = await self._load_invitation(invitation_id)
                now = self._clock()
                invitation_domain.ensure_can_respond(invitation, actor.user_id, now)
                rejected, entry = invitation_domain.reject(
                    invitation, self._snapshot(actor), now
                )
                await reject_invitation_atomically(self._stores, invitation, entry, now)
        except GoneError:
            await self._expire_lazily(invitation_id)
            raise
        log.info("invitation_rejected", invitation_id=invitation_id)
        return rejected

    async def list_invitations(
        self, actor: User, pagination: Pagination
    ) -> Page[ProjectInvitation]:
        """当前用户的 pending 与 expired 邀请，最新在前"""
        items, total = await self._stores.invitation_store.list_for_user(
            actor.user_id, _LISTED_STATUSES, pagination
        )
        return Page[ProjectInvitation].build(items, total, pagination)

    async def expire_pending(self, now: datetime | None = None) -> int:
        """批量标记已过截止时间的 pending 邀请"""
        count = await expire_pending_invitations(self._stores, now or self._clock())
        if count:
            log.info("invitations_expired", count=count)
        return count
