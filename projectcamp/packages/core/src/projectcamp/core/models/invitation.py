"""ProjectInvitation Domain Model

同一 (project_id, invited_user) 至多存在一条 pending 邀请，
由 project_invitations 表上的部分唯一索引保证。
accepted / rejected / expired 均为终态。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import InvitationStatus, MemberRole, TERMINAL_INVITATION_STATES


class ProjectInvitation(BaseModel):
    """项目邀请"""

    invitation_id: str = Field(description="唯一标识，ULID 格式")
    project_id: str = Field(description="目标项目 ID")
    invited_user: str = Field(description="被邀请用户 ID")
    invited_by: str = Field(description="邀请人用户 ID")
    role: MemberRole = Field(default=MemberRole.MEMBER, description="加入后的角色")
    invitation_status: InvitationStatus = Field(
        default=InvitationStatus.PENDING, description="邀请状态"
    )
    expires_at: datetime = Field(description="过期时间")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    def is_pending(self) -> bool:
        return self.invitation_status == InvitationStatus.PENDING

    def is_terminal(self) -> bool:
        return self.invitation_status in TERMINAL_INVITATION_STATES

    def is_past_deadline(self, now: datetime) -> bool:
        """截止时间已过（不论状态是否已被清扫标记）"""
        return self.expires_at < now
