"""活动日志 metadata 子类型

所有活动条目的结构化 metadata 定义，写入前 model_dump(mode="json")。
调用方传入的附加 metadata 会与这里的字段合并。
"""

from pydantic import BaseModel, Field

from .enums import MembershipSource, ProjectStatus, TaskStatus
from .user import ActorSnapshot


class ProjectCreatedPayload(BaseModel):
    """PROJECT_CREATED metadata"""

    name: str
    owner_id: str


class MemberAddedPayload(BaseModel):
    """MEMBER_ADDED metadata"""

    member_id: str
    source: MembershipSource = Field(default=MembershipSource.DIRECT)
    invitation_id: str | None = Field(default=None, description="来源邀请 ID")
    added_member: ActorSnapshot | None = Field(default=None, description="被添加成员快照")


class MemberRemovedPayload(BaseModel):
    """MEMBER_REMOVED / MEMBER_LEFT metadata"""

    member_id: str
    removed_member: ActorSnapshot | None = Field(default=None)


class OwnershipTransferredPayload(BaseModel):
    """OWNERSHIP_TRANSFERRED metadata"""

    old_owner_id: str
    new_owner_id: str
    old_owner: ActorSnapshot | None = Field(default=None)
    new_owner: ActorSnapshot | None = Field(default=None)


class ProjectStatusPayload(BaseModel):
    """STATUS_UPDATED metadata"""

    old_status: ProjectStatus
    new_status: ProjectStatus


class InvitationPayload(BaseModel):
    """INVITATION_SENT / INVITATION_REJECTED metadata"""

    invitation_id: str
    invited_user: str


class TaskCreatedPayload(BaseModel):
    """TASK_CREATED metadata"""

    title: str
    completion_deadline: str


class TaskAssignmentPayload(BaseModel):
    """TASK_ASSIGNED / TASK_UNASSIGNED metadata"""

    member_id: str


class TaskStatusPayload(BaseModel):
    """TASK_STATUS_UPDATED metadata"""

    old_status: TaskStatus
    new_status: TaskStatus


class CommentPayload(BaseModel):
    """COMMENT_ADDED / COMMENT_DELETED metadata"""

    comment_id: str
    content_preview: str = Field(default="", description="评论预览（截断到 200 字符）")
    mentions: list[str] = Field(default_factory=list)
