"""Project Domain Model

members 中恰好一个成员的 role=owner（创建之后始终成立），owner 一定是成员。
version 为乐观锁计数，每次持久化写入 +1。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import MemberRole, ProjectStatus


class ProjectMember(BaseModel):
    """项目成员"""

    user_id: str = Field(description="成员用户 ID")
    role: MemberRole = Field(default=MemberRole.MEMBER, description="项目内角色")
    joined_at: datetime = Field(description="加入时间")


class Project(BaseModel):
    """Project 数据模型"""

    project_id: str = Field(description="唯一标识，ULID 格式")
    name: str = Field(description="项目名称")
    description: str = Field(default="", description="项目描述")
    status: ProjectStatus = Field(default=ProjectStatus.ACTIVE, description="当前状态")
    members: list[ProjectMember] = Field(default_factory=list, description="成员列表")
    version: int = Field(default=1, description="乐观锁版本号")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    @property
    def owner_id(self) -> str | None:
        """当前 owner 的用户 ID"""
        for member in self.members:
            if member.role == MemberRole.OWNER:
                return member.user_id
        return None

    def get_member(self, user_id: str) -> ProjectMember | None:
        for member in self.members:
            if member.user_id == user_id:
                return member
        return None

    def has_member(self, user_id: str) -> bool:
        return self.get_member(user_id) is not None

    def is_owner(self, user_id: str) -> bool:
        member = self.get_member(user_id)
        return member is not None and member.role == MemberRole.OWNER

    def is_active(self) -> bool:
        return self.status == ProjectStatus.ACTIVE

    def owner_count(self) -> int:
        return sum(1 for m in self.members if m.role == MemberRole.OWNER)
