"""User Domain Model + ActorSnapshot 值类型

ActorSnapshot 在写入活动日志时从 User 拷贝生成，
之后用户改名或换邮箱也不会回写历史记录。
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import UserRole


class User(BaseModel):
    """User 数据模型（身份存储记录）"""

    user_id: str = Field(description="唯一标识，ULID 格式")
    username: str = Field(description="用户名")
    email: str = Field(description="邮箱，全局唯一（小写存储）")
    password_hash: str = Field(default="", description="密码哈希，由外部身份服务生成")
    role: UserRole = Field(default=UserRole.USER, description="系统角色")
    is_blocked: bool = Field(default=False, description="是否被管理员封禁")
    is_email_verified: bool = Field(default=False, description="邮箱是否已验证")
    email_verification_token: str | None = Field(default=None)
    email_verification_expiry: datetime | None = Field(default=None)
    forgot_password_token: str | None = Field(default=None)
    forgot_password_expiry: datetime | None = Field(default=None)
    refresh_token: str | None = Field(default=None)
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")


class ActorSnapshot(BaseModel):
    """操作者快照 -- 写入时拷贝，不可变"""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "ActorSnapshot":
        return cls(user_id=user.user_id, username=user.username, email=user.email)
