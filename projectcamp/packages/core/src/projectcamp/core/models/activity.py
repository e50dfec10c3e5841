"""ActivityLogEntry Domain Model

活动日志 append-only，不允许更新或删除。
seq 在同一 owner（项目或任务）内严格单调递增，由存储层在写事务内分配。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .enums import ACTIVITY_TYPES_BY_OWNER, ActivityOwnerKind, SortOrder
from .page import Pagination
from .user import ActorSnapshot


class ActivityLogEntry(BaseModel):
    """活动日志条目

    performed_by_snapshot 是写入时的拷贝，不是对 User 的引用。
    """

    model_config = ConfigDict(frozen=True)

    activity_id: str = Field(description="唯一标识，ULID 格式")
    owner_kind: ActivityOwnerKind = Field(description="所属实体类型")
    owner_id: str = Field(description="所属项目或任务 ID")
    project_id: str = Field(description="关联项目 ID（任务日志同样记录）")
    seq: int = Field(default=0, description="owner 内序号，写入时分配")
    type: str = Field(description="活动类型，取值受 owner_kind 约束")
    performed_by: str = Field(description="操作者用户 ID")
    performed_by_snapshot: ActorSnapshot = Field(description="操作者快照")
    metadata: dict[str, Any] = Field(default_factory=dict, description="动作相关 metadata")
    created_at: datetime = Field(description="写入时间")

    @model_validator(mode="after")
    def _check_type_matches_owner(self) -> "ActivityLogEntry":
        allowed = ACTIVITY_TYPES_BY_OWNER[self.owner_kind]
        if self.type not in {t.value for t in allowed}:
            raise ValueError(
                f"activity type {self.type!r} is not valid for {self.owner_kind.value}"
            )
        return self


class ActivityQuery(BaseModel):
    """活动日志读取条件

    types 为空表示不过滤类型；created_from / created_to 均为闭区间边界。
    """

    types: list[str] = Field(default_factory=list)
    created_from: datetime | None = None
    created_to: datetime | None = None
    sort: SortOrder = SortOrder.DESC
    pagination: Pagination = Field(default_factory=Pagination)
