"""Task Domain Model

assigned_to 语义为集合（不含重复），成员必须在变更时刻属于项目；
该约束只在变更时校验，成员之后离开项目不会自动解除分配。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import ACTIVE_TASK_STATES, TaskStatus


class Task(BaseModel):
    """Task 数据模型"""

    task_id: str = Field(description="唯一标识，ULID 格式")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    project_id: str = Field(description="所属项目 ID")
    created_by: str = Field(description="创建者用户 ID")
    assigned_to: list[str] = Field(default_factory=list, description="被分配成员 ID")
    completion_deadline: datetime = Field(description="截止时间")
    task_status: TaskStatus = Field(default=TaskStatus.TODO, description="当前状态")
    version: int = Field(default=1, description="乐观锁版本号")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")

    def is_assignee(self, user_id: str) -> bool:
        return user_id in self.assigned_to

    def is_active(self) -> bool:
        return self.task_status in ACTIVE_TASK_STATES
