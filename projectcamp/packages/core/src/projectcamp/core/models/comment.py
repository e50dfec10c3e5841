"""TaskComment Domain Model"""

from datetime import datetime

from pydantic import BaseModel, Field


class TaskComment(BaseModel):
    """任务评论 -- 仅作者本人可删除"""

    comment_id: str = Field(description="唯一标识，ULID 格式")
    task_id: str = Field(description="所属任务 ID")
    project_id: str = Field(description="所属项目 ID")
    commented_by: str = Field(description="作者用户 ID")
    mentions: list[str] = Field(default_factory=list, description="被提及的用户 ID")
    content: str = Field(description="评论内容")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
