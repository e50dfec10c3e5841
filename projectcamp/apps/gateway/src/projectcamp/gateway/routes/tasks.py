"""任务与评论路由

任务创建 / 查询 / 分配 / 状态流转、评论与任务活动日志。
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from projectcamp.core.models import (
    ActivityLogEntry,
    Page,
    SortOrder,
    Task,
    TaskComment,
    TaskStatus,
    User,
)
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse, Response

from ..deps import get_comment_service, get_current_user, get_task_service
from ..services.comment_service import CommentService
from ..services.task_service import TaskService
from .common import activity_query_params, pagination_params, parse_sort

router = APIRouter()


class CreateTaskRequest(BaseModel):
    title: str = Field(min_length=1, description="任务标题")
    description: str = Field(default="", description="任务描述")
    completion_deadline: datetime | None = Field(
        default=None, description="截止时间，缺省为创建后 7 天"
    )


class AssignmentRequest(BaseModel):
    member_id: str = Field(description="被分配 / 解除分配的成员 ID")


class TaskStatusRequest(BaseModel):
    status: TaskStatus


class CommentRequest(BaseModel):
    content: str = Field(description="评论内容")
    mentions: list[str] = Field(default_factory=list, description="提及的成员 ID")


class PermissionView(BaseModel):
    action: str
    allowed: bool


@router.post("/api/projects/{project_id}/tasks")
async def create_task(
    project_id: str,
    body: CreateTaskRequest,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    task = await service.create_task(
        user, project_id, body.title, body.description, body.completion_deadline
    )
    return JSONResponse(status_code=201, content=task.model_dump(mode="json"))


@router.get("/api/projects/{project_id}/tasks", response_model=Page[Task])
async def list_tasks(
    project_id: str,
    status: TaskStatus | None = Query(default=None, description="按状态筛选"),
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return await service.list_tasks(
        user, project_id, pagination_params(page, limit), status
    )


@router.get("/api/tasks/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return await service.get_task(user, task_id)


@router.get("/api/tasks/{task_id}/permissions", response_model=PermissionView)
async def check_task_permission(
    task_id: str,
    action: str = Query(description="view_comments / add_comment / update_status / ..."),
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    allowed = await service.check_permission(user, task_id, action)
    return PermissionView(action=action, allowed=allowed)


@router.post("/api/tasks/{task_id}/assign", response_model=Task)
async def assign_member(
    task_id: str,
    body: AssignmentRequest,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return await service.assign_member(user, task_id, body.member_id)


@router.post("/api/tasks/{task_id}/unassign", response_model=Task)
async def unassign_member(
    task_id: str,
    body: AssignmentRequest,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return await service.unassign_member(user, task_id, body.member_id)


@router.patch("/api/tasks/{task_id}/status", response_model=Task)
async def update_task_status(
    task_id: str,
    body: TaskStatusRequest,
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return await service.update_status(user, task_id, body.status)


@router.get("/api/tasks/{task_id}/comments", response_model=Page[TaskComment])
async def list_comments(
    task_id: str,
    sort: str | None = Query(default=None, description="asc / desc"),
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    return await service.list_comments(
        user, task_id, pagination_params(page, limit), parse_sort(sort, SortOrder.ASC)
    )


@router.post("/api/tasks/{task_id}/comments")
async def add_comment(
    task_id: str,
    body: CommentRequest,
    user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    comment = await service.add_comment(user, task_id, body.content, body.mentions)
    return JSONResponse(status_code=201, content=comment.model_dump(mode="json"))


@router.delete("/api/tasks/{task_id}/comments/{comment_id}")
async def delete_comment(
    task_id: str,
    comment_id: str,
    user: User = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    await service.delete_comment(user, task_id, comment_id)
    return Response(status_code=204)


@router.get("/api/tasks/{task_id}/activities", response_model=Page[ActivityLogEntry])
async def list_task_activities(
    task_id: str,
    type: str | None = Query(default=None, description="逗号分隔的活动类型"),
    from_: str | None = Query(default=None, alias="from"),
    to: str | None = Query(default=None),
    sort: str | None = Query(default=None),
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    query = activity_query_params(type, from_, to, sort, page, limit)
    return await service.list_activities(user, task_id, query)
