"""项目路由

项目 CRUD、成员管理、状态流转、所有权转移与项目活动日志。
错误统一由 main.py 注册的异常处理器渲染为 {"error": {"code", "message"}}。
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from projectcamp.core.models import (
    ActivityLogEntry,
    MemberRole,
    Page,
    Project,
    ProjectStatus,
    User,
)
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_current_user, get_project_service
from ..services.project_service import ProjectService
from .common import activity_query_params, pagination_params

router = APIRouter()


class CreateProjectRequest(BaseModel):
    name: str = Field(min_length=1, description="项目名称")
    description: str = Field(default="", description="项目描述")


class AddMemberRequest(BaseModel):
    email: str = Field(description="被添加用户的邮箱")


class UpdateStatusRequest(BaseModel):
    status: ProjectStatus


class TransferOwnershipRequest(BaseModel):
    new_owner_id: str = Field(description="新 owner 的用户 ID（必须是现有成员）")


class MemberView(BaseModel):
    user_id: str
    role: MemberRole
    joined_at: datetime
    username: str | None = None
    email: str | None = None


@router.post("/api/projects")
async def create_project(
    body: CreateProjectRequest,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    project = await service.create_project(user, body.name, body.description)
    return JSONResponse(status_code=201, content=project.model_dump(mode="json"))


@router.get("/api/projects", response_model=Page[Project])
async def list_my_projects(
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return await service.list_my_projects(user, pagination_params(page, limit))


@router.get("/api/projects/{project_id}", response_model=Project)
async def get_project(
    project_id: str,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return await service.get_project(user, project_id)


@router.get("/api/projects/{project_id}/members", response_model=list[MemberView])
async def list_members(
    project_id: str,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    members = await service.list_members(user, project_id)
    return [
        MemberView(
            user_id=m.user_id,
            role=m.role,
            joined_at=m.joined_at,
            username=u.username if u else None,
            email=u.email if u else None,
        )
        for m, u in members
    ]


@router.post("/api/projects/{project_id}/members", response_model=Project)
async def add_member(
    project_id: str,
    body: AddMemberRequest,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return await service.add_member(user, project_id, body.email)


@router.delete("/api/projects/{project_id}/members/{member_id}", response_model=Project)
async def remove_member(
    project_id: str,
    member_id: str,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return await service.remove_member(user, project_id, member_id)


@router.patch("/api/projects/{project_id}/status", response_model=Project)
async def update_project_status(
    project_id: str,
    body: UpdateStatusRequest,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return await service.update_status(user, project_id, body.status)


@router.post("/api/projects/{project_id}/transfer-ownership", response_model=Project)
async def transfer_ownership(
    project_id: str,
    body: TransferOwnershipRequest,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return await service.transfer_ownership(user, project_id, body.new_owner_id)


@router.post("/api/projects/{project_id}/leave", response_model=Project)
async def leave_project(
    project_id: str,
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    return await service.leave_project(user, project_id)


@router.get(
    "/api/projects/{project_id}/activities",
    response_model=Page[ActivityLogEntry],
)
async def list_project_activities(
    project_id: str,
    type: str | None = Query(default=None, description="逗号分隔的活动类型"),
    from_: str | None = Query(default=None, alias="from", description="起始日期 YYYY-MM-DD"),
    to: str | None = Query(default=None, description="结束日期 YYYY-MM-DD（含当天）"),
    sort: str | None = Query(default=None, description="asc / desc"),
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    user: User = Depends(get_current_user),
    service: ProjectService = Depends(get_project_service),
):
    query = activity_query_params(type, from_, to, sort, page, limit)
    return await service.list_activities(user, project_id, query)
