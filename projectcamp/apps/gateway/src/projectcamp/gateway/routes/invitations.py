"""邀请路由

POST /api/projects/{project_id}/invitations: owner 发送邀请
GET  /api/invitations: 当前用户的 pending / expired 邀请
POST /api/invitations/{invitation_id}/accept|reject
"""

from fastapi import APIRouter, Depends, Query
from projectcamp.core.models import (
    MemberRole,
    Page,
    Project,
    ProjectInvitation,
    User,
)
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse

from ..deps import get_current_user, get_invitation_service
from ..services.invitation_service import InvitationService
from .common import pagination_params

router = APIRouter()


class SendInvitationRequest(BaseModel):
    email: str = Field(description="被邀请用户的邮箱")
    role: MemberRole = Field(default=MemberRole.MEMBER, description="加入后的角色")


@router.post("/api/projects/{project_id}/invitations")
async def send_invitation(
    project_id: str,
    body: SendInvitationRequest,
    user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
):
    invitation = await service.send_invitation(user, project_id, body.email, body.role)
    return JSONResponse(status_code=201, content=invitation.model_dump(mode="json"))


@router.get("/api/invitations", response_model=Page[ProjectInvitation])
async def list_invitations(
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
):
    return await service.list_invitations(user, pagination_params(page, limit))


@router.post("/api/invitations/{invitation_id}/accept", response_model=Project)
async def accept_invitation(
    invitation_id: str,
    user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
):
    return await service.accept_invitation(user, invitation_id)


@router.post("/api/invitations/{invitation_id}/reject", response_model=ProjectInvitation)
async def reject_invitation(
    invitation_id: str,
    user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
):
    return await service.reject_invitation(user, invitation_id)
