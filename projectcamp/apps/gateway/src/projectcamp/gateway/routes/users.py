"""用户路由

POST   /api/users: 注册用户（身份记录）
GET    /api/users/me: 当前用户
GET    /api/admin/users: 管理员分页查看全部用户
PATCH  /api/admin/users/{user_id}/role: 修改系统角色
DELETE /api/admin/users/{user_id}: 硬删除用户
POST   /api/admin/users/{user_id}/block|unblock: 管理员封禁 / 解封
"""

from fastapi import APIRouter, Depends, Query
from projectcamp.core.models import Page, User, UserRole
from pydantic import BaseModel, Field
from starlette.responses import JSONResponse, Response

from ..deps import get_current_user, get_user_service
from ..services.user_service import UserService
from .common import pagination_params

router = APIRouter()


class RegisterRequest(BaseModel):
    """注册请求体"""

    username: str = Field(min_length=1, description="用户名")
    email: str = Field(min_length=3, description="邮箱")
    password_hash: str = Field(default="", description="外部生成的密码哈希")


class UserView(BaseModel):
    """对外暴露的用户字段（不含令牌与哈希）"""

    user_id: str
    username: str
    email: str
    role: UserRole
    is_blocked: bool
    is_email_verified: bool

    @classmethod
    def of(cls, user: User) -> "UserView":
        return cls(
            user_id=user.user_id,
            username=user.username,
            email=user.email,
            role=user.role,
            is_blocked=user.is_blocked,
            is_email_verified=user.is_email_verified,
        )


class ChangeRoleRequest(BaseModel):
    role: UserRole = Field(description="新的系统角色：user / admin")


@router.post("/api/users")
async def register_user(
    body: RegisterRequest,
    users: UserService = Depends(get_user_service),
):
    user = await users.register(body.username, body.email, body.password_hash)
    return JSONResponse(status_code=201, content=UserView.of(user).model_dump(mode="json"))


@router.get("/api/users/me", response_model=UserView)
async def current_user(user: User = Depends(get_current_user)):
    return UserView.of(user)


@router.post("/api/admin/users/{user_id}/block", response_model=UserView)
async def block_user(
    user_id: str,
    admin: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    return UserView.of(await users.set_blocked(admin, user_id, True))


@router.post("/api/admin/users/{user_id}/unblock", response_model=UserView)
async def unblock_user(
    user_id: str,
    admin: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    return UserView.of(await users.set_blocked(admin, user_id, False))


@router.get("/api/admin/users", response_model=Page[UserView])
async def list_users(
    page: int | None = Query(default=None),
    limit: int | None = Query(default=None),
    admin: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    result = await users.list_users(admin, pagination_params(page, limit))
    return Page[UserView](
        items=[UserView.of(u) for u in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@router.patch("/api/admin/users/{user_id}/role", response_model=UserView)
async def change_user_role(
    user_id: str,
    body: ChangeRoleRequest,
    admin: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    return UserView.of(await users.change_role(admin, user_id, body.role))


@router.delete("/api/admin/users/{user_id}")
async def delete_user(
    user_id: str,
    admin: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    await users.delete_user(admin, user_id)
    return Response(status_code=204)
