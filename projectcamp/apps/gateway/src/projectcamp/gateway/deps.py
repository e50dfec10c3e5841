"""依赖注入模块 -- 通过 FastAPI Depends 注入 Store、通知器、时钟与当前用户

这些实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Depends, Header, Request
from projectcamp.core.clock import Clock, utc_now
from projectcamp.core.models import User
from projectcamp.core.store import StoreGroup

from .services.comment_service import CommentService
from .services.invitation_service import InvitationService
from .services.project_service import ProjectService
from .services.task_service import TaskService
from .services.user_service import UserService


def get_store_group(request: Request) -> StoreGroup:
    """从 app.state 获取 StoreGroup 实例"""
    return request.app.state.store_group


def get_notifier(request: Request):
    """从 app.state 获取 NotificationDispatcher，未配置时为 None"""
    return getattr(request.app.state, "notifier", None)


def get_clock(request: Request) -> Clock:
    """从 app.state 获取时钟（测试可替换为 FrozenClock）"""
    return getattr(request.app.state, "clock", utc_now)


def get_user_service(
    store_group: StoreGroup = Depends(get_store_group),
    clock: Clock = Depends(get_clock),
) -> UserService:
    return UserService(store_group, clock=clock)


async def get_current_user(
    x_user_id: str | None = Header(default=None),
    users: UserService = Depends(get_user_service),
) -> User:
    """解析 X-User-Id 请求头为当前用户（认证由上游完成）"""
    return await users.authenticate(x_user_id)


def get_project_service(
    store_group: StoreGroup = Depends(get_store_group),
    notifier=Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> ProjectService:
    return ProjectService(store_group, notifier, clock)


def get_invitation_service(
    store_group: StoreGroup = Depends(get_store_group),
    notifier=Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> InvitationService:
    return InvitationService(store_group, notifier, clock)


def get_task_service(
    store_group: StoreGroup = Depends(get_store_group),
    notifier=Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> TaskService:
    return TaskService(store_group, notifier, clock)


def get_comment_service(
    store_group: StoreGroup = Depends(get_store_group),
    notifier=Depends(get_notifier),
    clock: Clock = Depends(get_clock),
) -> CommentService:
    return CommentService(store_group, notifier, clock)
