"""UserService -- 身份存储上的注册、查询与管理员操作

认证（密码、JWT、Cookie）由外部完成；这里只把请求携带的用户 ID 解析为 User。
管理员可以列出用户、封禁 / 解封、修改系统角色与硬删除用户。
"""

import structlog
from projectcamp.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationFailedError,
)
from projectcamp.core.domain import membership
from projectcamp.core.models import Page, Pagination, User, UserRole
from projectcamp.core.models.payloads import MemberRemovedPayload
from projectcamp.core.store import save_project_with_activity, write_transaction
from ulid import ULID

from .base import ServiceBase

log = structlog.get_logger()


class UserService(ServiceBase):
    """用户业务服务"""

    async def register(
        self,
        username: str,
        email: str,
        password_hash: str = "",
        role: UserRole = UserRole.USER,
    ) -> User:
        """创建用户

        Raises:
            ValidationFailedError: 用户名或邮箱为空
            ConflictError: 邮箱已被注册
        """
        username = username.strip()
        email = email.strip().lower()
        if not username or not email:
            raise ValidationFailedError(
                "Username and email are required", code="USER_FIELDS_REQUIRED"
            )

        async with write_transaction(self._stores):
            if await self._stores.user_store.get_user_by_email(email) is not None:
                raise ConflictError(
                    "User with this email already exists", code="EMAIL_TAKEN"
                )
            now = self._clock()
            user = User(
                user_id=str(ULID()),
                username=username,
                email=email,
                password_hash=password_hash,
                role=role,
                created_at=now,
                updated_at=now,
            )
            await self._stores.user_store.create_user(user)

        log.info("user_registered", user_id=user.user_id)
        return user

    async def get_user(self, user_id: str) -> User:
        user = await self._stores.user_store.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} does not exist", code="USER_NOT_FOUND")
        return user

    async def authenticate(self, user_id: str | None) -> User:
        """将请求携带的用户 ID 解析为当前用户

        Raises:
            UnauthorizedError: 未携带或用户不存在
            ForbiddenError: 用户已被封禁
        """
        if not user_id:
            raise UnauthorizedError("Authentication required")
        user = await self._stores.user_store.get_user(user_id)
        if user is None:
            raise UnauthorizedError("Unknown user", code="UNKNOWN_USER")
        if user.is_blocked:
            raise ForbiddenError(
                "Your account has been blocked", code="USER_BLOCKED"
            )
        return user

    async def set_blocked(self, admin: User, target_id: str, blocked: bool) -> User:
        """管理员封禁 / 解封用户

        Raises:
            ForbiddenError: 调用者不是管理员，或试图封禁自己
            NotFoundError: 目标用户不存在
        """
        self._require_admin(admin)
        if admin.user_id == target_id:
            raise ForbiddenError("You cannot block yourself", code="CANNOT_BLOCK_SELF")

        async with write_transaction(self._stores):
            target = await self.get_user(target_id)
            updated = target.model_copy(
                update={"is_blocked": blocked, "updated_at": self._clock()}
            )
            await self._stores.user_store.update_user(updated)

        log.info(
            "user_block_changed",
            user_id=target_id,
            is_blocked=blocked,
            admin_id=admin.user_id,
        )
        return updated

    @staticmethod
    def _require_admin(user: User) -> None:
        if user.role != UserRole.ADMIN:
            raise ForbiddenError("Admin privileges required", code="NOT_ADMIN")

    async def list_users(self, admin: User, pagination: Pagination) -> Page[User]:
        """管理员分页查看全部用户"""
        self._require_admin(admin)
        items, total = await self._stores.user_store.list_users(pagination)
        return Page[User].build(items, total, pagination)

    async def change_role(self, admin: User, target_id: str, role: UserRole) -> User:
        """管理员修改用户的系统角色

        Raises:
            ForbiddenError: 调用者不是管理员
            NotFoundError: 目标用户不存在
        """
        self._require_admin(admin)
        async with write_transaction(self._stores):
            target = await self.get_user(target_id)
            updated = target.model_copy(update={"role": role, "updated_at": self._clock()})
            await self._stores.user_store.update_user(updated)

        log.info(
            "user_role_changed",
            user_id=target_id,
            old_role=target.role,
            new_role=role,
            admin_id=admin.user_id,
        )
        return updated

    async def delete_user(self, admin: User, target_id: str) -> None:
        """管理员硬删除用户

        用户先从参与的项目中移除（每个项目记录一条 MEMBER_REMOVED），
        收到的邀请一并删除；历史日志中的操作者快照保持不变。
        仍是某个项目 owner 的用户不能删除，必须先转移所有权。

        Raises:
            ForbiddenError: 调用者不是管理员，或试图删除自己
            NotFoundError: 目标用户不存在
            ConflictError: 目标用户仍是项目 owner
        """
        self._require_admin(admin)
        if admin.user_id == target_id:
            raise ForbiddenError("You cannot delete yourself", code="CANNOT_DELETE_SELF")

        async with write_transaction(self._stores):
            target = await self.get_user(target_id)
            projects = await self._stores.project_store.list_member_projects(target_id)
            owned = [p.project_id for p in projects if p.is_owner(target_id)]
            if owned:
                raise ConflictError(
                    f"User still owns {len(owned)} project(s); transfer ownership first",
                    code="USER_OWNS_PROJECTS",
                )

            now = self._clock()
            metadata = MemberRemovedPayload(
                member_id=target_id, removed_member=self._snapshot(target)
            )
            for project in projects:
                updated, entry = membership.remove_member(
                    project, target_id, self._snapshot(admin), now, metadata=metadata
                )
                await save_project_with_activity(self._stores, updated, entry)
            await self._stores.invitation_store.delete_for_user(target_id)
            await self._stores.user_store.delete_user(target_id)

        log.info(
            "user_deleted",
            user_id=target_id,
            removed_from=len(projects),
            admin_id=admin.user_id,
        )
