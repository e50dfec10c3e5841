"""ProjectService -- 项目、成员与所有权业务逻辑

每个写操作在项目级锁内完成一次 读取 -> 权限校验 -> 领域变更 -> 事务写入，
项目文档版本冲突时整体重试。
"""

from collections.abc import Callable

import structlog
from projectcamp.core.domain import membership, project_lifecycle
from projectcamp.core.domain.membership import Mutation
from projectcamp.core.errors import NotFoundError, ValidationFailedError
from projectcamp.core.models import (
    ActivityLogEntry,
    ActivityOwnerKind,
    ActivityQuery,
    Page,
    Pagination,
    Project,
    ProjectMember,
    ProjectStatus,
    User,
)
from projectcamp.core.models.payloads import (
    MemberAddedPayload,
    MemberRemovedPayload,
    OwnershipTransferredPayload,
)
from projectcamp.core.store import (
    create_project_with_activity,
    save_project_with_activity,
)

from .base import ServiceBase

log = structlog.get_logger()


class ProjectService(ServiceBase):
    """项目业务服务"""

    async def create_project(self, actor: User, name: str, description: str = "") -> Project:
        """创建项目，创建者成为 owner"""
        if not name.strip():
            raise ValidationFailedError("Project name is required", code="NAME_REQUIRED")
        project, entry = membership.new_project(
            name.strip(), description, self._snapshot(actor), self._clock()
        )
        await create_project_with_activity(self._stores, project, entry)
        log.info("project_created", project_id=project.project_id, owner_id=actor.user_id)
        return project

    async def get_project(self, actor: User, project_id: str) -> Project:
        """查询项目（仅成员可见）"""
        project = await self._load_project(project_id)
        self._require_member(project, actor)
        return project

    async def list_my_projects(self, actor: User, pagination: Pagination) -> Page[Project]:
        """当前用户参与的项目，按最近更新倒序"""
        items, total = await self._stores.project_store.list_projects_for_user(
            actor.user_id, pagination
        )
        return Page[Project].build(items, total, pagination)

    async def list_members(
        self, actor: User, project_id: str
    ) -> list[tuple[ProjectMember, User | None]]:
        """成员列表及其用户信息"""
        project = await self.get_project(actor, project_id)
        users = await self._stores.user_store.get_users([m.user_id for m in project.members])
        by_id = {u.user_id: u for u in users}
        return [(m, by_id.get(m.user_id)) for m in project.members]

    async def _mutate(
        self,
        project_id: str,
        actor: User,
        mutate: Callable[[Project], Mutation],
    ) -> tuple[Project, ActivityLogEntry]:
        async def attempt() -> tuple[Project, ActivityLogEntry]:
            project = await self._load_project(project_id)
            self._require_owner(project, actor)
            updated, entry = mutate(project)
            return await save_project_with_activity(self._stores, updated, entry)

        return await self._with_retry(f"project:{project_id}", attempt)

    async def add_member(self, actor: User, project_id: str, email: str) -> Project:
        """owner 按邮箱直接添加成员

        Raises:
            NotFoundError: 邮箱对应的用户不存在
            ConflictError: 用户已是成员
        """

        async def attempt() -> tuple[Project, User]:
            user = await self._stores.user_store.get_user_by_email(email)
            if user is None:
                raise NotFoundError(
                    "User with this email does not exist", code="USER_NOT_FOUND"
                )
            project = await self._load_project(project_id)
            self._require_owner(project, actor)
            updated, entry = membership.add_member(
                project,
                user.user_id,
                self._snapshot(actor),
                self._clock(),
                metadata=MemberAddedPayload(
                    member_id=user.user_id, added_member=self._snapshot(user)
                ),
            )
            saved, _ = await save_project_with_activity(self._stores, updated, entry)
            return saved, user

        project, user = await self._with_retry(f"project:{project_id}", attempt)
        log.info("project_member_added", project_id=project_id, member_id=user.user_id)
        return project

    async def remove_member(self, actor: User, project_id: str, member_id: str) -> Project:
        """owner 移除成员（owner 自身不可被移除）"""
        target = await self._stores.user_store.get_user(member_id)
        metadata = MemberRemovedPayload(
            member_id=member_id,
            removed_member=self._snapshot(target) if target else None,
        )
        project, _ = await self._mutate(
            project_id,
            actor,
            lambda p: membership.remove_member(
                p, member_id, self._snapshot(actor), self._clock(), metadata=metadata
            ),
        )
        log.info("project_member_removed", project_id=project_id, member_id=member_id)
        return project

    async def transfer_ownership(
        self, actor: User, project_id: str, new_owner_id: str
    ) -> Project:
        """owner 将所有权转移给现有成员"""
        new_owner = await self._stores.user_store.get_user(new_owner_id)

        def mutate(p: Project) -> Mutation:
            return membership.change_owner(
                p,
                new_owner_id,
                self._snapshot(actor),
                self._clock(),
                metadata=OwnershipTransferredPayload(
                    old_owner_id=actor.user_id,
                    new_owner_id=new_owner_id,
                    old_owner=self._snapshot(actor),
                    new_owner=self._snapshot(new_owner) if new_owner else None,
                ),
            )

        project, _ = await self._mutate(project_id, actor, mutate)
        log.info(
            "project_ownership_transferred",
            project_id=project_id,
            old_owner_id=actor.user_id,
            new_owner_id=new_owner_id,
        )
        return project

    async def leave_project(self, actor: User, project_id: str) -> Project:
        """成员主动离开（owner 必须先转移所有权）"""

        async def attempt() -> tuple[Project, ActivityLogEntry]:
            project = await self._load_project(project_id)
            updated, entry = membership.leave_project(
                project, actor.user_id, self._snapshot(actor), self._clock()
            )
            return await save_project_with_activity(self._stores, updated, entry)

        project, _ = await self._with_retry(f"project:{project_id}", attempt)
        log.info("project_member_left", project_id=project_id, member_id=actor.user_id)
        return project

    async def update_status(
        self, actor: User, project_id: str, new_status: ProjectStatus
    ) -> Project:
        """owner 推进项目状态"""
        project, _ = await self._mutate(
            project_id,
            actor,
            lambda p: project_lifecycle.update_project_status(
                p, new_status, self._snapshot(actor), self._clock()
            ),
        )
        log.info("project_status_updated", project_id=project_id, new_status=new_status)
        return project

    async def list_activities(
        self, actor: User, project_id: str, query: ActivityQuery
    ) -> Page[ActivityLogEntry]:
        """项目活动日志（仅 owner）"""
        project = await self._load_project(project_id)
        self._require_owner(project, actor)
        return await self._stores.activity_store.query_activities(
            ActivityOwnerKind.PROJECT, project_id, query
        )
