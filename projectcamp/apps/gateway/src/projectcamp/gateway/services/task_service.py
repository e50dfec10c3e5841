"""TaskService -- 任务创建、分配与状态流转

权限判定统一走 task_engine.can()；任务文档版本冲突时在任务级锁内重试。
"""

from collections.abc import Callable
from datetime import datetime

import structlog
from projectcamp.core.domain import task_engine
from projectcamp.core.domain.task_engine import TaskMutation
from projectcamp.core.errors import ForbiddenError, NotFoundError
from projectcamp.core.models import (
    ActivityLogEntry,
    ActivityOwnerKind,
    ActivityQuery,
    Page,
    Pagination,
    Project,
    Task,
    TaskAction,
    TaskStatus,
    User,
)
from projectcamp.core.store import (
    create_task_with_activity,
    save_task_with_activity,
    write_transaction,
)
from projectcamp.notify import task_assigned_email

from .base import ServiceBase

log = structlog.get_logger()


class TaskService(ServiceBase):
    """任务业务服务"""

    async def _load_task(self, task_id: str) -> Task:
        task = await self._stores.task_store.get_task(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} does not exist", code="TASK_NOT_FOUND")
        return task

    async def _load_task_with_project(self, task_id: str) -> tuple[Task, Project]:
        task = await self._load_task(task_id)
        project = await self._load_project(task.project_id)
        return task, project

    async def create_task(
        self,
        actor: User,
        project_id: str,
        title: str,
        description: str = "",
        deadline: datetime | None = None,
    ) -> Task:
        """owner 在 active 项目中创建任务"""
        async with write_transaction(self._stores):
            project = await self._load_project(project_id)
            task, entry = task_engine.new_task(
                project,
                title,
                description,
                self._snapshot(actor),
                self._clock(),
                deadline=deadline,
            )
            await create_task_with_activity(self._stores, task, entry)
        log.info("task_created", task_id=task.task_id, project_id=project_id)
        return task

    async def list_tasks(
        self,
        actor: User,
        project_id: str,
        pagination: Pagination,
        status: TaskStatus | None = None,
    ) -> Page[Task]:
        """项目内任务列表（仅成员）"""
        project = await self._load_project(project_id)
        self._require_member(project, actor)
        items, total = await self._stores.task_store.list_tasks_for_project(
            project_id, pagination, status
        )
        return Page[Task].build(items, total, pagination)

    async def get_task(self, actor: User, task_id: str) -> Task:
        """任务详情（仅项目成员）"""
        task, project = await self._load_task_with_project(task_id)
        self._require_member(project, actor)
        return task

    async def check_permission(self, actor: User, task_id: str, action: str) -> bool:
        """判定当前用户能否对任务执行动作

        Raises:
            ValidationFailedError: 未知动作
        """
        parsed = task_engine.parse_action(action)
        task, project = await self._load_task_with_project(task_id)
        return task_engine.can(task, parsed, actor.user_id, project)

    async def require_permission(
        self, actor: User, task_id: str, action: TaskAction
    ) -> tuple[Task, Project]:
        """校验权限并返回任务与项目

        Raises:
            ForbiddenError: can() 返回 False
        """
        task, project = await self._load_task_with_project(task_id)
        if not task_engine.can(task, action, actor.user_id, project):
            raise ForbiddenError(
                f"You are not allowed to {action.value.replace('_', ' ')} on this task",
                code="TASK_PERMISSION_DENIED",
            )
        return task, project

    async def _mutate(
        self,
        task_id: str,
        mutate: Callable[[Task, Project], TaskMutation],
    ) -> tuple[Task, ActivityLogEntry, Project]:
        async def attempt() -> tuple[Task, ActivityLogEntry, Project]:
            task, project = await self._load_task_with_project(task_id)
            updated, entry = mutate(task, project)
            saved, stored = await save_task_with_activity(self._stores, updated, entry)
            return saved, stored, project

        return await self._with_retry(f"task:{task_id}", attempt)

    async def assign_member(self, actor: User, task_id: str, member_id: str) -> Task:
        """owner 将项目成员分配到任务，并通知被分配者"""
        task, _, project = await self._mutate(
            task_id,
            lambda t, p: task_engine.assign_member(
                t, p, member_id, self._snapshot(actor), self._clock()
            ),
        )
        log.info("task_member_assigned", task_id=task_id, member_id=member_id)

        assignee = await self._stores.user_store.get_user(member_id)
        if assignee is not None:
            self._notify(
                task_assigned_email(
                    to=assignee.email,
                    assignee_name=assignee.username,
                    task_title=task.title,
                    project_name=project.name,
                )
            )
        return task

    async def unassign_member(self, actor: User, task_id: str, member_id: str) -> Task:
        """owner 解除成员分配"""
        task, _, _ = await self._mutate(
            task_id,
            lambda t, p: task_engine.unassign_member(
                t, p, member_id, self._snapshot(actor), self._clock()
            ),
        )
        log.info("task_member_unassigned", task_id=task_id, member_id=member_id)
        return task

    async def update_status(
        self, actor: User, task_id: str, new_status: TaskStatus
    ) -> Task:
        """assignee 推进任务状态"""
        task, _, _ = await self._mutate(
            task_id,
            lambda t, p: task_engine.update_task_status(
                t, new_status, self._snapshot(actor), self._clock()
            ),
        )
        log.info("task_status_updated", task_id=task_id, new_status=new_status)
        return task

    async def list_activities(
        self, actor: User, task_id: str, query: ActivityQuery
    ) -> Page[ActivityLogEntry]:
        """任务活动日志（assignee 或 owner）"""
        await self.require_permission(actor, task_id, TaskAction.VIEW_COMMENTS)
        return await self._stores.activity_store.query_activities(
            ActivityOwnerKind.TASK, task_id, query
        )
