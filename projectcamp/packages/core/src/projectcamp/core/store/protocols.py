"""Store Protocol 接口定义

定义各 Store 的抽象接口，使用 Python Protocol 实现结构化子类型（duck typing）。
服务层只依赖这些接口，测试中可替换为桩实现。
"""

from datetime import datetime
from typing import Protocol

from ..models.activity import ActivityLogEntry, ActivityQuery
from ..models.comment import TaskComment
from ..models.enums import ActivityOwnerKind, InvitationStatus, SortOrder, TaskStatus
from ..models.invitation import ProjectInvitation
from ..models.page import Page, Pagination
from ..models.project import Project
from ..models.task import Task
from ..models.user import User


class UserStore(Protocol):
    """身份存储接口"""

    async def create_user(self, user: User) -> None: ...

    async def get_user(self, user_id: str) -> User | None: ...

    async def get_user_by_email(self, email: str) -> User | None: ...

    async def get_users(self, user_ids: list[str]) -> list[User]: ...

    async def update_user(self, user: User) -> None: ...

    async def list_users(self, pagination: Pagination) -> tuple[list[User], int]: ...

    async def delete_user(self, user_id: str) -> bool: ...


class ProjectStore(Protocol):
    """Project 存储接口

    save_project 为版本校验写入，版本不匹配时抛出 StaleWriteError。
    """

    async def create_project(self, project: Project) -> None: ...

    async def get_project(self, project_id: str) -> Project | None: ...

    async def save_project(self, project: Project) -> Project: ...

    async def list_projects_for_user(
        self, user_id: str, pagination: Pagination
    ) -> tuple[list[Project], int]: ...

    async def list_member_projects(self, user_id: str) -> list[Project]: ...

    async def list_all_projects(self) -> list[Project]: ...


class InvitationStore(Protocol):
    """Invitation 存储接口

    状态变更只允许从 pending 出发，返回值表示写入是否生效。
    """

    async def create_invitation(self, invitation: ProjectInvitation) -> None: ...

    async def get_invitation(self, invitation_id: str) -> ProjectInvitation | None: ...

    async def find_pending(
        self, project_id: str, user_id: str
    ) -> ProjectInvitation | None: ...

    async def mark_status(
        self, invitation_id: str, new_status: InvitationStatus, updated_at: datetime
    ) -> bool: ...

    async def expire_pending_before(self, now: datetime) -> int: ...

    async def list_for_user(
        self,
        user_id: str,
        statuses: list[InvitationStatus],
        pagination: Pagination,
    ) -> tuple[list[ProjectInvitation], int]: ...

    async def delete_for_user(self, user_id: str) -> int: ...


class TaskStore(Protocol):
    """Task 存储接口"""

    async def create_task(self, task: Task) -> None: ...

    async def get_task(self, task_id: str) -> Task | None: ...

    async def save_task(self, task: Task) -> Task: ...

    async def list_tasks_for_project(
        self,
        project_id: str,
        pagination: Pagination,
        status: TaskStatus | None = None,
    ) -> tuple[list[Task], int]: ...


class CommentStore(Protocol):
    """Comment 存储接口"""

    async def create_comment(self, comment: TaskComment) -> None: ...

    async def get_comment(self, comment_id: str) -> TaskComment | None: ...

    async def delete_comment(self, comment_id: str) -> bool: ...

    async def list_comments(
        self, task_id: str, pagination: Pagination, sort: SortOrder = SortOrder.ASC
    ) -> tuple[list[TaskComment], int]: ...


class ActivityStore(Protocol):
    """活动日志存储接口 -- append-only"""

    async def append_activity(self, entry: ActivityLogEntry) -> ActivityLogEntry: ...

    async def get_activities(
        self, owner_kind: ActivityOwnerKind, owner_id: str
    ) -> list[ActivityLogEntry]: ...

    async def query_activities(
        self,
        owner_kind: ActivityOwnerKind,
        owner_id: str,
        query: ActivityQuery,
    ) -> Page[ActivityLogEntry]: ...
