"""ProjectCamp Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .activity import ActivityLogEntry, ActivityQuery
from .comment import TaskComment
from .enums import (
    ACTIVE_TASK_STATES,
    INVITATION_TRANSITIONS,
    PROJECT_TRANSITIONS,
    TASK_TRANSITIONS,
    TERMINAL_INVITATION_STATES,
    ActivityOwnerKind,
    InvitationStatus,
    MemberRole,
    MembershipSource,
    ProjectActivityType,
    ProjectStatus,
    SortOrder,
    TaskAction,
    TaskActivityType,
    TaskStatus,
    UserRole,
    validate_invitation_transition,
    validate_project_transition,
    validate_task_transition,
)
from .invitation import ProjectInvitation
from .page import Page, Pagination
from .project import Project, ProjectMember
from .task import Task
from .user import ActorSnapshot, User

__all__ = [
    # 枚举
    "UserRole",
    "MemberRole",
    "ProjectStatus",
    "InvitationStatus",
    "TaskStatus",
    "ActivityOwnerKind",
    "ProjectActivityType",
    "TaskActivityType",
    "MembershipSource",
    "TaskAction",
    "SortOrder",
    # 状态机
    "PROJECT_TRANSITIONS",
    "INVITATION_TRANSITIONS",
    "TASK_TRANSITIONS",
    "TERMINAL_INVITATION_STATES",
    "ACTIVE_TASK_STATES",
    "validate_project_transition",
    "validate_invitation_transition",
    "validate_task_transition",
    # 实体
    "User",
    "ActorSnapshot",
    "Project",
    "ProjectMember",
    "ProjectInvitation",
    "Task",
    "TaskComment",
    # 活动日志
    "ActivityLogEntry",
    "ActivityQuery",
    # 分页
    "Page",
    "Pagination",
]
