"""枚举定义 -- 项目 / 邀请 / 任务三套状态机

包含 ProjectStatus、InvitationStatus、TaskStatus 状态机，
各自的合法流转映射与终态集合，以及活动日志类型、任务动作等封闭枚举。
"""

from enum import StrEnum


class UserRole(StrEnum):
    """系统级用户角色"""

    USER = "user"
    ADMIN = "admin"


class MemberRole(StrEnum):
    """项目内成员角色"""

    OWNER = "owner"
    MEMBER = "member"


class ProjectStatus(StrEnum):
    """Project 状态机"""

    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"


class InvitationStatus(StrEnum):
    """ProjectInvitation 状态机"""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class TaskStatus(StrEnum):
    """Task 状态机"""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# 项目合法状态流转
PROJECT_TRANSITIONS: dict[ProjectStatus, set[ProjectStatus]] = {
    ProjectStatus.ACTIVE: {ProjectStatus.INACTIVE, ProjectStatus.COMPLETED},
    ProjectStatus.INACTIVE: {ProjectStatus.ACTIVE, ProjectStatus.COMPLETED},
    # 终态不可再流转
    ProjectStatus.COMPLETED: set(),
}

# 邀请合法状态流转：只有 pending 可以离开
INVITATION_TRANSITIONS: dict[InvitationStatus, set[InvitationStatus]] = {
    InvitationStatus.PENDING: {
        InvitationStatus.ACCEPTED,
        InvitationStatus.REJECTED,
        InvitationStatus.EXPIRED,
    },
    InvitationStatus.ACCEPTED: set(),
    InvitationStatus.REJECTED: set(),
    InvitationStatus.EXPIRED: set(),
}

# 任务合法状态流转
TASK_TRANSITIONS: dict[TaskStatus, set[TaskStatus]] = {
    TaskStatus.TODO: {TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED},
    TaskStatus.IN_PROGRESS: {TaskStatus.COMPLETED},
    TaskStatus.COMPLETED: set(),
}

TERMINAL_INVITATION_STATES: set[InvitationStatus] = {
    InvitationStatus.ACCEPTED,
    InvitationStatus.REJECTED,
    InvitationStatus.EXPIRED,
}

# 活跃任务：可以评论、可以继续分配成员
ACTIVE_TASK_STATES: set[TaskStatus] = {TaskStatus.TODO, TaskStatus.IN_PROGRESS}


class ActivityOwnerKind(StrEnum):
    """活动日志所属实体"""

    PROJECT = "project"
    TASK = "task"


class ProjectActivityType(StrEnum):
    """项目级活动日志类型"""

    PROJECT_CREATED = "PROJECT_CREATED"
    MEMBER_ADDED = "MEMBER_ADDED"
    MEMBER_REMOVED = "MEMBER_REMOVED"
    MEMBER_LEFT = "MEMBER_LEFT"
    OWNERSHIP_TRANSFERRED = "OWNERSHIP_TRANSFERRED"
    STATUS_UPDATED = "STATUS_UPDATED"
    INVITATION_SENT = "INVITATION_SENT"
    INVITATION_REJECTED = "INVITATION_REJECTED"


class TaskActivityType(StrEnum):
    """任务级活动日志类型"""

    TASK_CREATED = "TASK_CREATED"
    TASK_ASSIGNED = "TASK_ASSIGNED"
    TASK_UNASSIGNED = "TASK_UNASSIGNED"
    TASK_STATUS_UPDATED = "TASK_STATUS_UPDATED"
    COMMENT_ADDED = "COMMENT_ADDED"
    COMMENT_DELETED = "COMMENT_DELETED"


ACTIVITY_TYPES_BY_OWNER: dict[ActivityOwnerKind, type[StrEnum]] = {
    ActivityOwnerKind.PROJECT: ProjectActivityType,
    ActivityOwnerKind.TASK: TaskActivityType,
}


class MembershipSource(StrEnum):
    """成员加入来源（写入 MEMBER_ADDED metadata.source）"""

    DIRECT = "DIRECT"
    INVITATION = "INVITATION"


class TaskAction(StrEnum):
    """任务权限动作 -- can() 的封闭动作集合"""

    VIEW_COMMENTS = "view_comments"
    ADD_COMMENT = "add_comment"
    UPDATE_STATUS = "update_status"
    ASSIGN_MEMBERS = "assign_members"
    UNASSIGN_MEMBERS = "unassign_members"


class SortOrder(StrEnum):
    """按 created_at 排序方向"""

    ASC = "asc"
    DESC = "desc"


def validate_project_transition(
    from_status: ProjectStatus, to_status: ProjectStatus
) -> bool:
    """验证项目状态流转是否合法"""
    return to_status in PROJECT_TRANSITIONS.get(from_status, set())


def validate_invitation_transition(
    from_status: InvitationStatus, to_status: InvitationStatus
) -> bool:
    """验证邀请状态流转是否合法"""
    return to_status in INVITATION_TRANSITIONS.get(from_status, set())


def validate_task_transition(from_status: TaskStatus, to_status: TaskStatus) -> bool:
    """验证任务状态流转是否合法

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = TASK_TRANSITIONS.get(from_status, set())
    return to_status in allowed
