"""任务分配与状态引擎

can() 是任务权限的唯一判定入口：对封闭的 TaskAction 做穷尽 match，
新增动作而未处理时类型检查器会在 assert_never 处报错。

状态机：todo -> {in_progress, completed}; in_progress -> {completed}; completed 为终态。
"""

from datetime import datetime, timedelta
from typing import assert_never

from ulid import ULID

from ..config import TASK_DEADLINE_DAYS
from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationFailedError
from ..models.activity import ActivityLogEntry
from ..models.enums import TaskAction, TaskActivityType, TaskStatus, validate_task_transition
from ..models.payloads import TaskAssignmentPayload, TaskCreatedPayload, TaskStatusPayload
from ..models.project import Project
from ..models.task import Task
from ..models.user import ActorSnapshot
from .ledger import task_entry

TaskMutation = tuple[Task, ActivityLogEntry]


def parse_action(value: str) -> TaskAction:
    """将外部传入的动作字符串解析为 TaskAction

    Raises:
        ValidationFailedError: 未知动作
    """
    try:
        return TaskAction(value)
    except ValueError:
        raise ValidationFailedError(
            f"Unknown task action: {value!r}", code="UNKNOWN_TASK_ACTION"
        ) from None


def can(task: Task, action: TaskAction, user_id: str, project: Project) -> bool:
    """判定用户能否对任务执行某个动作

    | action           | 需要任务 active | 允许条件              |
    | view_comments    | 否              | assignee 或 owner     |
    | add_comment      | 是              | assignee              |
    | update_status    | 否              | assignee              |
    | assign_members   | 是              | owner                 |
    | unassign_members | 否              | owner                 |
    """
    is_assignee = task.is_assignee(user_id)
    is_owner = project.is_owner(user_id)

    match action:
        case TaskAction.VIEW_COMMENTS:
            return is_assignee or is_owner
        case TaskAction.ADD_COMMENT:
            return task.is_active() and is_assignee
        case TaskAction.UPDATE_STATUS:
            return is_assignee
        case TaskAction.ASSIGN_MEMBERS:
            return task.is_active() and is_owner
        case TaskAction.UNASSIGN_MEMBERS:
            return is_owner
        case _:
            assert_never(action)


def new_task(
    project: Project,
    title: str,
    description: str,
    creator: ActorSnapshot,
    now: datetime,
    deadline: datetime | None = None,
) -> TaskMutation:
    """创建任务（仅 owner，项目必须 active）

    Raises:
        ForbiddenError: 创建者不是 owner
        ConflictError: 项目非 active
        ValidationFailedError: 标题为空
    """
    if not project.is_owner(creator.user_id):
        raise ForbiddenError(
            "Only the project owner can add tasks", code="NOT_PROJECT_OWNER"
        )
    if not project.is_active():
        raise ConflictError(
            "Tasks can only be added to active projects", code="PROJECT_NOT_ACTIVE"
        )
    if not title.strip():
        raise ValidationFailedError("Task title is required", code="TITLE_REQUIRED")

    task = Task(
        task_id=str(ULID()),
        title=title.strip(),
        description=description,
        project_id=project.project_id,
        created_by=creator.user_id,
        completion_deadline=deadline or now + timedelta(days=TASK_DEADLINE_DAYS),
        task_status=TaskStatus.TODO,
        created_at=now,
        updated_at=now,
    )
    entry = task_entry(
        task.task_id,
        project.project_id,
        TaskActivityType.TASK_CREATED,
        creator,
        now,
        payload=TaskCreatedPayload(
            title=task.title,
            completion_deadline=task.completion_deadline.isoformat(),
        ),
    )
    return task, entry


def assign_member(
    task: Task,
    project: Project,
    target_id: str,
    actor: ActorSnapshot,
    now: datetime,
) -> TaskMutation:
    """分配成员

    Raises:
        ValidationFailedError: 目标不是项目成员
        ForbiddenError: 调用者不是 owner，或任务已完成
        ConflictError: 目标已被分配
    """
    if not project.has_member(target_id):
        raise ValidationFailedError(
            "Only project members can be assigned to a task",
            code="ASSIGNEE_NOT_MEMBER",
        )
    if not project.is_owner(actor.user_id):
        raise ForbiddenError(
            "Only the project owner can assign members", code="NOT_PROJECT_OWNER"
        )
    if task.is_assignee(target_id):
        raise ConflictError(
            "Member is already assigned to this task", code="ALREADY_ASSIGNED"
        )
    if not can(task, TaskAction.ASSIGN_MEMBERS, actor.user_id, project):
        raise ForbiddenError(
            "Members cannot be assigned to a completed task", code="TASK_COMPLETED"
        )

    updated = task.model_copy(
        update={"assigned_to": [*task.assigned_to, target_id], "updated_at": now}
    )
    entry = task_entry(
        task.task_id,
        task.project_id,
        TaskActivityType.TASK_ASSIGNED,
        actor,
        now,
        payload=TaskAssignmentPayload(member_id=target_id),
    )
    return updated, entry


def unassign_member(
    task: Task,
    project: Project,
    target_id: str,
    actor: ActorSnapshot,
    now: datetime,
) -> TaskMutation:
    """解除分配；任务状态不限

    Raises:
        ForbiddenError: 调用者不是 owner
        NotFoundError: 目标未被分配
    """
    if not can(task, TaskAction.UNASSIGN_MEMBERS, actor.user_id, project):
        raise ForbiddenError(
            "Only the project owner can unassign members", code="NOT_PROJECT_OWNER"
        )
    if not task.is_assignee(target_id):
        raise NotFoundError(
            "Member is not assigned to this task", code="ASSIGNEE_NOT_FOUND"
        )

    updated = task.model_copy(
        update={
            "assigned_to": [uid for uid in task.assigned_to if uid != target_id],
            "updated_at": now,
        }
    )
    entry = task_entry(
        task.task_id,
        task.project_id,
        TaskActivityType.TASK_UNASSIGNED,
        actor,
        now,
        payload=TaskAssignmentPayload(member_id=target_id),
    )
    return updated, entry


def update_task_status(
    task: Task,
    new_status: TaskStatus,
    actor: ActorSnapshot,
    now: datetime,
) -> TaskMutation:
    """推进任务状态（仅 assignee）

    Raises:
        ForbiddenError: 调用者不是 assignee
        ConflictError: 流转不合法
    """
    if not task.is_assignee(actor.user_id):
        raise ForbiddenError(
            "Only assigned members can update the task status", code="NOT_ASSIGNEE"
        )
    old_status = task.task_status
    if not validate_task_transition(old_status, new_status):
        raise ConflictError(
            f"Cannot transition task from '{old_status}' to '{new_status}'",
            code="ILLEGAL_TASK_TRANSITION",
        )

    updated = task.model_copy(update={"task_status": new_status, "updated_at": now})
    entry = task_entry(
        task.task_id,
        task.project_id,
        TaskActivityType.TASK_STATUS_UPDATED,
        actor,
        now,
        payload=TaskStatusPayload(old_status=old_status, new_status=new_status),
    )
    return updated, entry
