"""项目生命周期状态机

active -> {inactive, completed}; inactive -> {active, completed}; completed 为终态。
只有 owner 可以调用，由服务层校验。
"""

from datetime import datetime

from ..errors import ConflictError
from ..models.enums import ProjectActivityType, ProjectStatus, validate_project_transition
from ..models.payloads import ProjectStatusPayload
from ..models.project import Project
from ..models.user import ActorSnapshot
from .ledger import project_entry
from .membership import Mutation


def update_project_status(
    project: Project,
    new_status: ProjectStatus,
    actor: ActorSnapshot,
    now: datetime,
) -> Mutation:
    """推进项目状态

    Raises:
        ConflictError: 流转不合法（含终态与同状态）
    """
    old_status = project.status
    if not validate_project_transition(old_status, new_status):
        raise ConflictError(
            f"Cannot transition project from '{old_status}' to '{new_status}'",
            code="ILLEGAL_PROJECT_TRANSITION",
        )

    updated = project.model_copy(update={"status": new_status, "updated_at": now})
    entry = project_entry(
        project.project_id,
        ProjectActivityType.STATUS_UPDATED,
        actor,
        now,
        payload=ProjectStatusPayload(old_status=old_status, new_status=new_status),
    )
    return updated, entry
