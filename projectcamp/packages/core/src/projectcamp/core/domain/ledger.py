"""活动日志构建与内存过滤

领域函数通过 project_entry / task_entry 生成条目；seq 由存储层在写事务内分配。
filter_activities 是与 SqliteActivityStore.query 等价的内存实现，
用于校验工具和单元测试。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel
from ulid import ULID

from ..models.activity import ActivityLogEntry, ActivityQuery
from ..models.enums import (
    ActivityOwnerKind,
    ProjectActivityType,
    SortOrder,
    TaskActivityType,
)
from ..models.page import Page
from ..models.user import ActorSnapshot


def _merge_metadata(
    payload: BaseModel | None, extra: dict[str, Any] | None
) -> dict[str, Any]:
    merged: dict[str, Any] = dict(extra or {})
    if payload is not None:
        merged.update(payload.model_dump(mode="json", exclude_none=True))
    return merged


def project_entry(
    project_id: str,
    activity_type: ProjectActivityType,
    actor: ActorSnapshot,
    now: datetime,
    payload: BaseModel | None = None,
    extra: dict[str, Any] | None = None,
) -> ActivityLogEntry:
    """构建项目级活动条目"""
    return ActivityLogEntry(
        activity_id=str(ULID()),
        owner_kind=ActivityOwnerKind.PROJECT,
        owner_id=project_id,
        project_id=project_id,
        type=activity_type.value,
        performed_by=actor.user_id,
        performed_by_snapshot=actor,
        metadata=_merge_metadata(payload, extra),
        created_at=now,
    )


def task_entry(
    task_id: str,
    project_id: str,
    activity_type: TaskActivityType,
    actor: ActorSnapshot,
    now: datetime,
    payload: BaseModel | None = None,
    extra: dict[str, Any] | None = None,
) -> ActivityLogEntry:
    """构建任务级活动条目"""
    return ActivityLogEntry(
        activity_id=str(ULID()),
        owner_kind=ActivityOwnerKind.TASK,
        owner_id=task_id,
        project_id=project_id,
        type=activity_type.value,
        performed_by=actor.user_id,
        performed_by_snapshot=actor,
        metadata=_merge_metadata(payload, extra),
        created_at=now,
    )


def filter_activities(
    entries: list[ActivityLogEntry], query: ActivityQuery
) -> Page[ActivityLogEntry]:
    """按类型集合、时间闭区间过滤并分页"""
    wanted = set(query.types)
    matched = [
        e
        for e in entries
        if (not wanted or e.type in wanted)
        and (query.created_from is None or e.created_at >= query.created_from)
        and (query.created_to is None or e.created_at <= query.created_to)
    ]
    matched.sort(
        key=lambda e: (e.created_at, e.seq),
        reverse=query.sort == SortOrder.DESC,
    )
    start = query.pagination.offset
    window = matched[start : start + query.pagination.limit]
    return Page[ActivityLogEntry].build(window, len(matched), query.pagination)
