"""数据一致性校验

扫描全部项目与邀请，报告违反以下约束的记录：
- 每个项目恰好一个 owner，且 owner 是成员
- 成员列表内无重复用户
- 同一 (project, user) 至多一条 pending 邀请
- 每个项目日志的 seq 从 1 开始连续递增
"""

import time
from collections import Counter

import structlog
from pydantic import BaseModel, Field

from .models.enums import ActivityOwnerKind
from .models.project import Project
from .store import StoreGroup

log = structlog.get_logger()


class Violation(BaseModel):
    """单条违规记录"""

    kind: str = Field(description="违规类别")
    subject_id: str = Field(description="相关项目 ID")
    detail: str = Field(default="", description="补充说明")


def check_project(project: Project) -> list[Violation]:
    """校验单个项目的成员不变量（纯函数）"""
    violations: list[Violation] = []
    owners = project.owner_count()
    if owners != 1:
        violations.append(
            Violation(
                kind="owner_count",
                subject_id=project.project_id,
                detail=f"expected exactly one owner, found {owners}",
            )
        )
    dupes = [
        uid for uid, n in Counter(m.user_id for m in project.members).items() if n > 1
    ]
    if dupes:
        violations.append(
            Violation(
                kind="duplicate_member",
                subject_id=project.project_id,
                detail=", ".join(dupes),
            )
        )
    return violations


async def check_invariants(stores: StoreGroup) -> list[Violation]:
    """全量扫描

    Returns:
        违规记录列表，为空表示数据一致
    """
    start_time = time.monotonic()
    violations: list[Violation] = []

    projects = await stores.project_store.list_all_projects()
    for project in projects:
        violations.extend(check_project(project))

        entries = await stores.activity_store.get_activities(
            ActivityOwnerKind.PROJECT, project.project_id
        )
        seqs = [e.seq for e in entries]
        if seqs != list(range(1, len(seqs) + 1)):
            violations.append(
                Violation(
                    kind="activity_seq_gap",
                    subject_id=project.project_id,
                    detail=f"seq values {seqs}",
                )
            )

    for project_id, user_id, count in (
        await stores.invitation_store.find_duplicate_pending()
    ):
        violations.append(
            Violation(
                kind="duplicate_pending_invitation",
                subject_id=project_id,
                detail=f"user {user_id} has {count} pending invitations",
            )
        )

    elapsed_ms = int((time.monotonic() - start_time) * 1000)
    await log.ainfo(
        "invariant_check_completed",
        project_count=len(projects),
        violation_count=len(violations),
        elapsed_ms=elapsed_ms,
    )
    return violations
