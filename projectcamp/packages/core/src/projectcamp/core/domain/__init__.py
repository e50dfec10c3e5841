"""领域引擎 -- 成员、项目生命周期、邀请、任务与评论的纯函数状态机

每个变更函数返回更新后的副本和一条活动日志条目，持久化由服务层在事务内完成。
"""

from . import comments, invitation, ledger, membership, project_lifecycle, task_engine
from .membership import Mutation
from .task_engine import TaskMutation, can, parse_action

__all__ = [
    "comments",
    "invitation",
    "ledger",
    "membership",
    "project_lifecycle",
    "task_engine",
    "Mutation",
    "TaskMutation",
    "can",
    "parse_action",
]
