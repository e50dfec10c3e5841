"""服务层公共基类

读取 -> 校验 -> 变更 -> 追加日志 -> 保存 的编排骨架：
- 同一文档的写操作在进程内通过 asyncio.Lock 串行化
- 每次尝试整体运行在一个写事务内，校验只会读到已提交的数据
- 版本校验失败（StaleWriteError）时重新读取、重新校验并重试
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from projectcamp.core.clock import Clock, utc_now
from projectcamp.core.config import MAX_STALE_WRITE_RETRIES
from projectcamp.core.errors import ForbiddenError, NotFoundError, StaleWriteError
from projectcamp.core.models import ActorSnapshot, Project, User
from projectcamp.core.store import StoreGroup, write_transaction

log = structlog.get_logger()

T = TypeVar("T")


class ServiceBase:
    """业务服务基类"""

    _doc_locks: dict[str, asyncio.Lock] = {}
    _doc_locks_guard = asyncio.Lock()
    _max_stale_retries = MAX_STALE_WRITE_RETRIES

    def __init__(
        self,
        store_group: StoreGroup,
        notifier=None,
        clock: Clock = utc_now,
    ) -> None:
        self._stores = store_group
        self._notifier = notifier
        self._clock = clock

    @classmethod
    async def _get_doc_lock(cls, key: str) -> asyncio.Lock:
        """获取文档级别锁，序列化同一文档的写操作。"""
        async with cls._doc_locks_guard:
            lock = cls._doc_locks.get(key)
            if lock is None:
                lock = asyncio.Lock()
                cls._doc_locks[key] = lock
            return lock

    @classmethod
    async def _cleanup_doc_lock(cls, key: str) -> None:
        """文档写入结束后清理空闲 lock，避免全局字典无限增长。"""
        async with cls._doc_locks_guard:
            lock = cls._doc_locks.get(key)
            if lock is not None and not lock.locked():
                cls._doc_locks.pop(key, None)

    async def _with_retry(self, key: str, attempt_fn: Callable[[], Awaitable[T]]) -> T:
        """在文档锁与写事务内执行一次完整的 读取-校验-写入，版本冲突时重试。"""
        lock = await self._get_doc_lock(key)
        try:
            async with lock:
                for attempt in range(1, self._max_stale_retries + 1):
                    try:
                        async with write_transaction(self._stores):
                            return await attempt_fn()
                    except StaleWriteError as e:
                        if attempt < self._max_stale_retries:
                            log.warning(
                                "stale_write_retry",
                                doc=key,
                                attempt=attempt,
                                expected_version=e.expected_version,
                            )
                            continue
                        raise
        finally:
            await self._cleanup_doc_lock(key)
        raise RuntimeError("failed to save document after retries")

    @staticmethod
    def _snapshot(user: User) -> ActorSnapshot:
        return ActorSnapshot.from_user(user)

    async def _load_project(self, project_id: str) -> Project:
        project = await self._stores.project_store.get_project(project_id)
        if project is None:
            raise NotFoundError(
                f"Project {project_id} does not exist", code="PROJECT_NOT_FOUND"
            )
        return project

    @staticmethod
    def _require_member(project: Project, user: User) -> None:
        if not project.has_member(user.user_id):
            raise ForbiddenError(
                "You are not a member of this project", code="NOT_PROJECT_MEMBER"
            )

    @staticmethod
    def _require_owner(project: Project, user: User) -> None:
        if not project.is_owner(user.user_id):
            raise ForbiddenError(
                "Only the project owner can perform this action",
                code="NOT_PROJECT_OWNER",
            )

    def _notify(self, message) -> None:
        """后台发送通知，未配置通知器时跳过"""
        if self._notifier is not None:
            self._notifier.dispatch(message)
