"""InvitationExpirySweeper -- 邀请过期定时清扫

每个周期重新读取时钟，把 expires_at < now 的 pending 邀请批量标记为 expired。
单次清扫失败只记录日志，循环继续。
"""

import asyncio

import structlog
from projectcamp.core.clock import Clock, utc_now
from projectcamp.core.config import get_sweep_interval_s
from projectcamp.core.store import StoreGroup, expire_pending_invitations

log = structlog.get_logger()


class InvitationExpirySweeper:
    """后台过期清扫器"""

    def __init__(
        self,
        store_group: StoreGroup,
        clock: Clock = utc_now,
        interval_s: float | None = None,
    ) -> None:
        """
        Args:
            store_group: Store 实例组
            clock: 时钟，每次清扫调用一次
            interval_s: 清扫间隔（秒），None 使用 PROJECTCAMP_SWEEP_INTERVAL_S
        """
        self._stores = store_group
        self._clock = clock
        self._interval_s = interval_s if interval_s is not None else get_sweep_interval_s()
        self._task: asyncio.Task | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """执行一次清扫（幂等），返回本次标记的邀请数"""
        now = self._clock()
        count = await expire_pending_invitations(self._stores, now)
        await log.ainfo("invitation_sweep_completed", expired_count=count, now=now.isoformat())
        return count

    async def _loop(self) -> None:
        while not self._stopping.is_set():
            try:
                await self.run_once()
            except Exception as e:
                log.error("invitation_sweep_failed", error=str(e), exc_info=True)
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self._interval_s)
            except TimeoutError:
                continue

    def start(self) -> None:
        """启动后台循环（重复调用无副作用）"""
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._loop())
        log.info("invitation_sweeper_started", interval_s=self._interval_s)

    async def stop(self) -> None:
        """停止后台循环并等待当前清扫结束"""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None
        log.info("invitation_sweeper_stopped")
