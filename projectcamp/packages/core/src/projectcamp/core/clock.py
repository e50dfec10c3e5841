"""时钟注入点

服务、领域函数与过期清扫都通过 Clock 取当前时间，测试中可替换为固定时钟。
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """默认时钟：当前 UTC 时间"""
    return datetime.now(UTC)


class FrozenClock:
    """可手动推进的固定时钟"""

    def __init__(self, now: datetime) -> None:
        self._now = now

    def __call__(self) -> datetime:
        return self._now

    def advance(self, **delta) -> None:
        self._now = self._now + timedelta(**delta)

    def set(self, now: datetime) -> None:
        self._now = now
