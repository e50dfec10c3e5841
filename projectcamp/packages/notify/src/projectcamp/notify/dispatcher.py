"""NotificationDispatcher -- 通知分发与降级

降级链: HttpMailClient -> LogMailAdapter
每次发送先尝试 primary，失败则切换到 fallback，不维护显式的"降级状态"标记。

业务操作通过 dispatch() 提交通知：后台发送，失败只记录日志，
不会影响已经提交的业务事务。
"""

import asyncio

import structlog

from .client import HttpMailClient
from .config import MailConfig
from .exceptions import NotificationError
from .log_adapter import LogMailAdapter
from .models import DeliveryResult, EmailMessage

log = structlog.get_logger()


class NotificationDispatcher:
    """通知分发器"""

    def __init__(self, primary, fallback=None) -> None:
        """
        Args:
            primary: 主通道（HttpMailClient 或 LogMailAdapter）
            fallback: 降级通道，None 表示无降级
        """
        self._primary = primary
        self._fallback = fallback
        self._pending: set[asyncio.Task] = set()

    async def send_email(self, message: EmailMessage) -> DeliveryResult:
        """带降级的同步发送

        Raises:
            NotificationError: primary 和 fallback 均失败
        """
        primary_error: Exception | None = None
        try:
            return await self._primary.send(message)
        except Exception as e:
            primary_error = e
            log.warning("mail_primary_failed_attempting_fallback", error=str(e))

        if self._fallback is None:
            raise NotificationError(
                f"Primary 发送失败且无 fallback 配置: {primary_error}",
                recoverable=False,
            ) from primary_error

        try:
            result = await self._fallback.send(message)
        except Exception as fallback_error:
            log.error(
                "mail_both_channels_failed",
                primary_error=str(primary_error),
                fallback_error=str(fallback_error),
            )
            raise NotificationError(
                f"Primary 和 Fallback 均失败。Primary: {primary_error}; "
                f"Fallback: {fallback_error}",
                recoverable=False,
            ) from fallback_error

        log.info("mail_fallback_activated", fallback_reason=str(primary_error))
        return result.model_copy(
            update={"is_fallback": True, "fallback_reason": f"Primary 失败: {primary_error}"}
        )

    def dispatch(self, message: EmailMessage) -> asyncio.Task:
        """后台发送，不等待结果"""
        task = asyncio.create_task(self._deliver(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _deliver(self, message: EmailMessage) -> DeliveryResult | None:
        try:
            return await self.send_email(message)
        except Exception as e:
            log.error(
                "mail_delivery_failed",
                to=message.to,
                subject=message.subject,
                error=str(e),
            )
            return None

    async def drain(self) -> None:
        """等待所有后台发送结束（关闭时调用）"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending_count(self) -> int:
        return len(self._pending)


def build_dispatcher(config: MailConfig) -> NotificationDispatcher:
    """按配置组装分发器

    http 模式: HttpMailClient，降级到 LogMailAdapter
    log 模式:  仅 LogMailAdapter
    """
    if config.mail_mode == "http":
        primary = HttpMailClient(
            api_url=config.api_url,
            api_key=config.api_key.get_secret_value(),
            sender=config.sender,
            timeout_s=config.timeout_s,
        )
        return NotificationDispatcher(primary=primary, fallback=LogMailAdapter())
    return NotificationDispatcher(primary=LogMailAdapter())
