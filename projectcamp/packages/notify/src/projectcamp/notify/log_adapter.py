"""LogMailAdapter -- 日志模式邮件通道

不真正发送，只把邮件摘要写入结构化日志。
开发环境的默认通道，也是 NotificationDispatcher 的降级后备。
"""

import structlog

from .models import DeliveryResult, EmailMessage

log = structlog.get_logger()


class LogMailAdapter:
    """将邮件写入日志的通道"""

    def __init__(self) -> None:
        self.sent: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> DeliveryResult:
        self.sent.append(message)
        log.info(
            "mail_logged",
            to=message.to,
            subject=message.subject,
            body_length=len(message.body),
        )
        return DeliveryResult(channel="log")
