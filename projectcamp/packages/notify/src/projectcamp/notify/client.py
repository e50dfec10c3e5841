"""HttpMailClient -- 邮件 API 调用封装

通过 httpx POST 到事务邮件服务的 HTTP 接口。
"""

import time

import httpx
import structlog

from .exceptions import MailServiceUnreachableError, NotificationError
from .models import DeliveryResult, EmailMessage

log = structlog.get_logger()

# 连接类异常类型集合（触发 MailServiceUnreachableError，进而触发降级）
_CONNECTION_ERROR_TYPES = (
    ConnectionError,
    OSError,
    TimeoutError,
    httpx.ConnectError,
    httpx.ConnectTimeout,
    httpx.TimeoutException,
)


class HttpMailClient:
    """邮件 API 客户端"""

    def __init__(
        self,
        api_url: str,
        api_key: str = "",
        sender: str = "no-reply@projectcamp.local",
        timeout_s: int = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            api_url: 邮件 API 地址
            api_key: Bearer 密钥，空字符串表示不带认证头
            sender: 发件人地址
            timeout_s: 请求超时（秒）
            transport: 可选 httpx transport（测试注入 MockTransport）
        """
        self._api_url = api_url
        self._api_key = api_key
        self._sender = sender
        self._timeout_s = timeout_s
        self._transport = transport

    async def send(self, message: EmailMessage) -> DeliveryResult:
        """发送邮件

        Raises:
            MailServiceUnreachableError: 邮件 API 连接失败或超时
            NotificationError: 邮件 API 返回非 2xx
        """
        start_time = time.monotonic()
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        payload = {
            "from": self._sender,
            "to": message.to,
            "subject": message.subject,
            "text": message.body,
        }
        if message.html is not None:
            payload["html"] = message.html

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s, transport=self._transport
            ) as client:
                response = await client.post(self._api_url, json=payload, headers=headers)
        except _CONNECTION_ERROR_TYPES as e:
            log.warning("mail_api_unreachable", api_url=self._api_url, error=str(e))
            raise MailServiceUnreachableError(self._api_url, e) from e

        if response.status_code >= 400:
            raise NotificationError(
                f"邮件 API 返回错误: HTTP {response.status_code}",
                recoverable=response.status_code >= 500,
            )

        message_id = ""
        try:
            message_id = str(response.json().get("id", ""))
        except ValueError:
            # 非 JSON 响应体不影响发送结果
            pass

        duration_ms = int((time.monotonic() - start_time) * 1000)
        log.debug("mail_sent", to=message.to, duration_ms=duration_ms)
        return DeliveryResult(
            channel="http",
            message_id=message_id,
            duration_ms=duration_ms,
        )
