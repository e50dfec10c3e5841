"""HttpMailClient 单元测试

使用 httpx.MockTransport 模拟邮件 API，验证请求体、认证头与错误映射。
"""

import json

import httpx
import pytest
from projectcamp.notify.client import HttpMailClient
from projectcamp.notify.exceptions import MailServiceUnreachableError, NotificationError


def _client(handler, api_key: str = "key-1") -> HttpMailClient:
    return HttpMailClient(
        api_url="https://mail.example.com/send",
        api_key=api_key,
        sender="team@example.com",
        transport=httpx.MockTransport(handler),
    )


class TestHttpMailClientSend:
    """send() 测试"""

    async def test_posts_message(self, sample_message):
        """请求体包含收件人、主题、正文与发件人"""
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["body"] = json.loads(request.content)
            captured["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"id": "msg-1"})

        result = await _client(handler).send(sample_message)

        assert result.channel == "http"
        assert result.message_id == "msg-1"
        assert captured["body"]["to"] == "bob@example.com"
        assert captured["body"]["from"] == "team@example.com"
        assert captured["body"]["text"] == "Hi Bob"
        assert captured["auth"] == "Bearer key-1"

    async def test_no_auth_header_without_key(self, sample_message):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(202)

        result = await _client(handler, api_key="").send(sample_message)
        assert seen["auth"] is None
        assert result.message_id == ""

    async def test_server_error_raises(self, sample_message):
        """HTTP 5xx -> NotificationError(recoverable=True)"""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        with pytest.raises(NotificationError) as exc_info:
            await _client(handler).send(sample_message)
        assert exc_info.value.recoverable is True

    async def test_client_error_not_recoverable(self, sample_message):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422)

        with pytest.raises(NotificationError) as exc_info:
            await _client(handler).send(sample_message)
        assert exc_info.value.recoverable is False

    async def test_connect_error_raises_unreachable(self, sample_message):
        """连接失败 -> MailServiceUnreachableError"""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(MailServiceUnreachableError) as exc_info:
            await _client(handler).send(sample_message)
        assert exc_info.value.api_url == "https://mail.example.com/send"
