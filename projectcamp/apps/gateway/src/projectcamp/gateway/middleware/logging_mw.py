"""LoggingMiddleware -- 请求级日志

每个请求绑定 request_id（沿用上游传入的 X-Request-ID，否则生成 ULID）、
调用方 user_id 与耗时；未处理异常记录 request_crashed 后继续抛出。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"

# 上游传入的 request id 最大长度，超过则重新生成
_MAX_INBOUND_ID_LENGTH = 64


def _request_id_from(request: Request) -> str:
    inbound = request.headers.get(REQUEST_ID_HEADER, "").strip()
    if inbound and len(inbound) <= _MAX_INBOUND_ID_LENGTH:
        return inbound
    return str(ULID())


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = _request_id_from(request)
        started = time.monotonic()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        if user_id := request.headers.get("X-User-Id"):
            structlog.contextvars.bind_contextvars(user_id=user_id)

        log = structlog.get_logger()

        def elapsed_ms() -> int:
            return int((time.monotonic() - started) * 1000)

        try:
            response = await call_next(request)
        except Exception:
            log.exception("request_crashed", elapsed_ms=elapsed_ms())
            raise

        log.info(
            "request_completed",
            status_code=response.status_code,
            elapsed_ms=elapsed_ms(),
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
