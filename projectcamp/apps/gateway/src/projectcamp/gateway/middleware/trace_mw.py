"""TraceMiddleware -- 绑定资源 ID 到日志上下文

从路径中提取 project_id / task_id / invitation_id，
同一资源的所有请求日志可以按 ID 串联。
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# 路径段 -> 日志字段
_RESOURCE_SEGMENTS = {
    "projects": "project_id",
    "tasks": "task_id",
    "invitations": "invitation_id",
}

# ULID 字符串长度
_ULID_LENGTH = 26


def extract_resource_ids(path: str) -> dict[str, str]:
    """从 /api/projects/{id}/... 形式的路径中提取资源 ID"""
    found: dict[str, str] = {}
    parts = path.strip("/").split("/")
    for i, part in enumerate(parts[:-1]):
        field = _RESOURCE_SEGMENTS.get(part)
        candidate = parts[i + 1]
        # 排除子路由如 /accept
        if field and len(candidate) == _ULID_LENGTH:
            found[field] = candidate
    return found


class TraceMiddleware(BaseHTTPMiddleware):
    """资源级追踪中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        ids = extract_resource_ids(request.url.path)
        if ids:
            structlog.contextvars.bind_contextvars(**ids)
        return await call_next(request)
