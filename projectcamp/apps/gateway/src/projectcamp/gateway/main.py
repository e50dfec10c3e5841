"""FastAPI 应用主文件

app 创建 + lifespan 管理：DB 初始化/关闭 + 通知器 + 邀请过期清扫 + 路由注册。
领域异常统一渲染为 {"error": {"code", "message"}}。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from projectcamp.core.clock import utc_now
from projectcamp.core.config import get_db_path, is_sweep_enabled
from projectcamp.core.errors import ProjectCampError
from projectcamp.core.store import create_store_group
from projectcamp.notify import build_dispatcher, load_mail_config
from starlette.responses import JSONResponse

from .middleware.logging_config import setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .middleware.trace_mw import TraceMiddleware
from .routes import health, invitations, projects, tasks, users
from .services.expiry_sweeper import InvitationExpirySweeper

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时初始化 DB、通知器与清扫器，关闭时依次清理"""
    store_group = await create_store_group(get_db_path())
    app.state.store_group = store_group
    app.state.clock = utc_now

    mail_config = load_mail_config()
    app.state.notifier = build_dispatcher(mail_config)
    log.info("notifier_initialized", mode=mail_config.mail_mode)

    app.state.sweeper = None
    if is_sweep_enabled():
        sweeper = InvitationExpirySweeper(store_group, clock=utc_now)
        sweeper.start()
        app.state.sweeper = sweeper

    yield

    if app.state.sweeper is not None:
        await app.state.sweeper.stop()
    await app.state.notifier.drain()
    await store_group.close()


async def _handle_domain_error(request: Request, exc: ProjectCampError) -> JSONResponse:
    if exc.status_code >= 500:
        log.error("request_failed", code=exc.code, error=exc.message)
    else:
        log.info("request_rejected", code=exc.code, status_code=exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.code, "message": exc.message}},
    )


async def _handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid request')}" if location else "invalid request"
    return JSONResponse(
        status_code=400,
        content={"error": {"code": "VALIDATION_FAILED", "message": message}},
    )


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="ProjectCamp Gateway",
        version="0.1.0",
        description="ProjectCamp 项目协作 API",
        lifespan=lifespan,
    )

    # 注册中间件（顺序：先 Trace 后 Logging）
    app.add_middleware(TraceMiddleware)
    app.add_middleware(LoggingMiddleware)

    setup_logging()

    app.add_exception_handler(ProjectCampError, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_validation_error)

    app.include_router(users.router, tags=["users"])
    app.include_router(projects.router, tags=["projects"])
    app.include_router(invitations.router, tags=["invitations"])
    app.include_router(tasks.router, tags=["tasks"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
