"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 SQLite 连通性与过期清扫状态。
"""

import structlog
from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(request: Request):
    """Readiness 检查 -- 验证核心依赖可用性

    检查项：
    1. sqlite: 数据库连通性
    2. expiry_sweeper: 后台清扫是否在运行（未启用时为 disabled）
    """
    checks = {}
    all_ok = True

    try:
        store_group = request.app.state.store_group
        cursor = await store_group.conn.execute("SELECT 1")
        await cursor.fetchone()
        checks["sqlite"] = "ok"
    except Exception as e:
        log.warning("readiness_sqlite_failed", error=str(e))
        checks["sqlite"] = f"error: {str(e)}"
        all_ok = False

    sweeper = getattr(request.app.state, "sweeper", None)
    if sweeper is None:
        checks["expiry_sweeper"] = "disabled"
    elif sweeper.running:
        checks["expiry_sweeper"] = "ok"
    else:
        checks["expiry_sweeper"] = "stopped"
        all_ok = False

    status_code = 200 if all_ok else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "ready" if all_ok else "not_ready",
            "checks": checks,
        },
    )
