"""apps/gateway 测试配置 -- FastAPI app + httpx AsyncClient + 用户注册辅助"""

import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from pathlib import Path

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from projectcamp.core.clock import FrozenClock
from projectcamp.core.store import create_store_group
from projectcamp.notify import LogMailAdapter, NotificationDispatcher


@pytest_asyncio.fixture
async def gateway_tmp_dir(tmp_path: Path) -> Path:
    """Gateway 临时数据目录"""
    db_dir = tmp_path / "sqlite"
    db_dir.mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest_asyncio.fixture
async def clock() -> FrozenClock:
    """可推进的固定时钟"""
    return FrozenClock(datetime(2026, 3, 2, 9, 30, tzinfo=UTC))


@pytest_asyncio.fixture
async def mailbox() -> LogMailAdapter:
    """记录已发送邮件的日志通道"""
    return LogMailAdapter()


@pytest_asyncio.fixture
async def app(gateway_tmp_dir: Path, clock: FrozenClock, mailbox: LogMailAdapter):
    """创建测试用 FastAPI app 实例（手动初始化，绕过 lifespan）"""
    os.environ["PROJECTCAMP_DB_PATH"] = str(gateway_tmp_dir / "sqlite" / "test.db")
    os.environ["PROJECTCAMP_MAIL_MODE"] = "log"

    from projectcamp.gateway.main import create_app

    application = create_app()
    store_group = await create_store_group(os.environ["PROJECTCAMP_DB_PATH"])
    application.state.store_group = store_group
    application.state.clock = clock
    application.state.notifier = NotificationDispatcher(primary=mailbox)
    application.state.sweeper = None

    yield application

    await application.state.notifier.drain()
    await store_group.close()
    for key in ["PROJECTCAMP_DB_PATH", "PROJECTCAMP_MAIL_MODE"]:
        os.environ.pop(key, None)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def register(client: AsyncClient):
    """注册用户并返回 (user_id, 认证请求头)"""

    async def _register(name: str) -> tuple[str, dict[str, str]]:
        resp = await client.post(
            "/api/users",
            json={"username": name, "email": f"{name}@example.com"},
        )
        assert resp.status_code == 201, resp.text
        user_id = resp.json()["user_id"]
        return user_id, {"X-User-Id": user_id}

    return _register


@pytest_asyncio.fixture
async def team(client: AsyncClient, register):
    """owner 创建项目并直接添加 alice；bob 是外部用户

    Returns:
        dict: project_id 以及各用户的 (user_id, headers)
    """
    owner = await register("olivia")
    alice = await register("alice")
    bob = await register("bob")

    resp = await client.post(
        "/api/projects",
        json={"name": "Apollo", "description": "Moon landing"},
        headers=owner[1],
    )
    assert resp.status_code == 201, resp.text
    project_id = resp.json()["project_id"]

    resp = await client.post(
        f"/api/projects/{project_id}/members",
        json={"email": "alice@example.com"},
        headers=owner[1],
    )
    assert resp.status_code == 200, resp.text

    return {"project_id": project_id, "owner": owner, "alice": alice, "bob": bob}
