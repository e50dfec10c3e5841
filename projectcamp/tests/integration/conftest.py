"""集成测试共享 fixture"""

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
async def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 3, 2, 9, 30, tzinfo=UTC))


@pytest_asyncio.fixture
async def integration_app(tmp_path: Path, clock: FrozenClock):
    """集成测试用 FastAPI app"""
    os.environ["PROJECTCAMP_DB_PATH"] = str(tmp_path / "test.db")
    os.environ["PROJECTCAMP_MAIL_MODE"] = "log"

    from projectcamp.gateway.main import create_app

    app = create_app()

    store_group = await create_store_group(str(tmp_path / "test.db"))
    app.state.store_group = store_group
    app.state.clock = clock
    app.state.notifier = NotificationDispatcher(primary=LogMailAdapter())
    app.state.sweeper = None

    yield app

    await app.state.notifier.drain()
    await store_group.close()
    os.environ.pop("PROJECTCAMP_DB_PATH", None)
    os.environ.pop("PROJECTCAMP_MAIL_MODE", None)


@pytest_asyncio.fixture
async def client(integration_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=integration_app),
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
