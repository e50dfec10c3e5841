"""全局 pytest 配置 -- 临时 SQLite 数据库与 StoreGroup fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import aiosqlite
import pytest_asyncio
from projectcamp.core.store import StoreGroup, create_store_group


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "test.db"


@pytest_asyncio.fixture
async def db_conn(tmp_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """提供已初始化的临时 SQLite 数据库连接"""
    from projectcamp.core.store.sqlite_init import init_db

    conn = await aiosqlite.connect(str(tmp_db_path))
    conn.row_factory = aiosqlite.Row
    await init_db(conn)
    yield conn
    await conn.close()


@pytest_asyncio.fixture
async def store_group(tmp_db_path: Path) -> AsyncGenerator[StoreGroup, None]:
    """提供共享连接的 Store 实例组"""
    stores = await create_store_group(str(tmp_db_path))
    yield stores
    await stores.close()
