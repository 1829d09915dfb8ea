"""全局 pytest 配置 -- 临时 SQLite 数据库 fixture"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest_asyncio
from onboarding.core.store import SqliteStateStore, open_sqlite_state_store


@pytest_asyncio.fixture
async def tmp_db_path(tmp_path: Path) -> Path:
    """提供临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"


@pytest_asyncio.fixture
async def sqlite_state_store(tmp_db_path: Path) -> AsyncGenerator[SqliteStateStore, None]:
    """提供已初始化的 SQLite 状态存储"""
    store = await open_sqlite_state_store(str(tmp_db_path))
    yield store
    await store.close()
