"""Onboarding Core Store -- 带版本的状态存储

提供工厂函数打开基于 SQLite 的状态存储。
"""

from pathlib import Path

import aiosqlite

from .case_store import CaseAggregateStore, CaseMutation
from .memory_store import InMemoryStateStore
from .protocols import StateStore
from .sqlite_init import init_db
from .sqlite_store import SqliteStateStore


async def open_sqlite_state_store(db_path: str) -> SqliteStateStore:
    """打开（必要时创建）SQLite 状态存储

    Args:
        db_path: SQLite 数据库文件路径

    Returns:
        SqliteStateStore 实例，调用方负责 close()
    """
    # 确保数据库目录存在
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    await init_db(conn)
    return SqliteStateStore(conn)


__all__ = [
    "CaseAggregateStore",
    "CaseMutation",
    "StateStore",
    "InMemoryStateStore",
    "SqliteStateStore",
    "init_db",
    "open_sqlite_state_store",
]
