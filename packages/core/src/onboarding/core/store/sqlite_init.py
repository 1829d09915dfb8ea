"""SQLite 数据库初始化

PRAGMA 配置 + state_entries 表 DDL + 索引创建。
使用 aiosqlite 异步操作。
"""

import aiosqlite

# state_entries 表 DDL：每个 key 一行，version 每次写入 +1
_STATE_ENTRIES_DDL = """
CREATE TABLE IF NOT EXISTS state_entries (
    key         TEXT PRIMARY KEY,
    value       TEXT NOT NULL,
    version     INTEGER NOT NULL,
    updated_at  TEXT NOT NULL
);
"""

_STATE_ENTRIES_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_state_entries_updated_at ON state_entries(updated_at DESC);",
]


async def init_db(conn: aiosqlite.Connection) -> None:
    """初始化数据库：设置 PRAGMA + 创建表 + 创建索引

    Args:
        conn: aiosqlite 数据库连接
    """
    # 多进程并发写同一文件：WAL + busy_timeout
    await conn.execute("PRAGMA journal_mode = WAL;")
    await conn.execute("PRAGMA busy_timeout = 5000;")

    await conn.execute(_STATE_ENTRIES_DDL)
    for idx_sql in _STATE_ENTRIES_INDEXES:
        await conn.execute(idx_sql)

    await conn.commit()


async def verify_wal_mode(conn: aiosqlite.Connection) -> bool:
    """验证 WAL 模式是否生效

    Returns:
        True 如果 WAL 模式已启用
    """
    cursor = await conn.execute("PRAGMA journal_mode;")
    row = await cursor.fetchone()
    return row is not None and row[0].lower() == "wal"
