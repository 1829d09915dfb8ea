"""StateStore 的 SQLite 实现

条件写入依赖单条语句的原子性：
- 新建：INSERT，主键冲突即版本冲突
- 更新：UPDATE ... WHERE version = ?，影响行数为 0 即版本冲突
多个进程可共享同一数据库文件。
"""

import asyncio
from datetime import UTC, datetime

import aiosqlite
import structlog

from ..exceptions import VersionConflictError

log = structlog.get_logger()


class SqliteStateStore:
    """StateStore 的 SQLite 实现"""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn
        # 同一连接上的 execute + commit 需成对执行，避免提交其他协程的半截写入
        self._write_lock = asyncio.Lock()

    @property
    def conn(self) -> aiosqlite.Connection:
        return self._conn

    async def close(self) -> None:
        """关闭数据库连接"""
        await self._conn.close()

    async def get(self, key: str) -> tuple[str, int] | None:
        """读取 key 的当前值与版本令牌"""
        cursor = await self._conn.execute(
            "SELECT value, version FROM state_entries WHERE key = ?",
            (key,),
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return row[0], row[1]

    async def put(self, key: str, value: str, expected_version: int | None) -> int:
        """条件写入，版本不符时抛出 VersionConflictError"""
        updated_at = datetime.now(UTC).isoformat()
        async with self._write_lock:
            if expected_version is None:
                try:
                    await self._conn.execute(
                        """
                        INSERT INTO state_entries (key, value, version, updated_at)
                        VALUES (?, ?, 1, ?)
                        """,
                        (key, value, updated_at),
                    )
                except aiosqlite.IntegrityError as e:
                    await self._conn.rollback()
                    raise VersionConflictError(key) from e
                await self._conn.commit()
                return 1

            cursor = await self._conn.execute(
                """
                UPDATE state_entries
                SET value = ?, version = version + 1, updated_at = ?
                WHERE key = ? AND version = ?
                """,
                (value, updated_at, key, expected_version),
            )
            if cursor.rowcount == 0:
                # 释放隐式事务，避免阻塞其他连接的写入
                await self._conn.rollback()
                log.debug(
                    "sqlite_conditional_update_rejected",
                    key=key,
                    expected_version=expected_version,
                )
                raise VersionConflictError(key)
            await self._conn.commit()
            return expected_version + 1
