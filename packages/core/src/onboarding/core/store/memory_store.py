"""StateStore 的内存实现

用于测试与本地运行。条件写入在 asyncio.Lock 内完成比较与替换。
"""

import asyncio

from ..exceptions import VersionConflictError


class InMemoryStateStore:
    """StateStore 的内存实现"""

    def __init__(self) -> None:
        # key -> (value, version)
        self._entries: dict[str, tuple[str, int]] = {}
        self._version_seq = 0
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> tuple[str, int] | None:
        """读取 key 的当前值与版本令牌"""
        return self._entries.get(key)

    async def put(self, key: str, value: str, expected_version: int | None) -> int:
        """条件写入，版本不符时抛出 VersionConflictError"""
        async with self._lock:
            current = self._entries.get(key)
            current_version = current[1] if current is not None else None
            if current_version != expected_version:
                raise VersionConflictError(key)

            self._version_seq += 1
            self._entries[key] = (value, self._version_seq)
            return self._version_seq

    def keys(self) -> list[str]:
        """当前所有 key（测试辅助）"""
        return list(self._entries)
