"""Store Protocol 接口定义

外部带版本的键值存储抽象，使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from typing import Protocol


class StateStore(Protocol):
    """带版本的键值存储接口

    版本令牌由存储分配，每次成功写入后单调递增。
    同一 key 的读取总是强一致的。
    """

    async def get(self, key: str) -> tuple[str, int] | None:
        """读取 key 的当前值与版本令牌，不存在时返回 None"""
        ...

    async def put(self, key: str, value: str, expected_version: int | None) -> int:
        """条件写入

        Args:
            key: 存储键
            value: 序列化后的完整值
            expected_version: 期望的当前版本；None 表示 key 必须尚不存在

        Returns:
            写入后的新版本令牌

        Raises:
            VersionConflictError: 当前版本与期望不符（或 key 已存在 / 已不存在）
        """
        ...
