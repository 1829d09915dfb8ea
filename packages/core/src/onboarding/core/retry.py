"""乐观并发重试组合子

将 read -> mutate -> write 整体视为一次 attempt，在版本冲突时带随机指数退避重试。
重试策略（次数、退避曲线）与具体存储解耦，可单独测试。
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ConcurrencyConflictError, VersionConflictError

log = structlog.get_logger()

T = TypeVar("T")


class RetryPolicy(BaseModel):
    """乐观并发重试策略

    第 n 次冲突后的退避上限为 min(max_delay_s, base_delay_s * 2^(n-1))，
    实际退避在 [0, 上限) 内均匀随机（full jitter）。
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=5, ge=1, description="最大尝试次数（含首次）")
    base_delay_s: float = Field(default=0.05, ge=0.0, description="退避基数（秒）")
    max_delay_s: float = Field(default=1.0, ge=0.0, description="退避上限（秒）")

    def backoff_delay(
        self,
        attempt: int,
        rand: Callable[[], float] = random.random,
    ) -> float:
        """计算第 attempt 次冲突后的退避时长

        Args:
            attempt: 已失败的尝试序号，从 1 开始
            rand: [0, 1) 随机数来源

        Returns:
            退避秒数
        """
        ceiling = min(self.max_delay_s, self.base_delay_s * (2 ** (attempt - 1)))
        return ceiling * rand()


async def run_with_optimistic_retry(
    attempt_fn: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    *,
    key: str = "",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    rand: Callable[[], float] = random.random,
) -> T:
    """执行一次完整的 read-modify-write，在版本冲突时重试

    仅 VersionConflictError 触发重试，其他异常直接向上抛出。

    Args:
        attempt_fn: 单次 read -> mutate -> conditional write
        policy: 重试策略
        key: 冲突的存储键（用于日志与异常）
        sleep: 退避等待函数（测试可替换）
        rand: 退避随机数来源（测试可替换）

    Returns:
        attempt_fn 成功时的返回值

    Raises:
        ConcurrencyConflictError: 重试次数耗尽
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await attempt_fn()
        except VersionConflictError:
            if attempt >= policy.max_attempts:
                break
            delay = policy.backoff_delay(attempt, rand)
            log.warning(
                "version_conflict_retry",
                key=key,
                attempt=attempt,
                delay_ms=int(delay * 1000),
            )
            await sleep(delay)

    log.error(
        "optimistic_retry_exhausted",
        key=key,
        attempts=policy.max_attempts,
    )
    raise ConcurrencyConflictError(key, policy.max_attempts)
