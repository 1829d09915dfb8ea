"""CaseAggregateStore -- case 聚合的读写入口

case（含内嵌 task 列表）作为一个整体序列化到单个 key 下，
通过版本令牌做乐观并发控制：读 -> 变更 -> 条件写，冲突时整体重试。
"""

import asyncio
import random
from collections.abc import Awaitable, Callable

import structlog

from ..config import CASE_KEY_PREFIX, EMPLOYEE_CLAIM_KEY_PREFIX
from ..exceptions import AlreadyExistsError, NotFoundError, VersionConflictError
from ..models.case import OnboardingCase
from ..retry import RetryPolicy, run_with_optimistic_retry
from .protocols import StateStore

log = structlog.get_logger()

# 变更函数：输入当前 case，返回新的 case 值，不做 I/O
CaseMutation = Callable[[OnboardingCase], OnboardingCase]


class CaseAggregateStore:
    """case 聚合存储 -- 乐观并发 + 有界重试"""

    def __init__(
        self,
        state_store: StateStore,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
    ) -> None:
        """初始化 case 聚合存储

        Args:
            state_store: 外部带版本的键值存储
            retry_policy: 乐观并发重试策略，None 使用默认（5 次，50ms 基数，1s 上限）
            sleep: 退避等待函数（测试可替换）
            rand: 退避随机数来源（测试可替换）
        """
        self._state_store = state_store
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._rand = rand

    @staticmethod
    def _case_key(case_id: str) -> str:
        return f"{CASE_KEY_PREFIX}{case_id}"

    async def create(self, case: OnboardingCase) -> int:
        """写入新 case

        Returns:
            存储分配的版本令牌

        Raises:
            AlreadyExistsError: case_id 已存在
        """
        key = self._case_key(case.case_id)
        try:
            version = await self._state_store.put(
                key, case.model_dump_json(), expected_version=None
            )
        except VersionConflictError as e:
            log.warning("case_already_exists", case_id=case.case_id)
            raise AlreadyExistsError(case.case_id) from e

        log.info("case_stored", case_id=case.case_id, version=version)
        return version

    async def get(self, case_id: str) -> OnboardingCase:
        """读取 case 及其版本令牌

        Raises:
            NotFoundError: case 不存在
        """
        entry = await self._state_store.get(self._case_key(case_id))
        if entry is None:
            raise NotFoundError(case_id)
        value, version = entry
        case = OnboardingCase.model_validate_json(value)
        return case.model_copy(update={"version": version})

    async def read_modify_write(
        self,
        case_id: str,
        mutate: CaseMutation,
    ) -> OnboardingCase:
        """读取 -> 变更 -> 条件写入，版本冲突时整体重试

        mutate 在每次尝试中基于最新读取的 case 重新执行；
        mutate 抛出的异常直接向上传播，不触发重试。

        Args:
            case_id: case 标识
            mutate: 纯变更函数

        Returns:
            写入成功后的 case（含新版本令牌）

        Raises:
            NotFoundError: case 不存在
            ConcurrencyConflictError: 重试次数耗尽
        """
        key = self._case_key(case_id)

        async def attempt() -> OnboardingCase:
            current = await self.get(case_id)
            updated = mutate(current)
            version = await self._state_store.put(
                key,
                updated.model_dump_json(),
                expected_version=current.version,
            )
            return updated.model_copy(update={"version": version})

        return await run_with_optimistic_retry(
            attempt,
            self._retry_policy,
            key=key,
            sleep=self._sleep,
            rand=self._rand,
        )

    async def claim_employee(self, employee_id: str, case_id: str) -> str:
        """为员工占用 onboarding case 归属（先到先得）

        Args:
            employee_id: 员工标识
            case_id: 希望占用的 case 标识

        Returns:
            实际归属的 case 标识：占用成功时为 case_id，否则为已有归属
        """
        key = f"{EMPLOYEE_CLAIM_KEY_PREFIX}{employee_id}"
        try:
            await self._state_store.put(key, case_id, expected_version=None)
            return case_id
        except VersionConflictError:
            entry = await self._state_store.get(key)
            if entry is None:
                # 归属记录不会被删除，拒绝后仍读不到说明存储异常
                raise
            return entry[0]

    async def get_employee_claim(self, employee_id: str) -> str | None:
        """查询员工已归属的 case 标识"""
        entry = await self._state_store.get(f"{EMPLOYEE_CLAIM_KEY_PREFIX}{employee_id}")
        return entry[0] if entry is not None else None
