"""packages/core 测试配置 -- 核心层 fixture"""

import asyncio
from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import AsyncMock

import aiosqlite
import pytest
import pytest_asyncio
from onboarding.core.notifier import EventNotifier
from onboarding.core.store import CaseAggregateStore, InMemoryStateStore
from onboarding.core.store.sqlite_init import init_db
from onboarding.core.templates import DEFAULT_TASK_TEMPLATES
from onboarding.core.workflow import OnboardingWorkflow

FIXED_NOW = datetime(2026, 1, 10, 9, 30, tzinfo=UTC)


async def no_sleep(_delay: float) -> None:
    """退避等待替身：不等待"""


class InterleavingStateStore(InMemoryStateStore):
    """读取时让出事件循环，使并发的 read-modify-write 交错执行"""

    async def get(self, key: str) -> tuple[str, int] | None:
        entry = await super().get(key)
        await asyncio.sleep(0)
        return entry


class FakeClock:
    """可推进的固定时钟"""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest_asyncio.fixture
async def core_db_path(tmp_path: Path) -> Path:
    """核心层临时数据库路径"""
    return tmp_path / "core_test.db"


@pytest_asyncio.fixture
async def core_db(core_db_path: Path) -> AsyncGenerator[aiosqlite.Connection, None]:
    """核心层已初始化数据库连接"""
    conn = await aiosqlite.connect(str(core_db_path))
    await init_db(conn)
    yield conn
    await conn.close()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def state_store() -> InterleavingStateStore:
    return InterleavingStateStore()


@pytest.fixture
def case_store(state_store: InterleavingStateStore) -> CaseAggregateStore:
    """零退避的 case 聚合存储"""
    return CaseAggregateStore(state_store, sleep=no_sleep)


@pytest.fixture
def employee_directory() -> AsyncMock:
    """员工目录替身：默认所有员工存在"""
    directory = AsyncMock()
    directory.exists.return_value = True
    return directory


@pytest.fixture
def event_bus() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def make_workflow(
    case_store: CaseAggregateStore,
    employee_directory: AsyncMock,
    event_bus: AsyncMock,
    clock: FakeClock,
) -> Callable[..., OnboardingWorkflow]:
    """按需构造 OnboardingWorkflow，可覆盖模板"""

    def _make(templates=DEFAULT_TASK_TEMPLATES) -> OnboardingWorkflow:
        return OnboardingWorkflow(
            case_store=case_store,
            employee_directory=employee_directory,
            notifier=EventNotifier(event_bus),
            templates=templates,
            clock=clock,
            target_completion_days=30,
        )

    return _make


@pytest.fixture
def workflow(make_workflow) -> OnboardingWorkflow:
    return make_workflow()
