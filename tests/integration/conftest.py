"""集成测试共享 fixture"""

import httpx
import pytest
import pytest_asyncio
from onboarding.adapters import DaprConfig, DaprEmployeeDirectory, InMemoryEventBus
from onboarding.core.notifier import EventNotifier
from onboarding.core.retry import RetryPolicy
from onboarding.core.store import CaseAggregateStore, open_sqlite_state_store
from onboarding.core.templates import DEFAULT_TASK_TEMPLATES
from onboarding.core.workflow import OnboardingWorkflow

KNOWN_EMPLOYEES = {"E100", "E200"}


def _employee_service(request: httpx.Request) -> httpx.Response:
    """模拟员工服务：仅 KNOWN_EMPLOYEES 存在"""
    employee_id = request.url.path.rsplit("/", 1)[-1]
    if employee_id in KNOWN_EMPLOYEES:
        return httpx.Response(200, json={"id": employee_id})
    return httpx.Response(404)


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest_asyncio.fixture
async def http_client():
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(_employee_service)
    ) as client:
        yield client


@pytest_asyncio.fixture
async def make_instance(tmp_db_path, event_bus, http_client):
    """构造共享同一数据库文件、各自持有独立连接的 workflow 实例"""
    opened = []

    async def _make() -> OnboardingWorkflow:
        state_store = await open_sqlite_state_store(str(tmp_db_path))
        opened.append(state_store)
        return OnboardingWorkflow(
            case_store=CaseAggregateStore(
                state_store,
                retry_policy=RetryPolicy(base_delay_s=0.001, max_delay_s=0.01),
            ),
            employee_directory=DaprEmployeeDirectory(
                DaprConfig(dapr_http_endpoint="http://dapr.test"), client=http_client
            ),
            notifier=EventNotifier(event_bus),
            templates=DEFAULT_TASK_TEMPLATES,
        )

    yield _make

    for state_store in opened:
        await state_store.close()
