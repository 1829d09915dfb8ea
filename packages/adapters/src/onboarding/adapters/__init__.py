"""Onboarding Adapters -- 外部协作方实现

员工身份服务与事件总线的 Dapr/httpx 实现，以及装配 OnboardingWorkflow 的工厂函数。
"""

from onboarding.core.config import get_db_path, load_retry_policy
from onboarding.core.notifier import EventNotifier
from onboarding.core.store import (
    CaseAggregateStore,
    SqliteStateStore,
    open_sqlite_state_store,
)
from onboarding.core.templates import load_task_templates
from onboarding.core.workflow import OnboardingWorkflow

from .config import DaprConfig, load_dapr_config
from .employee_directory import DaprEmployeeDirectory
from .event_bus import DaprEventBus, InMemoryEventBus


async def create_workflow(
    db_path: str | None = None,
    config: DaprConfig | None = None,
) -> tuple[OnboardingWorkflow, SqliteStateStore]:
    """按环境配置装配 OnboardingWorkflow

    SQLite 状态存储 + Dapr 员工服务 + Dapr pub/sub。

    Returns:
        (workflow, state_store)；调用方负责 close state_store
    """
    config = config or load_dapr_config()
    state_store = await open_sqlite_state_store(db_path or get_db_path())
    case_store = CaseAggregateStore(state_store, retry_policy=load_retry_policy())
    workflow = OnboardingWorkflow(
        case_store=case_store,
        employee_directory=DaprEmployeeDirectory(config),
        notifier=EventNotifier(DaprEventBus(config)),
        templates=load_task_templates(),
    )
    return workflow, state_store


__all__ = [
    "DaprConfig",
    "load_dapr_config",
    "DaprEmployeeDirectory",
    "DaprEventBus",
    "InMemoryEventBus",
    "create_workflow",
]
