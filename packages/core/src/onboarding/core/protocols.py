"""外部协作方 Protocol 接口定义

员工目录与事件总线的抽象，具体实现见 onboarding.adapters。
"""

from typing import Any, Protocol


class EmployeeDirectory(Protocol):
    """员工身份服务接口 -- 只回答"该员工是否存在" """

    async def exists(self, employee_id: str) -> bool:
        """查询员工是否存在

        Raises:
            DependencyUnavailableError: 服务不可达或超时（区别于明确的"不存在"）
        """
        ...


class EventBus(Protocol):
    """发布/订阅事件总线接口 -- 投递保证由总线负责"""

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        """发布事件到指定主题"""
        ...
