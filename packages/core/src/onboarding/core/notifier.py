"""EventNotifier -- case 完成事件发布

在 case 首次推导为 Completed 的写入成功之后调用。
发布失败不回滚写入，只记录错误日志供外部对账。
"""

import structlog

from .config import CASE_COMPLETED_TOPIC
from .models.case import OnboardingCase
from .models.payloads import CaseCompletedPayload
from .protocols import EventBus

log = structlog.get_logger()


class EventNotifier:
    """case-completed 事件发布器"""

    def __init__(self, bus: EventBus, topic: str = CASE_COMPLETED_TOPIC) -> None:
        self._bus = bus
        self._topic = topic

    async def notify_case_completed(self, case: OnboardingCase) -> bool:
        """发布 case-completed 事件

        Args:
            case: 已完成的 case（actual_completion_date 已设置）

        Returns:
            True 如果发布成功，False 如果总线报错（写入已持久化，不回滚）
        """
        payload = CaseCompletedPayload(
            case_id=case.case_id,
            employee_id=case.employee_id,
            completed_at=case.actual_completion_date or case.updated_at,
        )
        try:
            await self._bus.publish(self._topic, payload.model_dump(mode="json"))
        except Exception as e:
            log.error(
                "case_completed_publish_failed",
                case_id=case.case_id,
                topic=self._topic,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        log.info(
            "case_completed_published",
            case_id=case.case_id,
            employee_id=case.employee_id,
            topic=self._topic,
        )
        return True
