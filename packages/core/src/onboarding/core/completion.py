"""Case 完成度推导 -- 纯函数，无 I/O

完成百分比按 ROUND_HALF_UP（远离零舍入）保留两位小数，
避免 float round() 的银行家舍入与二进制误差。
"""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from .models.case import OnboardingTask
from .models.enums import TaskStatus

_TWO_PLACES = Decimal("0.01")


class CompletionResult(NamedTuple):
    """完成度推导结果"""

    percentage: float
    all_complete: bool


def derive_completion(tasks: Sequence[OnboardingTask]) -> CompletionResult:
    """根据 task 列表推导完成百分比与是否全部完成

    Args:
        tasks: case 的当前 task 列表

    Returns:
        CompletionResult(percentage, all_complete)
        - 空列表: (0.0, False)
        - 否则: percentage = round(100 * completed / total, 2)，
          all_complete 当且仅当所有 task 均为 Completed
    """
    total = len(tasks)
    if total == 0:
        return CompletionResult(0.0, False)

    completed = sum(1 for task in tasks if task.status == TaskStatus.COMPLETED)
    percentage = (Decimal(100 * completed) / Decimal(total)).quantize(
        _TWO_PLACES, rounding=ROUND_HALF_UP
    )
    return CompletionResult(float(percentage), completed == total)
