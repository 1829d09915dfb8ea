"""枚举定义

包含 TaskStatus、CaseStatus、TaskType 枚举，
以及 case 状态机的 VALID_CASE_TRANSITIONS 合法流转映射和 TERMINAL_CASE_STATES 终态集合。
"""

from enum import StrEnum


class TaskStatus(StrEnum):
    """Task 状态 -- 四种状态之间可自由流转"""

    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    BLOCKED = "Blocked"


class CaseStatus(StrEnum):
    """Case 状态 -- 由 task 列表推导，不可直接设置为 Completed"""

    PENDING = "Pending"
    IN_PROGRESS = "InProgress"

    # 终态
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class TaskType(StrEnum):
    """Task 类型标签"""

    PAPERWORK = "Paperwork"
    TRAINING = "Training"
    EQUIPMENT = "Equipment"
    ACCESS = "Access"
    OTHER = "Other"


# Case 合法状态流转
# Completed -> InProgress 仅在已完成的 task 被重新打开时发生
VALID_CASE_TRANSITIONS: dict[CaseStatus, set[CaseStatus]] = {
    CaseStatus.PENDING: {
        CaseStatus.IN_PROGRESS,
        CaseStatus.COMPLETED,
        CaseStatus.CANCELLED,
    },
    CaseStatus.IN_PROGRESS: {
        CaseStatus.IN_PROGRESS,
        CaseStatus.COMPLETED,
        CaseStatus.CANCELLED,
    },
    CaseStatus.COMPLETED: {CaseStatus.COMPLETED, CaseStatus.IN_PROGRESS},
    # 取消后不可再流转
    CaseStatus.CANCELLED: set(),
}

TERMINAL_CASE_STATES: set[CaseStatus] = {
    CaseStatus.COMPLETED,
    CaseStatus.CANCELLED,
}


def validate_case_transition(from_status: CaseStatus, to_status: CaseStatus) -> bool:
    """验证 case 状态流转是否合法

    Args:
        from_status: 当前状态
        to_status: 目标状态

    Returns:
        True 如果流转合法，否则 False
    """
    allowed = VALID_CASE_TRANSITIONS.get(from_status, set())
    return to_status in allowed
