"""Onboarding Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .case import OnboardingCase, OnboardingTask
from .enums import (
    TERMINAL_CASE_STATES,
    VALID_CASE_TRANSITIONS,
    CaseStatus,
    TaskStatus,
    TaskType,
    validate_case_transition,
)
from .payloads import CaseCompletedPayload, EmployeeCreatedPayload
from .template import TaskTemplate

__all__ = [
    # 枚举
    "TaskStatus",
    "CaseStatus",
    "TaskType",
    # 状态机
    "VALID_CASE_TRANSITIONS",
    "TERMINAL_CASE_STATES",
    "validate_case_transition",
    # Case 聚合
    "OnboardingCase",
    "OnboardingTask",
    # 模板
    "TaskTemplate",
    # Payloads
    "CaseCompletedPayload",
    "EmployeeCreatedPayload",
]
