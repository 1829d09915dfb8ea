"""OnboardingCase 聚合模型

case 与其内嵌的 task 列表作为一个整体存储和变更（聚合），
task 从不独立存储或版本化。
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from .enums import CaseStatus, TaskStatus, TaskType


class OnboardingTask(BaseModel):
    """Onboarding Task -- 仅归属于其父 case"""

    task_id: str = Field(description="case 内唯一标识，ULID 格式")
    description: str = Field(description="任务描述")
    task_type: TaskType = Field(default=TaskType.OTHER, description="任务类型标签")
    assignee: str = Field(default="", description="负责人")
    due_date: date = Field(description="截止日期 = case 开始日期 + 模板偏移")
    completed_date: datetime | None = Field(default=None, description="完成时间")
    completed_by: str | None = Field(default=None, description="完成人")
    status: TaskStatus = Field(default=TaskStatus.NOT_STARTED, description="当前状态")
    order: int = Field(description="排序值，继承自模板，创建后不变")


class OnboardingCase(BaseModel):
    """Onboarding Case 聚合根

    status、completion_percentage、actual_completion_date 均由 task 列表推导，
    只能通过 task 状态更新间接改变。
    version 由存储分配，不参与序列化。
    """

    case_id: str = Field(description="唯一标识，ULID 格式")
    employee_id: str = Field(description="外部员工记录标识")
    start_date: date = Field(description="入职开始日期")
    target_completion_date: date | None = Field(
        default=None,
        description="目标完成日期（仅供参考）",
    )
    actual_completion_date: datetime | None = Field(
        default=None,
        description="实际完成时间，在首次推导为 Completed 的写入中设置",
    )
    status: CaseStatus = Field(default=CaseStatus.PENDING, description="当前状态")
    tasks: list[OnboardingTask] = Field(default_factory=list, description="有序 task 列表")
    completion_percentage: float = Field(default=0.0, description="完成百分比")
    notes: str | None = Field(default=None, description="备注")
    created_at: datetime = Field(description="创建时间")
    updated_at: datetime = Field(description="更新时间")
    version: int | None = Field(
        default=None,
        exclude=True,
        description="存储分配的版本令牌，用于乐观并发",
    )
