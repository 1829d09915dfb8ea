"""事件 Payload 定义

发布到事件总线 / 从事件总线接收的结构化 payload。
"""

from datetime import datetime

from pydantic import BaseModel, Field


class CaseCompletedPayload(BaseModel):
    """case-completed 事件 payload"""

    case_id: str
    employee_id: str
    completed_at: datetime


class EmployeeCreatedPayload(BaseModel):
    """employee-events 主题上的 EmployeeCreated 事件 payload"""

    employee_id: str = Field(min_length=1)
    email: str = Field(default="")
