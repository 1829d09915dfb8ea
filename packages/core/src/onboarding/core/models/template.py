"""TaskTemplate 配置模型

进程启动时加载一次，核心层只读不写。
"""

from pydantic import BaseModel, ConfigDict, Field

from .enums import TaskType


class TaskTemplate(BaseModel):
    """Task 模板 -- 新建 case 时展开为具体 task"""

    model_config = ConfigDict(frozen=True)

    description: str = Field(description="任务描述")
    task_type: TaskType = Field(default=TaskType.OTHER, description="任务类型标签")
    order: int = Field(description="排序值，决定 task 的确定性顺序")
    due_date_offset_days: int = Field(description="相对 case 开始日期的截止偏移（天）")
