"""Task 模板加载与展开

模板配置在进程启动时加载一次；展开是纯函数，
同样的模板与开始日期总是得到相同顺序与截止日期的 task（标识除外）。
"""

from collections.abc import Callable, Sequence
from datetime import date, timedelta
from pathlib import Path

import pydantic
import structlog
from pydantic import TypeAdapter
from ulid import ULID

from .config import get_task_templates_path
from .exceptions import ValidationError
from .models.case import OnboardingTask
from .models.enums import TaskStatus, TaskType
from .models.template import TaskTemplate

log = structlog.get_logger()

_TEMPLATE_LIST_ADAPTER = TypeAdapter(list[TaskTemplate])

# 未提供配置文件时使用的默认模板
DEFAULT_TASK_TEMPLATES: tuple[TaskTemplate, ...] = (
    TaskTemplate(
        description="Setup workstation",
        task_type=TaskType.EQUIPMENT,
        order=1,
        due_date_offset_days=7,
    ),
    TaskTemplate(
        description="HR paperwork",
        task_type=TaskType.PAPERWORK,
        order=2,
        due_date_offset_days=14,
    ),
    TaskTemplate(
        description="IT account",
        task_type=TaskType.ACCESS,
        order=3,
        due_date_offset_days=21,
    ),
    TaskTemplate(
        description="Security badge",
        task_type=TaskType.ACCESS,
        order=4,
        due_date_offset_days=28,
    ),
    TaskTemplate(
        description="Benefits enrollment",
        task_type=TaskType.PAPERWORK,
        order=5,
        due_date_offset_days=30,
    ),
)


def _new_task_id() -> str:
    return str(ULID())


def expand_templates(
    templates: Sequence[TaskTemplate],
    start_date: date,
    id_factory: Callable[[], str] = _new_task_id,
) -> list[OnboardingTask]:
    """将有序模板展开为新 case 的具体 task 列表

    Args:
        templates: 模板序列
        start_date: case 开始日期
        id_factory: task 标识生成函数

    Returns:
        按模板 order 升序排列的 task 列表（order 相同时保持输入顺序），
        状态均为 NotStarted；模板为空时返回空列表
    """
    # sorted 是稳定排序，order 相同的模板保持输入顺序
    ordered = sorted(templates, key=lambda template: template.order)
    return [
        OnboardingTask(
            task_id=id_factory(),
            description=template.description,
            task_type=template.task_type,
            due_date=start_date + timedelta(days=template.due_date_offset_days),
            status=TaskStatus.NOT_STARTED,
            order=template.order,
        )
        for template in ordered
    ]


def load_task_templates(path: Path | None = None) -> list[TaskTemplate]:
    """加载 task 模板配置

    Args:
        path: JSON 配置文件路径，None 时读取 ONBOARDING_TASK_TEMPLATES_PATH，
              仍未配置则返回内置默认模板

    Returns:
        模板列表（保持文件中的顺序）

    Raises:
        ValidationError: 配置文件不存在、不是合法 JSON 或字段不合法
    """
    path = path or get_task_templates_path()
    if path is None:
        log.info("task_templates_loaded", source="default", count=len(DEFAULT_TASK_TEMPLATES))
        return list(DEFAULT_TASK_TEMPLATES)

    try:
        templates = _TEMPLATE_LIST_ADAPTER.validate_json(path.read_bytes())
    except (OSError, pydantic.ValidationError) as e:
        raise ValidationError(f"task 模板配置无效: {path} -- {e}") from e

    if not templates:
        log.warning("task_templates_empty", source=str(path))
    log.info("task_templates_loaded", source=str(path), count=len(templates))
    return templates
