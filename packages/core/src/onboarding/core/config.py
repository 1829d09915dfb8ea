"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、模板配置路径、存储键前缀、乐观并发重试参数、日志输出等可配置项。
非法取值一律记录告警并回退默认值，不阻塞启动。
"""

import logging
import os
from pathlib import Path

import structlog

from .retry import RetryPolicy

log = structlog.get_logger()


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("ONBOARDING_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 状态存储路径"""
    return os.environ.get(
        "ONBOARDING_DB_PATH",
        str(_get_base_dir() / "sqlite" / "onboarding.db"),
    )


def get_task_templates_path() -> Path | None:
    """获取 task 模板配置文件路径，未配置时使用内置默认模板"""
    value = os.environ.get("ONBOARDING_TASK_TEMPLATES_PATH")
    return Path(value) if value else None


def _int_from_env(env_var: str, default: int) -> int:
    """读取整数环境变量，非法值记录告警后回退默认值"""
    val = os.environ.get(env_var)
    if not val:
        return default
    try:
        return int(val)
    except ValueError:
        log.warning(
            "invalid_int_config",
            env_var=env_var,
            value=val,
            fallback=default,
        )
        return default


# 存储键前缀
CASE_KEY_PREFIX: str = "onboarding-case:"
EMPLOYEE_CLAIM_KEY_PREFIX: str = "employee-onboarding:"

# 完成事件主题
CASE_COMPLETED_TOPIC: str = "case-completed"

# 目标完成日期 = 开始日期 + N 天（仅供参考）
TARGET_COMPLETION_DAYS: int = _int_from_env("ONBOARDING_TARGET_COMPLETION_DAYS", 30)

# 日志渲染模式
LOG_FORMATS: tuple[str, ...] = ("dev", "json")


def get_log_format() -> str:
    """获取日志渲染模式（ONBOARDING_LOG_FORMAT）：dev（默认）或 json"""
    value = os.environ.get("ONBOARDING_LOG_FORMAT", "dev").strip().lower()
    if value not in LOG_FORMATS:
        log.warning(
            "invalid_log_format_config",
            env_var="ONBOARDING_LOG_FORMAT",
            value=value,
            fallback="dev",
        )
        return "dev"
    return value


def get_log_level() -> int:
    """获取日志级别（ONBOARDING_LOG_LEVEL），未知级别名回退 INFO"""
    value = os.environ.get("ONBOARDING_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(value)
    if not isinstance(level, int):
        log.warning(
            "invalid_log_level_config",
            env_var="ONBOARDING_LOG_LEVEL",
            value=value,
            fallback="INFO",
        )
        return logging.INFO
    return level


def load_retry_policy() -> RetryPolicy:
    """从环境变量加载乐观并发重试策略

    环境变量映射:
        ONBOARDING_RETRY_MAX_ATTEMPTS -> max_attempts (默认 5)
        ONBOARDING_RETRY_BASE_DELAY_MS -> base_delay_s (默认 50ms)
        ONBOARDING_RETRY_MAX_DELAY_MS -> max_delay_s (默认 1000ms)

    Returns:
        RetryPolicy 实例
    """
    return RetryPolicy(
        max_attempts=max(1, _int_from_env("ONBOARDING_RETRY_MAX_ATTEMPTS", 5)),
        base_delay_s=max(0, _int_from_env("ONBOARDING_RETRY_BASE_DELAY_MS", 50)) / 1000,
        max_delay_s=max(0, _int_from_env("ONBOARDING_RETRY_MAX_DELAY_MS", 1000)) / 1000,
    )
