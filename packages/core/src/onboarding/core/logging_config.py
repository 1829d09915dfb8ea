"""structlog 输出配置

structlog 与标准库 logging（aiosqlite、httpx 等第三方库）的记录
统一经过 ProcessorFormatter 渲染，格式与级别来自 onboarding.core.config。
"""

import logging
import sys
from typing import TextIO

import structlog

from .config import get_log_format, get_log_level

# 第三方库的逐请求 / 逐语句日志只保留 WARNING 以上
_QUIET_LOGGERS: tuple[str, ...] = ("aiosqlite", "httpx", "httpcore")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def build_formatter(log_format: str) -> structlog.stdlib.ProcessorFormatter:
    """构造 stdlib handler 使用的 formatter

    Args:
        log_format: "json" 输出单行 JSON（case_id 等字段可直接检索），其余值输出彩色控制台格式
    """
    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(
            ensure_ascii=False
        )
    else:
        renderer = structlog.dev.ConsoleRenderer()

    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=_shared_processors(),
    )


def setup_logging(
    log_format: str | None = None,
    log_level: int | None = None,
    stream: TextIO | None = None,
) -> None:
    """初始化 CLI / 宿主进程的日志输出

    Args:
        log_format: 渲染模式，None 时读取 ONBOARDING_LOG_FORMAT
        log_level: 日志级别，None 时读取 ONBOARDING_LOG_LEVEL
        stream: 输出流，默认 stderr（stdout 留给 CLI 的命令输出）
    """
    log_format = log_format or get_log_format()
    log_level = log_level if log_level is not None else get_log_level()

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(build_formatter(log_format))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))
