"""CLI 入口模块 -- python -m onboarding.core <command>

支持的命令：
  init-db                  初始化 SQLite 状态存储
  templates [start-date]   预览模板展开结果（start-date 格式 YYYY-MM-DD，默认今天）
  show-case <case-id>      打印 case 详情（JSON）
"""

import asyncio
import sys
from datetime import UTC, date, datetime

from .config import get_db_path
from .logging_config import setup_logging

_USAGE = """用法: python -m onboarding.core <command>
命令:
  init-db                  初始化 SQLite 状态存储
  templates [start-date]   预览模板展开结果
  show-case <case-id>      打印 case 详情"""


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print(_USAGE)
        sys.exit(1)

    setup_logging()
    command = sys.argv[1]

    if command == "init-db":
        asyncio.run(init_database())
    elif command == "templates":
        start_date = (
            date.fromisoformat(sys.argv[2])
            if len(sys.argv) > 2
            else datetime.now(UTC).date()
        )
        preview_templates(start_date)
    elif command == "show-case" and len(sys.argv) > 2:
        asyncio.run(show_case(sys.argv[2]))
    else:
        print(f"未知命令: {' '.join(sys.argv[1:])}")
        print(_USAGE)
        sys.exit(1)


async def init_database() -> None:
    """创建数据库文件与表结构"""
    from .store import open_sqlite_state_store

    db_path = get_db_path()
    print(f"数据库路径: {db_path}")
    state_store = await open_sqlite_state_store(db_path)
    await state_store.close()
    print("初始化完成")


def preview_templates(start_date: date) -> None:
    """打印模板展开后的 task 列表"""
    from .templates import expand_templates, load_task_templates

    tasks = expand_templates(load_task_templates(), start_date)
    print(f"开始日期: {start_date.isoformat()}，共 {len(tasks)} 个 task")
    for task in tasks:
        print(
            f"  [{task.order}] {task.description} "
            f"({task.task_type.value}) 截止 {task.due_date.isoformat()}"
        )


async def show_case(case_id: str) -> None:
    """打印 case 详情"""
    from .exceptions import NotFoundError
    from .store import CaseAggregateStore, open_sqlite_state_store

    state_store = await open_sqlite_state_store(get_db_path())
    try:
        case = await CaseAggregateStore(state_store).get(case_id)
        print(case.model_dump_json(indent=2))
        print(f"version: {case.version}")
    except NotFoundError:
        print(f"Onboarding case 不存在: {case_id}")
        sys.exit(1)
    finally:
        await state_store.close()


if __name__ == "__main__":
    main()
