"""OnboardingWorkflow -- onboarding case 业务编排

调用方唯一入口，组合 TemplateExpander、CompletionCalculator、
CaseAggregateStore 与 EventNotifier：
1. 创建 case：校验员工 -> 占用员工归属 -> 展开模板 -> 持久化
2. 更新 task 状态：读 -> 变更 -> 重算完成度 -> 条件写 -> 首次完成时发布事件
"""

from collections.abc import Callable, Sequence
from datetime import UTC, date, datetime, timedelta

import structlog
from ulid import ULID

from .completion import derive_completion
from .config import TARGET_COMPLETION_DAYS
from .exceptions import (
    AlreadyExistsError,
    CaseClosedError,
    InvalidEmployeeError,
    NotFoundError,
    TaskNotFoundError,
    ValidationError,
)
from .models.case import OnboardingCase, OnboardingTask
from .models.enums import CaseStatus, TaskStatus, validate_case_transition
from .models.payloads import EmployeeCreatedPayload
from .models.template import TaskTemplate
from .notifier import EventNotifier
from .protocols import EmployeeDirectory
from .store.case_store import CaseAggregateStore
from .templates import expand_templates

log = structlog.get_logger()


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _find_task_index(case: OnboardingCase, task_id: str) -> int:
    for idx, task in enumerate(case.tasks):
        if task.task_id == task_id:
            return idx
    raise TaskNotFoundError(case.case_id, task_id)


def _ensure_open(case: OnboardingCase) -> None:
    if case.status == CaseStatus.CANCELLED:
        raise CaseClosedError(case.case_id, case.status.value)


class OnboardingWorkflow:
    """Onboarding 业务服务"""

    def __init__(
        self,
        case_store: CaseAggregateStore,
        employee_directory: EmployeeDirectory,
        notifier: EventNotifier,
        templates: Sequence[TaskTemplate],
        clock: Callable[[], datetime] = _utc_now,
        target_completion_days: int = TARGET_COMPLETION_DAYS,
    ) -> None:
        """初始化业务服务

        Args:
            case_store: case 聚合存储
            employee_directory: 员工身份服务
            notifier: 完成事件发布器
            templates: 进程启动时加载的 task 模板（只读）
            clock: 当前时间来源（UTC）
            target_completion_days: 目标完成日期相对开始日期的天数
        """
        self._case_store = case_store
        self._employee_directory = employee_directory
        self._notifier = notifier
        self._templates = tuple(templates)
        self._clock = clock
        self._target_completion_days = target_completion_days

    async def create_case(
        self,
        employee_id: str,
        start_date: date | None,
        notes: str | None = None,
    ) -> OnboardingCase:
        """为员工创建 onboarding case

        Args:
            employee_id: 员工标识
            start_date: 入职开始日期
            notes: 备注

        Returns:
            已持久化的 case（含版本令牌）

        Raises:
            ValidationError: employee_id 为空或 start_date 缺失
            InvalidEmployeeError: 员工目录回答员工不存在
            DependencyUnavailableError: 员工目录不可达
            AlreadyExistsError: 该员工已有 onboarding case
        """
        if not employee_id or not employee_id.strip():
            raise ValidationError("employee_id 不能为空")
        if start_date is None:
            raise ValidationError("start_date 不能为空")

        if not await self._employee_directory.exists(employee_id):
            log.warning("employee_not_found", employee_id=employee_id)
            raise InvalidEmployeeError(employee_id)

        # 先占用员工归属（先到先得），每个员工只有一个 case
        case_id, existing = await self._claim_employee(employee_id)
        if existing is not None:
            log.warning(
                "employee_case_exists_reject",
                employee_id=employee_id,
                case_id=existing.case_id,
            )
            raise AlreadyExistsError(existing.case_id)

        return await self._create_case_record(case_id, employee_id, start_date, notes)

    async def get_case(self, case_id: str) -> OnboardingCase:
        """查询 case 详情

        Raises:
            NotFoundError: case 不存在
        """
        return await self._case_store.get(case_id)

    async def update_task_status(
        self,
        case_id: str,
        task_id: str,
        new_status: TaskStatus,
        completed_by: str | None = None,
    ) -> OnboardingCase:
        """更新 task 状态并重新推导 case 完成状态

        case 首次推导为 Completed 的写入成功后发布一次 case-completed 事件；
        内部版本冲突重试不会重复发布。

        Args:
            case_id: case 标识
            task_id: task 标识
            new_status: 目标状态
            completed_by: 完成人（仅在流转到 Completed 时记录）

        Returns:
            写入成功后的 case

        Raises:
            NotFoundError: case 不存在
            TaskNotFoundError: case 内不存在该 task
            CaseClosedError: case 已取消
            ValidationError: new_status 不是合法的 task 状态
            ConcurrencyConflictError: 乐观并发重试耗尽
        """
        try:
            new_status = TaskStatus(new_status)
        except ValueError as e:
            raise ValidationError(f"非法 task 状态: {new_status}") from e
        # 仅最后一次（即写入成功的那次）变更结果有效
        completed_now = False

        def mutate(current: OnboardingCase) -> OnboardingCase:
            nonlocal completed_now
            _ensure_open(current)
            idx = _find_task_index(current, task_id)
            now = self._clock()

            tasks = list(current.tasks)
            tasks[idx] = self._apply_task_status(tasks[idx], new_status, now, completed_by)

            completion = derive_completion(tasks)
            update: dict = {
                "tasks": tasks,
                "completion_percentage": completion.percentage,
                "updated_at": now,
            }
            if completion.all_complete:
                completed_now = current.status != CaseStatus.COMPLETED
                if completed_now:
                    update["status"] = CaseStatus.COMPLETED
                    update["actual_completion_date"] = now
            else:
                completed_now = False
                update["status"] = CaseStatus.IN_PROGRESS
                update["actual_completion_date"] = None

            return current.model_copy(update=update)

        updated = await self._case_store.read_modify_write(case_id, mutate)

        log.info(
            "task_status_updated",
            case_id=case_id,
            task_id=task_id,
            task_status=new_status.value,
            case_status=updated.status.value,
            completion_percentage=updated.completion_percentage,
            version=updated.version,
        )

        if completed_now:
            log.info("case_completed", case_id=case_id, employee_id=updated.employee_id)
            await self._notifier.notify_case_completed(updated)

        return updated

    async def assign_task(self, case_id: str, task_id: str, assignee: str) -> OnboardingCase:
        """指定 task 负责人

        Raises:
            NotFoundError: case 不存在
            TaskNotFoundError: case 内不存在该 task
            CaseClosedError: case 已取消
        """

        def mutate(current: OnboardingCase) -> OnboardingCase:
            _ensure_open(current)
            idx = _find_task_index(current, task_id)
            tasks = list(current.tasks)
            tasks[idx] = tasks[idx].model_copy(update={"assignee": assignee})
            return current.model_copy(update={"tasks": tasks, "updated_at": self._clock()})

        updated = await self._case_store.read_modify_write(case_id, mutate)
        log.info("task_assigned", case_id=case_id, task_id=task_id, assignee=assignee)
        return updated

    async def cancel_case(self, case_id: str) -> OnboardingCase:
        """取消 case（调用方主动发起）

        Raises:
            NotFoundError: case 不存在
            CaseClosedError: case 已完成或已取消
        """

        def mutate(current: OnboardingCase) -> OnboardingCase:
            if not validate_case_transition(current.status, CaseStatus.CANCELLED):
                raise CaseClosedError(current.case_id, current.status.value)
            return current.model_copy(
                update={"status": CaseStatus.CANCELLED, "updated_at": self._clock()}
            )

        updated = await self._case_store.read_modify_write(case_id, mutate)
        log.info("case_cancelled", case_id=case_id, employee_id=updated.employee_id)
        return updated

    async def handle_employee_created(
        self,
        event: EmployeeCreatedPayload,
    ) -> tuple[OnboardingCase, bool]:
        """处理 EmployeeCreated 事件，为新员工自动创建 case

        事件可能被重复投递，同一员工只会创建一个 case。

        Returns:
            (case, created) -- created=False 表示员工已有 case
        """
        case_id, existing = await self._claim_employee(event.employee_id)
        if existing is not None:
            log.info(
                "employee_case_exists_skip",
                employee_id=event.employee_id,
                case_id=existing.case_id,
            )
            return existing, False

        notes = "Automatically created from EmployeeCreated event"
        if event.email:
            notes = f"{notes} for {event.email}"
        try:
            case = await self._create_case_record(
                case_id, event.employee_id, self._clock().date(), notes
            )
        except AlreadyExistsError:
            # 并发的重复投递抢先补写了同一个 case_id
            return await self._case_store.get(case_id), False
        return case, True

    async def _claim_employee(
        self,
        employee_id: str,
    ) -> tuple[str, OnboardingCase | None]:
        """为员工占用 case 归属

        Returns:
            (case_id, existing)
            - 占用成功: (新 case_id, None)
            - 已有 case: (其 case_id, 已有 case)
            - 归属存在但 case 未写入（上次创建在写入前中断）: (已占用的 case_id, None)
        """
        case_id = str(ULID())
        owner_case_id = await self._case_store.claim_employee(employee_id, case_id)
        if owner_case_id == case_id:
            return case_id, None

        try:
            existing = await self._case_store.get(owner_case_id)
        except NotFoundError:
            log.warning(
                "employee_claim_without_case",
                employee_id=employee_id,
                case_id=owner_case_id,
            )
            return owner_case_id, None
        return owner_case_id, existing

    async def _create_case_record(
        self,
        case_id: str,
        employee_id: str,
        start_date: date,
        notes: str | None,
    ) -> OnboardingCase:
        """展开模板并持久化新 case"""
        now = self._clock()
        tasks = expand_templates(self._templates, start_date)

        # 已有 task 到期（截止日期不晚于当前处理日期）时直接进入 InProgress
        today = now.date()
        actionable = any(task.due_date <= today for task in tasks)
        status = CaseStatus.IN_PROGRESS if actionable else CaseStatus.PENDING

        case = OnboardingCase(
            case_id=case_id,
            employee_id=employee_id,
            start_date=start_date,
            target_completion_date=start_date + timedelta(days=self._target_completion_days),
            status=status,
            tasks=tasks,
            completion_percentage=derive_completion(tasks).percentage,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        version = await self._case_store.create(case)

        log.info(
            "onboarding_case_created",
            case_id=case_id,
            employee_id=employee_id,
            task_count=len(tasks),
            status=status.value,
        )
        return case.model_copy(update={"version": version})

    @staticmethod
    def _apply_task_status(
        task: OnboardingTask,
        new_status: TaskStatus,
        now: datetime,
        completed_by: str | None,
    ) -> OnboardingTask:
        """计算 task 状态流转后的新值"""
        if new_status == TaskStatus.COMPLETED:
            if task.status == TaskStatus.COMPLETED:
                # 已完成的 task 重复标记完成：保留原完成信息
                return task
            return task.model_copy(
                update={
                    "status": new_status,
                    "completed_date": now,
                    "completed_by": completed_by,
                }
            )
        # 离开 Completed（或从未完成）时清空完成信息
        return task.model_copy(
            update={
                "status": new_status,
                "completed_date": None,
                "completed_by": None,
            }
        )
