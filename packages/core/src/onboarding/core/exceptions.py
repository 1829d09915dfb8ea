"""Onboarding Core 异常体系

每种异常对应一种调用方可区分的结果，均不会被核心层静默吞掉。
recoverable=True 表示调用方可以安全地重试整个请求。
"""


class OnboardingError(Exception):
    """Onboarding 核心层基础异常"""

    def __init__(self, message: str, recoverable: bool = False) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试整个请求恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class ValidationError(OnboardingError):
    """输入缺少必填字段或格式不合法"""


class InvalidEmployeeError(OnboardingError):
    """员工目录明确回答该员工不存在"""

    def __init__(self, employee_id: str) -> None:
        super().__init__(f"员工不存在: {employee_id}")
        self.employee_id = employee_id


class DependencyUnavailableError(OnboardingError):
    """外部协作方不可达（连接失败、超时、非预期响应）

    与"员工不存在"的明确回答区分开。
    """

    def __init__(self, dependency: str, original_error: Exception | None = None) -> None:
        """
        Args:
            dependency: 不可达的协作方名称
            original_error: 原始异常
        """
        detail = f" -- {original_error}" if original_error is not None else ""
        super().__init__(f"依赖服务不可用: {dependency}{detail}", recoverable=True)
        self.dependency = dependency
        self.original_error = original_error


class NotFoundError(OnboardingError):
    """Onboarding case 不存在"""

    def __init__(self, case_id: str) -> None:
        super().__init__(f"Onboarding case 不存在: {case_id}")
        self.case_id = case_id


class TaskNotFoundError(OnboardingError):
    """case 内不存在指定 task"""

    def __init__(self, case_id: str, task_id: str) -> None:
        super().__init__(f"Task 不存在: {task_id} (case {case_id})")
        self.case_id = case_id
        self.task_id = task_id


class AlreadyExistsError(OnboardingError):
    """case 标识已被占用"""

    def __init__(self, case_id: str) -> None:
        super().__init__(f"Onboarding case 已存在: {case_id}")
        self.case_id = case_id


class VersionConflictError(OnboardingError):
    """条件写入被拒绝：存储中的版本已被其他写入者推进

    由 StateStore 抛出，CaseAggregateStore 通过重试消化。
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"版本冲突: {key}", recoverable=True)
        self.key = key


class ConcurrencyConflictError(OnboardingError):
    """乐观并发重试次数耗尽"""

    def __init__(self, key: str, attempts: int) -> None:
        super().__init__(
            f"乐观并发重试耗尽: {key}（共尝试 {attempts} 次）",
            recoverable=True,
        )
        self.key = key
        self.attempts = attempts


class CaseClosedError(OnboardingError):
    """case 已处于终态，拒绝进一步变更"""

    def __init__(self, case_id: str, status: str) -> None:
        super().__init__(f"Onboarding case 已关闭: {case_id} ({status})")
        self.case_id = case_id
        self.status = status
