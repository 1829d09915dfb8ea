"""DaprConfig -- 外部协作方配置加载

从环境变量加载 Dapr sidecar 地址、pub/sub 组件名与员工服务 app id。
"""

import os

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()


class DaprConfig(BaseModel):
    """外部协作方配置 -- 从环境变量加载

    环境变量:
        DAPR_HTTP_ENDPOINT: Dapr sidecar HTTP 地址（默认 http://localhost:3500）
        ONBOARDING_PUBSUB_NAME: pub/sub 组件名（默认 pubsub）
        ONBOARDING_EMPLOYEE_APP_ID: 员工服务 app id（默认 employeeservice）
        ONBOARDING_HTTP_TIMEOUT_S: HTTP 调用超时（秒，默认 5）
    """

    dapr_http_endpoint: str = Field(
        default="http://localhost:3500",
        description="Dapr sidecar HTTP 地址",
    )
    pubsub_name: str = Field(default="pubsub", description="pub/sub 组件名")
    employee_app_id: str = Field(
        default="employeeservice",
        description="员工服务的 Dapr app id",
    )
    timeout_s: float = Field(default=5.0, gt=0, description="HTTP 调用超时（秒）")


def load_dapr_config() -> DaprConfig:
    """从环境变量加载 DaprConfig

    Returns:
        DaprConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("DAPR_HTTP_ENDPOINT"):
        kwargs["dapr_http_endpoint"] = val

    if val := os.environ.get("ONBOARDING_PUBSUB_NAME"):
        kwargs["pubsub_name"] = val

    if val := os.environ.get("ONBOARDING_EMPLOYEE_APP_ID"):
        kwargs["employee_app_id"] = val

    if val := os.environ.get("ONBOARDING_HTTP_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = float(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="ONBOARDING_HTTP_TIMEOUT_S",
                value=val,
                fallback=5.0,
            )
            # 使用默认值，不阻塞启动

    return DaprConfig(**kwargs)
