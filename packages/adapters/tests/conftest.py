"""Adapters 包测试 fixtures"""

import pytest
from onboarding.adapters.config import DaprConfig


@pytest.fixture
def dapr_config() -> DaprConfig:
    """指向测试 sidecar 的配置"""
    return DaprConfig(
        dapr_http_endpoint="http://dapr.test:3500/",
        pubsub_name="pubsub",
        employee_app_id="employeeservice",
        timeout_s=2.0,
    )
