"""DaprEmployeeDirectory -- 通过 Dapr 服务调用查询员工是否存在

GET {dapr}/v1.0/invoke/{app_id}/method/v1/employees/{employee_id}
- 2xx: 存在
- 404: 不存在
- 其他状态码 / 连接失败 / 超时: DependencyUnavailableError
"""

from urllib.parse import quote

import httpx
import structlog
from onboarding.core.exceptions import DependencyUnavailableError

from .config import DaprConfig

log = structlog.get_logger()

DEPENDENCY_NAME = "employee-directory"


class DaprEmployeeDirectory:
    """员工身份服务客户端"""

    def __init__(
        self,
        config: DaprConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            config: Dapr 配置，None 使用默认值
            client: 复用的 httpx 客户端；None 时每次调用临时创建
        """
        self._config = config or DaprConfig()
        self._client = client

    def _employee_url(self, employee_id: str) -> str:
        base = self._config.dapr_http_endpoint.rstrip("/")
        return (
            f"{base}/v1.0/invoke/{self._config.employee_app_id}"
            f"/method/v1/employees/{quote(employee_id, safe='')}"
        )

    async def exists(self, employee_id: str) -> bool:
        """查询员工是否存在

        Raises:
            DependencyUnavailableError: 服务不可达、超时或返回非预期状态码
        """
        url = self._employee_url(employee_id)
        try:
            if self._client is not None:
                resp = await self._client.get(url, timeout=self._config.timeout_s)
            else:
                async with httpx.AsyncClient() as http_client:
                    resp = await http_client.get(url, timeout=self._config.timeout_s)
        except httpx.HTTPError as e:
            log.error(
                "employee_lookup_failed",
                employee_id=employee_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DependencyUnavailableError(DEPENDENCY_NAME, e) from e

        if resp.status_code == 404:
            log.info("employee_lookup_not_found", employee_id=employee_id)
            return False
        if resp.is_success:
            return True

        log.error(
            "employee_lookup_unexpected_status",
            employee_id=employee_id,
            status_code=resp.status_code,
        )
        raise DependencyUnavailableError(
            DEPENDENCY_NAME,
            httpx.HTTPStatusError(
                f"unexpected status {resp.status_code}",
                request=resp.request,
                response=resp,
            ),
        )
