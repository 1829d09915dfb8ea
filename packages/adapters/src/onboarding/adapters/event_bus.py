"""事件总线实现

- DaprEventBus: 通过 Dapr pub/sub HTTP API 发布事件
- InMemoryEventBus: 内存发布/订阅，每个订阅者持有一个 asyncio.Queue
"""

import asyncio
from collections import defaultdict
from typing import Any

import httpx
import structlog
from onboarding.core.exceptions import DependencyUnavailableError

from .config import DaprConfig

log = structlog.get_logger()

DEPENDENCY_NAME = "event-bus"


class DaprEventBus:
    """Dapr pub/sub 发布客户端

    POST {dapr}/v1.0/publish/{pubsub}/{topic}，body 为 JSON payload。
    """

    def __init__(
        self,
        config: DaprConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or DaprConfig()
        self._client = client

    def _publish_url(self, topic: str) -> str:
        base = self._config.dapr_http_endpoint.rstrip("/")
        return f"{base}/v1.0/publish/{self._config.pubsub_name}/{topic}"

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        """发布事件

        Raises:
            DependencyUnavailableError: sidecar 不可达或拒绝发布
        """
        url = self._publish_url(topic)
        try:
            if self._client is not None:
                resp = await self._client.post(
                    url, json=payload, timeout=self._config.timeout_s
                )
            else:
                async with httpx.AsyncClient() as http_client:
                    resp = await http_client.post(
                        url, json=payload, timeout=self._config.timeout_s
                    )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise DependencyUnavailableError(DEPENDENCY_NAME, e) from e

        log.debug("event_published", topic=topic, pubsub=self._config.pubsub_name)


class InMemoryEventBus:
    """内存事件总线 -- 记录所有已发布事件并广播给订阅者"""

    def __init__(self, queue_maxsize: int = 100) -> None:
        # topic -> set of asyncio.Queue
        self._subscribers: dict[str, set[asyncio.Queue]] = defaultdict(set)
        self._queue_maxsize = queue_maxsize
        self.published: list[tuple[str, dict[str, Any]]] = []

    async def subscribe(self, topic: str) -> asyncio.Queue:
        """订阅指定主题

        Returns:
            asyncio.Queue 实例，新事件 payload 会被推送到此队列
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscribers[topic].add(queue)
        return queue

    async def unsubscribe(self, topic: str, queue: asyncio.Queue) -> None:
        """取消订阅"""
        self._subscribers[topic].discard(queue)
        if not self._subscribers[topic]:
            del self._subscribers[topic]

    async def publish(self, topic: str, payload: dict[str, Any]) -> None:
        """发布事件并广播给该主题的所有订阅者"""
        self.published.append((topic, payload))

        dead_queues = []
        for queue in self._subscribers.get(topic, set()):
            try:
                queue.put_nowait(payload)
            except asyncio.QueueFull:
                dead_queues.append(queue)

        # 清理已满的队列
        for q in dead_queues:
            self._subscribers[topic].discard(q)
        if topic in self._subscribers and not self._subscribers[topic]:
            del self._subscribers[topic]

    def events_for(self, topic: str) -> list[dict[str, Any]]:
        """指定主题上已发布的 payload 列表"""
        return [payload for t, payload in self.published if t == topic]
