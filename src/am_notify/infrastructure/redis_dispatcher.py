"""RedisNotificationDispatcher — fire-and-forget Redis pub/sub publisher.

Each ``publish`` schedules a background task on the running loop and
returns immediately. Delivery is best-effort: no persistence, replay,
acknowledgment or retry. Subscribers that are not connected at publish time
miss the event.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis

from config.settings import settings
from src.am_common.redis_client import get_redis
from src.am_notify.domain.events import OrderEvent

logger = logging.getLogger(__name__)


class RedisNotificationDispatcher:
    def __init__(
        self,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        channel: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._redis_factory = redis_factory
        self._channel = channel or settings.NOTIFY_CHANNEL
        self._timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.NOTIFY_PUBLISH_TIMEOUT_SECONDS
        )
        # Strong references so in-flight tasks are not garbage-collected.
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def channel(self) -> str:
        return self._channel

    def publish(self, event: OrderEvent) -> None:
        task = asyncio.get_running_loop().create_task(self._send(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, event: OrderEvent) -> None:
        try:
            redis = await self._redis_factory()
            receivers = await asyncio.wait_for(
                redis.publish(self._channel, event.model_dump_json()),
                timeout=self._timeout,
            )
        except Exception:
            logger.warning(
                "Dropped %s notification for order %s (recipient %s)",
                event.event_type.value,
                event.order_id,
                event.recipient_id,
                exc_info=True,
            )
            return
        logger.debug(
            "Published %s for order %s to %d subscriber(s)",
            event.event_type.value,
            event.order_id,
            receivers,
        )

    async def drain(self) -> None:
        """Wait for in-flight publishes (used on shutdown)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


_dispatcher: RedisNotificationDispatcher | None = None


def get_dispatcher() -> RedisNotificationDispatcher:
    global _dispatcher  # noqa: PLW0603
    if _dispatcher is None:
        _dispatcher = RedisNotificationDispatcher()
    return _dispatcher
