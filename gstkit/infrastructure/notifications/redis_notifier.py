# gstkit/infrastructure/notifications/redis_notifier.py
"""
Notification queue in Redis.

Each notification is a JSON document in a hash keyed by id; a sorted set
scored by trigger timestamp orders them. ``pop_due`` claims a notification
by removing it from the sorted set, so two pollers never deliver the same one.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

from gstkit.config.settings import settings
from gstkit.core.errors import StorageError
from gstkit.infrastructure.notifications.base import ScheduledNotification

logger = logging.getLogger("redis_notifier")


class RedisNotifier:
    def __init__(
        self,
        redis_url: str | None = None,
        prefix: str | None = None,
        client: redis.Redis | None = None,
        permission_granted: bool | None = None,
    ):
        if client is None:
            client = redis.from_url(redis_url or settings.REDIS_URL, decode_responses=True)
        self._r = client
        prefix = settings.STORE_KEY_PREFIX if prefix is None else prefix
        self._hash_key = f"{prefix}notifications"
        self._queue_key = f"{prefix}notifications:due"
        self._permission = (
            settings.NOTIFICATION_PERMISSION_GRANTED if permission_granted is None else permission_granted
        )

    async def request_permission(self) -> bool:
        return self._permission

    async def schedule(
        self, title: str, body: str, trigger_at: datetime, payload: dict[str, Any] | None = None
    ) -> str:
        notification = ScheduledNotification(
            id=f"ntf_{uuid.uuid4().hex}",
            title=title,
            body=body,
            trigger_at=trigger_at,
            payload=payload or {},
        )
        try:
            await self._r.hset(self._hash_key, notification.id, notification.model_dump_json())
            await self._r.zadd(self._queue_key, {notification.id: trigger_at.timestamp()})
        except RedisError as exc:
            logger.exception("Failed to schedule notification %r", title)
            raise StorageError("Could not schedule notification", key=self._hash_key) from exc
        logger.debug("Scheduled notification %s at %s", notification.id, trigger_at.isoformat())
        return notification.id

    async def cancel(self, notification_id: str) -> None:
        try:
            await self._r.zrem(self._queue_key, notification_id)
            await self._r.hdel(self._hash_key, notification_id)
        except RedisError as exc:
            logger.exception("Failed to cancel notification %s", notification_id)
            raise StorageError("Could not cancel notification", key=self._hash_key) from exc

    async def pending(self) -> list[ScheduledNotification]:
        try:
            raw = await self._r.hvals(self._hash_key)
        except RedisError as exc:
            logger.exception("Failed to list notifications")
            raise StorageError("Could not list notifications", key=self._hash_key) from exc
        items = [ScheduledNotification.model_validate_json(r) for r in raw]
        return sorted(items, key=lambda n: n.trigger_at)

    async def pop_due(self, now: datetime) -> list[ScheduledNotification]:
        """Remove and return every notification whose trigger time has passed.

        A notification is read before it is claimed. If Redis fails partway
        through, the ones already claimed are still returned and the rest stay
        queued for the next poll.
        """
        try:
            due_ids = await self._r.zrangebyscore(self._queue_key, "-inf", now.timestamp())
        except RedisError as exc:
            logger.exception("Failed to read due notifications")
            raise StorageError("Could not read due notifications", key=self._queue_key) from exc

        delivered: list[ScheduledNotification] = []
        for notification_id in due_ids:
            try:
                raw = await self._r.hget(self._hash_key, notification_id)
                if not await self._r.zrem(self._queue_key, notification_id):
                    # Claimed by another poller
                    continue
                if raw is not None:
                    delivered.append(ScheduledNotification.model_validate_json(raw))
                await self._r.hdel(self._hash_key, notification_id)
            except RedisError:
                logger.exception(
                    "Failed to claim notification %s; returning %d already claimed",
                    notification_id, len(delivered),
                )
                break
        return delivered

    async def close(self) -> None:
        await self._r.aclose()
