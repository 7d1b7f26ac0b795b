# gstkit/infrastructure/notifications/listener.py
"""
Background delivery loop for scheduled notifications.

Polls the notifier for due notifications at a fixed interval and hands each
one to ``on_delivered`` (logging it when no callback is given).
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Protocol

from gstkit.config.settings import settings
from gstkit.domain.models.common import now_ist
from gstkit.infrastructure.notifications.base import ScheduledNotification

logger = logging.getLogger("notification_listener")

DeliveryCallback = Callable[[ScheduledNotification], Awaitable[None] | None]


class DueNotificationSource(Protocol):
    async def pop_due(self, now) -> list[ScheduledNotification]: ...


class NotificationListener:
    def __init__(
        self,
        notifier: DueNotificationSource,
        on_delivered: DeliveryCallback | None = None,
        interval: float | None = None,
    ):
        self.notifier = notifier
        self.on_delivered = on_delivered
        self.interval = interval if interval is not None else settings.NOTIFICATION_POLL_INTERVAL_SECONDS
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        """Deliver every due notification; returns how many were delivered."""
        due = await self.notifier.pop_due(now_ist())
        for notification in due:
            logger.info("Delivering notification %s: %s", notification.id, notification.title)
            if self.on_delivered is None:
                continue
            result = self.on_delivered(notification)
            if inspect.isawaitable(result):
                await result
        return len(due)

    async def _loop(self) -> None:
        logger.info("Notification listener started (interval=%ss)", self.interval)
        while True:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                logger.info("Notification listener cancelled")
                raise
            except Exception:
                logger.exception("Notification listener cycle error")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        """Start the polling task. Safe to call more than once."""
        if not settings.NOTIFICATION_ENABLED:
            logger.info("Notifications disabled; listener not started")
            return
        if self.running:
            logger.debug("Notification listener already running")
            return
        self._task = asyncio.create_task(self._loop())

    async def close(self) -> None:
        if self._task is None:
            return
        if not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        logger.info("Notification listener stopped")


def setup_notification_listener(
    notifier: DueNotificationSource,
    on_delivered: DeliveryCallback | None = None,
) -> NotificationListener:
    return NotificationListener(notifier, on_delivered=on_delivered)
