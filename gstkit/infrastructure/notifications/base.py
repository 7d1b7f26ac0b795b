# gstkit/infrastructure/notifications/base.py

from datetime import datetime
from typing import Any, Protocol

from pydantic import BaseModel, Field


class ScheduledNotification(BaseModel):
    id: str
    title: str
    body: str
    trigger_at: datetime
    payload: dict[str, Any] = Field(default_factory=dict)


class Notifier(Protocol):
    """Schedules local notifications for a later instant."""

    async def request_permission(self) -> bool: ...

    async def schedule(
        self, title: str, body: str, trigger_at: datetime, payload: dict[str, Any] | None = None
    ) -> str: ...

    async def cancel(self, notification_id: str) -> None: ...

    async def pending(self) -> list[ScheduledNotification]: ...
