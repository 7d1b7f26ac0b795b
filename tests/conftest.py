"""Shared test fixtures for the gstkit test suite."""

import asyncio
import json
import uuid
from datetime import date

import pytest

from gstkit.core.errors import StorageError
from gstkit.infrastructure.notifications.base import ScheduledNotification


class FakeStore:
    """In-memory ``KeyValueStore``; values go through JSON like the Redis store."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.fail_on: set[str] = set()

    def _check(self, key):
        if key in self.fail_on:
            raise StorageError(f"Could not access {key}", key=key)

    async def get(self, key):
        self._check(key)
        raw = self.data.get(key)
        return None if raw is None else json.loads(raw)

    async def set(self, key, value):
        self._check(key)
        self.data[key] = json.dumps(value)

    async def remove(self, key):
        self._check(key)
        self.data.pop(key, None)

    async def remove_many(self, keys):
        for key in keys:
            await self.remove(key)

    def raw(self, key):
        return json.loads(self.data[key])


class FakeNotifier:
    """Records scheduled notifications instead of delivering them."""

    def __init__(self, permission: bool = True):
        self.permission = permission
        self.scheduled: dict[str, ScheduledNotification] = {}
        self.cancelled: list[str] = []
        self.fail_schedule = False
        self.fail_on_call: int | None = None
        self.schedule_calls = 0

    async def request_permission(self):
        return self.permission

    async def schedule(self, title, body, trigger_at, payload=None):
        self.schedule_calls += 1
        if self.fail_schedule or self.schedule_calls == self.fail_on_call:
            raise StorageError("notifier down")
        n = ScheduledNotification(
            id=f"ntf_{uuid.uuid4().hex[:8]}", title=title, body=body,
            trigger_at=trigger_at, payload=payload or {},
        )
        self.scheduled[n.id] = n
        return n.id

    async def cancel(self, notification_id):
        self.cancelled.append(notification_id)
        self.scheduled.pop(notification_id, None)

    async def pending(self):
        return sorted(self.scheduled.values(), key=lambda n: n.trigger_at)


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def today() -> date:
    """A fixed 'today' so calendar assertions do not drift."""
    return date(2026, 9, 5)
