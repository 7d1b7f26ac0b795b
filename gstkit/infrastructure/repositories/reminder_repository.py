# gstkit/infrastructure/repositories/reminder_repository.py
"""Reminder settings, active filing reminders and the filed-returns log."""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timedelta

from pydantic import ValidationError

from gstkit.config.settings import settings
from gstkit.core.errors import ReminderNotFoundError, StorageError
from gstkit.domain.models.common import IST, now_ist
from gstkit.domain.models.filing import FilingHistory, FilingReminder, ReminderSettings
from gstkit.infrastructure.store.base import JsonCollection, KeyValueStore

logger = logging.getLogger("reminder_repository")

REMINDER_SETTINGS_KEY = "gst_reminder_settings"
ACTIVE_REMINDERS_KEY = "gst_active_reminders"
FILING_HISTORY_KEY = "gst_filing_history"


def _ist_date(moment: datetime) -> date:
    # Naive timestamps are taken as IST
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(IST).date()


class ReminderRepository:
    def __init__(self, store: KeyValueStore, history_limit: int | None = None):
        self.store = store
        self.collection = JsonCollection(store)
        self.history_limit = history_limit or settings.FILING_HISTORY_LIMIT

    # -- settings --------------------------------------------------------------
    async def get_settings(self) -> ReminderSettings:
        raw = await self.store.get(REMINDER_SETTINGS_KEY)
        if not raw:
            return ReminderSettings()
        try:
            return ReminderSettings.model_validate(raw)
        except ValidationError as exc:
            raise StorageError("Stored reminder settings are malformed", key=REMINDER_SETTINGS_KEY) from exc

    async def save_settings(self, reminder_settings: ReminderSettings) -> None:
        await self.store.set(REMINDER_SETTINGS_KEY, reminder_settings.model_dump(mode="json"))

    # -- active reminders ------------------------------------------------------
    async def get_active_reminders(self) -> list[FilingReminder]:
        records = await self.collection.read(ACTIVE_REMINDERS_KEY)
        try:
            return [FilingReminder.model_validate(r) for r in records]
        except ValidationError as exc:
            raise StorageError("Stored reminders are malformed", key=ACTIVE_REMINDERS_KEY) from exc

    async def get_reminder(self, reminder_id: str) -> FilingReminder | None:
        for reminder in await self.get_active_reminders():
            if reminder.id == reminder_id:
                return reminder
        return None

    async def save_active_reminders(self, reminders: list[FilingReminder]) -> None:
        async with self.collection.lock(ACTIVE_REMINDERS_KEY):
            await self.store.set(ACTIVE_REMINDERS_KEY, [r.model_dump(mode="json") for r in reminders])

    async def add_reminder(self, reminder: FilingReminder) -> None:
        """Insert ``reminder``, replacing any reminder with the same id."""
        record = reminder.model_dump(mode="json")

        def _upsert(items: list) -> None:
            for i, existing in enumerate(items):
                if existing.get("id") == reminder.id:
                    items[i] = record
                    return
            items.append(record)

        await self.collection.update(ACTIVE_REMINDERS_KEY, _upsert)

    async def remove_reminder(self, reminder_id: str) -> None:
        await self.collection.update(
            ACTIVE_REMINDERS_KEY,
            lambda items: [r for r in items if r.get("id") != reminder_id],
        )

    async def mark_completed(self, reminder_id: str, filed_at: datetime | None = None) -> FilingHistory:
        """Flag the reminder as filed and log it; late when filed after the due date."""
        filed_at = filed_at or now_ist()

        async with self.collection.lock(ACTIVE_REMINDERS_KEY):
            reminders = await self.get_active_reminders()
            reminder = next((r for r in reminders if r.id == reminder_id), None)
            if reminder is None:
                raise ReminderNotFoundError(f"Reminder {reminder_id} not found")

            reminder.is_completed = True
            reminder.completed_date = filed_at

            entry = FilingHistory(
                id=f"{reminder.id}_{uuid.uuid4().hex[:8]}",
                return_type=reminder.return_type,
                return_name=reminder.return_name,
                period=reminder.period,
                due_date=reminder.due_date,
                filed_date=filed_at,
                status="late" if _ist_date(filed_at) > reminder.due_date else "filed",
            )
            await self.add_to_filing_history(entry)
            await self.store.set(ACTIVE_REMINDERS_KEY, [r.model_dump(mode="json") for r in reminders])

        logger.info("Marked %s (%s) as %s", reminder.return_name, reminder.period, entry.status)
        return entry

    async def upcoming(self, days: int = 30, now: datetime | None = None) -> list[FilingReminder]:
        today = _ist_date(now or now_ist())
        horizon = today + timedelta(days=days)
        pending = [
            r for r in await self.get_active_reminders()
            if not r.is_completed and today <= r.due_date <= horizon
        ]
        return sorted(pending, key=lambda r: r.due_date)

    async def overdue(self, now: datetime | None = None) -> list[FilingReminder]:
        today = _ist_date(now or now_ist())
        late = [
            r for r in await self.get_active_reminders()
            if not r.is_completed and r.due_date < today
        ]
        return sorted(late, key=lambda r: r.due_date)

    # -- filing history --------------------------------------------------------
    async def get_filing_history(self) -> list[FilingHistory]:
        records = await self.collection.read(FILING_HISTORY_KEY)
        try:
            return [FilingHistory.model_validate(r) for r in records]
        except ValidationError as exc:
            raise StorageError("Stored filing history is malformed", key=FILING_HISTORY_KEY) from exc

    async def add_to_filing_history(self, entry: FilingHistory) -> None:
        record = entry.model_dump(mode="json")

        def _prepend(items: list) -> list:
            items.insert(0, record)
            return items[: self.history_limit]

        await self.collection.update(FILING_HISTORY_KEY, _prepend)

    async def clear_all(self) -> None:
        await self.store.remove_many([
            REMINDER_SETTINGS_KEY,
            ACTIVE_REMINDERS_KEY,
            FILING_HISTORY_KEY,
        ])
