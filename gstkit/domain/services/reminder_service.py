# gstkit/domain/services/reminder_service.py
"""
Filing reminders: turn a projected ``FilingDate`` into scheduled notifications.

For every enabled reminder one notification is scheduled per configured
reminder day (at ``NOTIFICATION_HOUR`` IST) plus one on the due date itself.
Instants already in the past are skipped. Notification delivery is a side
effect: when it fails the reminder is still stored, with no notification ids.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from gstkit.config.settings import settings
from gstkit.core.errors import StorageError
from gstkit.domain.models.common import IST, now_ist
from gstkit.domain.models.filing import FilingDate, FilingHistory, FilingReminder
from gstkit.domain.services.share_text import reminder_notification_body
from gstkit.infrastructure.notifications.base import Notifier
from gstkit.infrastructure.repositories.reminder_repository import ReminderRepository

logger = logging.getLogger("reminder_service")


def _notify_at(day) -> datetime:
    return datetime(day.year, day.month, day.day, settings.NOTIFICATION_HOUR, tzinfo=IST)


class ReminderService:
    def __init__(self, repo: ReminderRepository, notifier: Notifier):
        self.repo = repo
        self.notifier = notifier

    async def schedule_filing_reminder(self, reminder: FilingReminder, now: datetime | None = None) -> list[str]:
        """Schedule notifications for ``reminder`` and return their ids ([] on any failure)."""
        now = now or now_ist()
        ids: list[str] = []
        try:
            if not await self.notifier.request_permission():
                logger.warning("Notification permission not granted; %s not scheduled", reminder.id)
                return []

            reminder_settings = await self.repo.get_settings()
            if not reminder_settings.notifications_enabled:
                return []

            payload = {
                "reminder_id": reminder.id,
                "return_type": reminder.return_type,
                "due_date": reminder.due_date.isoformat(),
            }
            reminder.reminder_dates = []

            for days_before in reminder_settings.reminder_days:
                trigger_at = _notify_at(reminder.due_date - timedelta(days=days_before))
                if trigger_at <= now:
                    continue
                ids.append(await self.notifier.schedule(
                    f"GST Filing Reminder - {reminder.return_name}",
                    reminder_notification_body(reminder, days_before),
                    trigger_at,
                    {**payload, "days_before": days_before},
                ))
                reminder.reminder_dates.append(trigger_at)

            due_at = _notify_at(reminder.due_date)
            if due_at > now:
                ids.append(await self.notifier.schedule(
                    f"GST Filing Due Today - {reminder.return_name}",
                    f"{reminder.return_name} for {reminder.period} is due today. Don't forget to file!",
                    due_at,
                    {**payload, "days_before": 0},
                ))
                reminder.reminder_dates.append(due_at)

            return ids
        except StorageError:
            logger.exception("Error scheduling filing reminder %s", reminder.id)
            # Roll back whatever was scheduled before the failure
            await self.cancel_notifications(ids)
            reminder.reminder_dates = []
            return []

    async def cancel_notifications(self, notification_ids: list[str]) -> None:
        for notification_id in notification_ids:
            try:
                await self.notifier.cancel(notification_id)
            except StorageError:
                logger.exception("Error cancelling notification %s", notification_id)

    async def enable_reminder(self, filing: FilingDate, now: datetime | None = None) -> FilingReminder:
        reminder = FilingReminder(
            id=filing.id,
            return_type=filing.return_type,
            return_name=filing.return_name,
            due_date=filing.due_date,
            period=filing.period,
        )

        # Re-enabling replaces the earlier notifications
        existing = await self.repo.get_reminder(reminder.id)
        if existing is not None:
            await self.cancel_notifications(existing.notification_ids)

        reminder.notification_ids = await self.schedule_filing_reminder(reminder, now)
        await self.repo.add_reminder(reminder)
        logger.info(
            "Reminder set for %s (%s) with %d notifications",
            reminder.return_name, reminder.period, len(reminder.notification_ids),
        )
        return reminder

    async def disable_reminder(self, reminder_id: str) -> bool:
        """Cancel the reminder's notifications, then delete it. False when it does not exist."""
        reminder = await self.repo.get_reminder(reminder_id)
        if reminder is None:
            return False
        await self.cancel_notifications(reminder.notification_ids)
        await self.repo.remove_reminder(reminder_id)
        logger.info("Reminder cancelled for %s (%s)", reminder.return_name, reminder.period)
        return True

    async def mark_filed(self, reminder_id: str, filed_at: datetime | None = None) -> FilingHistory:
        reminder = await self.repo.get_reminder(reminder_id)
        entry = await self.repo.mark_completed(reminder_id, filed_at)
        if reminder is not None:
            await self.cancel_notifications(reminder.notification_ids)
        return entry

    async def reschedule_all(self, now: datetime | None = None) -> list[FilingReminder]:
        """Drop every pending filing notification and schedule open reminders afresh."""
        for notification in await self.notifier.pending():
            if notification.payload.get("return_type"):
                await self.cancel_notifications([notification.id])

        reminders = await self.repo.get_active_reminders()
        for reminder in reminders:
            if reminder.is_completed:
                continue
            reminder.notification_ids = await self.schedule_filing_reminder(reminder, now)

        await self.repo.save_active_reminders(reminders)
        logger.info("Rescheduled %d reminders", sum(1 for r in reminders if not r.is_completed))
        return reminders
