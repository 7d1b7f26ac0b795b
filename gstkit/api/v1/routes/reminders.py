# gstkit/api/v1/routes/reminders.py
"""Filing reminders: settings, enable/disable, mark filed and the filed-returns log."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from gstkit.core.errors import ReminderNotFoundError
from gstkit.domain.models.filing import ReminderSettings
from gstkit.domain.services.filing_dates import get_upcoming_filing_dates
from gstkit.domain.services.reminder_service import ReminderService
from gstkit.infrastructure.repositories.reminder_repository import ReminderRepository

from gstkit.api.v1.deps import get_reminder_repo, get_reminder_service
from gstkit.api.v1.envelope import ok
from gstkit.api.v1.schemas.filing import CompleteReminderRequest

logger = logging.getLogger("api.v1.reminders")

router = APIRouter(prefix="/reminders", tags=["Reminders"])


@router.get("/settings", response_model=dict)
async def get_reminder_settings(repo: ReminderRepository = Depends(get_reminder_repo)):
    return ok(data=await repo.get_settings())


@router.put("/settings", response_model=dict)
async def save_reminder_settings(
    body: ReminderSettings,
    repo: ReminderRepository = Depends(get_reminder_repo),
    service: ReminderService = Depends(get_reminder_service),
):
    """Save settings and reschedule open reminders so new reminder days take effect."""
    await repo.save_settings(body)
    await service.reschedule_all()
    return ok(data=body, message="Reminder settings saved")


@router.get("", response_model=dict)
async def list_reminders(repo: ReminderRepository = Depends(get_reminder_repo)):
    return ok(data=await repo.get_active_reminders())


@router.get("/upcoming", response_model=dict)
async def upcoming_reminders(
    days: int = Query(default=30, ge=0),
    repo: ReminderRepository = Depends(get_reminder_repo),
):
    return ok(data=await repo.upcoming(days))


@router.get("/overdue", response_model=dict)
async def overdue_reminders(repo: ReminderRepository = Depends(get_reminder_repo)):
    return ok(data=await repo.overdue())


@router.get("/history", response_model=dict)
async def filing_history(repo: ReminderRepository = Depends(get_reminder_repo)):
    return ok(data=await repo.get_filing_history())


@router.post("/reschedule", response_model=dict)
async def reschedule_reminders(service: ReminderService = Depends(get_reminder_service)):
    reminders = await service.reschedule_all()
    return ok(data=reminders, message="Reminders rescheduled")


@router.post("/{filing_id}", response_model=dict)
async def enable_reminder(
    filing_id: str,
    repo: ReminderRepository = Depends(get_reminder_repo),
    service: ReminderService = Depends(get_reminder_service),
):
    """Enable a reminder for one of the taxpayer's upcoming filing dates."""
    reminder_settings = await repo.get_settings()
    dates = get_upcoming_filing_dates(reminder_settings.business_type, reminder_settings.annual_turnover)
    filing = next((d for d in dates if d.id == filing_id), None)
    if filing is None:
        raise ReminderNotFoundError(f"No upcoming filing date {filing_id}")

    reminder = await service.enable_reminder(filing)
    message = f"Reminder set for {filing.return_name}"
    if not reminder.notification_ids:
        message += " (no notifications scheduled)"
    return ok(data=reminder, message=message)


@router.delete("/{reminder_id}", response_model=dict)
async def disable_reminder(reminder_id: str, service: ReminderService = Depends(get_reminder_service)):
    if not await service.disable_reminder(reminder_id):
        raise ReminderNotFoundError(f"Reminder {reminder_id} not found")
    return ok(message="Reminder cancelled")


@router.post("/{reminder_id}/complete", response_model=dict)
async def complete_reminder(
    reminder_id: str,
    body: CompleteReminderRequest = CompleteReminderRequest(),
    service: ReminderService = Depends(get_reminder_service),
):
    entry = await service.mark_filed(reminder_id, body.filed_at)
    return ok(data=entry, message="Return marked as filed")
