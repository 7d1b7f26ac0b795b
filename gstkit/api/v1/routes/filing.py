# gstkit/api/v1/routes/filing.py
"""GST return calendar: applicable returns and upcoming due dates."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from gstkit.domain.models.filing import FilerType
from gstkit.domain.services.filing_dates import get_applicable_returns, get_upcoming_filing_dates
from gstkit.infrastructure.repositories.reminder_repository import ReminderRepository

from gstkit.api.v1.deps import get_reminder_repo
from gstkit.api.v1.envelope import ok

router = APIRouter(prefix="/filing", tags=["Filing Dates"])


@router.get("/returns", response_model=dict)
async def list_returns(
    business_type: Optional[FilerType] = None,
    annual_turnover: Optional[int] = Query(default=None, ge=0),
    repo: ReminderRepository = Depends(get_reminder_repo),
):
    reminder_settings = await repo.get_settings()
    return ok(data=get_applicable_returns(
        business_type or reminder_settings.business_type,
        annual_turnover if annual_turnover is not None else reminder_settings.annual_turnover,
    ))


@router.get("/dates", response_model=dict)
async def list_filing_dates(
    business_type: Optional[FilerType] = None,
    annual_turnover: Optional[int] = Query(default=None, ge=0),
    days_ahead: int = Query(default=90, ge=0, le=400),
    repo: ReminderRepository = Depends(get_reminder_repo),
):
    """
    Upcoming due dates for the taxpayer profile, soonest first.

    Business type and turnover default to the saved reminder settings.
    Each date carries ``has_reminder`` when an active reminder exists for it.
    """
    reminder_settings = await repo.get_settings()
    dates = get_upcoming_filing_dates(
        business_type or reminder_settings.business_type,
        annual_turnover if annual_turnover is not None else reminder_settings.annual_turnover,
        days_ahead,
    )
    active = {r.id for r in await repo.get_active_reminders() if not r.is_completed}
    return ok(data=[
        {**d.model_dump(mode="json"), "has_reminder": d.id in active}
        for d in dates
    ])
