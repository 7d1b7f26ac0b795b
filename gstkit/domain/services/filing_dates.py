# gstkit/domain/services/filing_dates.py
"""
GST return due-date calendar.

A static rule table of return types is resolved against "today" to list the
due dates coming up for a taxpayer. Pure date arithmetic: callers inject
``today`` in tests, production uses the current IST date.
"""

from __future__ import annotations

import calendar
import logging
from datetime import date

from gstkit.domain.models.common import now_ist
from gstkit.domain.models.filing import FilerType, FilingDate, GSTReturn

logger = logging.getLogger("filing_dates")

# Above this turnover GSTR-1 is filed monthly, otherwise quarterly (₹1.5 Cr)
GSTR1_MONTHLY_TURNOVER_CUTOFF = 150_000_000

# Overdue filings stay on the calendar for this many days
OVERDUE_LOOKBACK_DAYS = 30

GST_RETURNS: list[GSTReturn] = [
    GSTReturn(
        id="gstr1",
        name="GSTR-1",
        description="Details of outward supplies of taxable goods and/or services effected",
        frequency="monthly",
        due_day=11,
        applicable_for="regular",
    ),
    GSTReturn(
        id="gstr1_quarterly",
        name="GSTR-1 (Quarterly)",
        description="Quarterly GSTR-1 for small taxpayers",
        frequency="quarterly",
        due_day=11,
        applicable_for="regular",
    ),
    GSTReturn(
        id="gstr3b",
        name="GSTR-3B",
        description="Monthly return with summary of outward supplies, input tax credit and tax payment",
        frequency="monthly",
        due_day=20,
        applicable_for="regular",
    ),
    GSTReturn(
        id="gstr4",
        name="GSTR-4",
        description="Return for composition taxpayers",
        frequency="quarterly",
        due_day=18,
        applicable_for="composition",
    ),
    GSTReturn(
        id="gstr9",
        name="GSTR-9",
        description="Annual return",
        frequency="annually",
        due_day=31,
        applicable_for="regular",
    ),
    GSTReturn(
        id="gstr9c",
        name="GSTR-9C",
        description="Reconciliation statement and certificate",
        frequency="annually",
        due_day=31,
        applicable_for="regular",
        turnover_threshold=200_000_000,  # ₹2 Cr
    ),
]

_MONTH_NAMES = list(calendar.month_name)

# Months (1-based) in which quarterly returns fall due
_QUARTER_DUE_MONTHS = [1, 4, 7, 10]


def _today() -> date:
    return now_ist().date()


def _safe_date(year: int, month: int, day: int) -> date:
    """``date(year, month, day)`` with the day clamped to the month length."""
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def _add_months(d: date, months: int) -> date:
    index = d.month - 1 + months
    return _safe_date(d.year + index // 12, index % 12 + 1, d.day)


# ---------------------------------------------------------------------------
# Rule resolution
# ---------------------------------------------------------------------------
def get_applicable_returns(
    business_type: FilerType = "regular",
    annual_turnover: int = 0,
) -> list[GSTReturn]:
    """Rules that apply to a taxpayer of ``business_type`` with ``annual_turnover``.

    Exactly one of the monthly / quarterly GSTR-1 rules is kept for a regular
    taxpayer, chosen by the ₹1.5 Cr cutoff.
    """
    monthly_gstr1 = annual_turnover > GSTR1_MONTHLY_TURNOVER_CUTOFF
    applicable = []

    for rule in GST_RETURNS:
        if rule.applicable_for != "all" and rule.applicable_for != business_type:
            continue
        if rule.turnover_threshold and annual_turnover < rule.turnover_threshold:
            continue
        if rule.id == "gstr1" and not monthly_gstr1:
            continue
        if rule.id == "gstr1_quarterly" and monthly_gstr1:
            continue
        applicable.append(rule)

    return applicable


def get_next_due_date(rule: GSTReturn, reference: date) -> date:
    """Next due date of ``rule`` on or after ``reference``."""
    if rule.frequency == "monthly":
        # This month's due day still counts until it has passed
        if reference.day > rule.due_day:
            next_month = _add_months(reference.replace(day=1), 1)
            return _safe_date(next_month.year, next_month.month, rule.due_day)
        return _safe_date(reference.year, reference.month, rule.due_day)

    if rule.frequency == "quarterly":
        current_quarter = (reference.month - 1) // 3
        due_month = _QUARTER_DUE_MONTHS[(current_quarter + 1) % 4]
        year = reference.year
        if due_month <= reference.month:
            year += 1
        return _safe_date(year, due_month, rule.due_day)

    # Annual returns fall due in December
    year = reference.year
    if reference.month == 12 and reference.day > rule.due_day:
        year += 1
    return _safe_date(year, 12, rule.due_day)


def get_filing_period(rule: GSTReturn, due_date: date) -> str:
    """Human label of the period a due date settles."""
    if rule.frequency == "monthly":
        prev = _add_months(due_date.replace(day=1), -1)
        return f"{_MONTH_NAMES[prev.month]} {prev.year}"
    if rule.frequency == "quarterly":
        quarter = (due_date.month - 1) // 3 + 1
        return f"Q{quarter} {due_date.year}"
    return f"FY {due_date.year - 1}-{str(due_date.year)[-2:]}"


def days_until_due(due_date: date, today: date | None = None) -> int:
    return (due_date - (today or _today())).days


def is_overdue(due_date: date, today: date | None = None) -> bool:
    return days_until_due(due_date, today) < 0


# ---------------------------------------------------------------------------
# Calendar projection
# ---------------------------------------------------------------------------
def get_upcoming_filing_dates(
    business_type: FilerType = "regular",
    annual_turnover: int = 0,
    days_ahead: int = 90,
    today: date | None = None,
) -> list[FilingDate]:
    """Due dates within ``days_ahead`` days, plus up to 30 days overdue, soonest first."""
    today = today or _today()
    filing_dates: list[FilingDate] = []

    for rule in get_applicable_returns(business_type, annual_turnover):
        if rule.frequency == "annually":
            steps, months_per_step = 1, 12
        elif rule.frequency == "monthly":
            steps, months_per_step = 3, 1
        else:
            steps, months_per_step = 3, 3

        for i in range(steps):
            reference = _add_months(today, i * months_per_step)
            due = get_next_due_date(rule, reference)
            days = days_until_due(due, today)
            if not (-OVERDUE_LOOKBACK_DAYS <= days <= days_ahead):
                continue

            filing_dates.append(
                FilingDate(
                    id=f"{rule.id}_{due.isoformat()}",
                    return_type=rule.id,
                    return_name=rule.name,
                    due_date=due,
                    period=get_filing_period(rule, due),
                    is_overdue=days < 0,
                    days_until_due=days,
                )
            )

    filing_dates.sort(key=lambda f: f.due_date)
    logger.debug(
        "Resolved %d filing dates for %s taxpayer (turnover=%s, window=%d days)",
        len(filing_dates), business_type, annual_turnover, days_ahead,
    )
    return filing_dates
