from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Frequency = Literal["monthly", "quarterly", "annually"]
FilerType = Literal["regular", "composition", "nil"]
Applicability = Literal["all", "regular", "composition", "nil"]


class GSTReturn(BaseModel):
    """One row of the static return-type rule table."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    frequency: Frequency
    due_day: int
    applicable_for: Applicability
    turnover_threshold: Optional[int] = None


class FilingDate(BaseModel):
    """A projected due date; computed on every query, never stored."""

    model_config = ConfigDict(frozen=True)

    id: str
    return_type: str
    return_name: str
    due_date: date
    period: str
    is_overdue: bool
    days_until_due: int


class ReminderSettings(BaseModel):
    business_type: FilerType = "regular"
    annual_turnover: int = 0
    reminder_days: list[int] = Field(default_factory=lambda: [7, 3, 1])
    notifications_enabled: bool = True
    email_reminders: bool = False
    email_address: Optional[str] = None


class FilingReminder(BaseModel):
    """A user-enabled reminder for one ``FilingDate``."""

    id: str
    return_type: str
    return_name: str
    due_date: date
    period: str
    reminder_dates: list[datetime] = Field(default_factory=list)
    is_completed: bool = False
    completed_date: Optional[datetime] = None
    notification_ids: list[str] = Field(default_factory=list)


class FilingHistory(BaseModel):
    id: str
    return_type: str
    return_name: str
    period: str
    due_date: date
    filed_date: datetime
    status: Literal["filed", "late", "pending"]
