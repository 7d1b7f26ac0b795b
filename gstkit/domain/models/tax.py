from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from gstkit.domain.models.common import Money

# Bumped whenever the persisted history record shape changes.
HISTORY_SCHEMA_VERSION = 2


class TaxBreakdown(BaseModel):
    """Net / GST / gross split of a single transaction."""

    model_config = ConfigDict(frozen=True)

    net_amount: Money
    gst_amount: Money
    cgst_amount: Money
    sgst_amount: Money
    gross_amount: Money


class TaxCalculation(BaseModel):
    """One completed GST computation, as shown to the user and kept in history."""

    model_config = ConfigDict(frozen=True)

    schema_version: int = HISTORY_SCHEMA_VERSION
    timestamp: datetime
    description: str = "Unnamed Item"
    amount: Money
    is_inclusive: bool
    gst_rate: Money
    net_amount: Money
    gst_amount: Money
    cgst_amount: Money
    sgst_amount: Money
    gross_amount: Money
    currency: str = "INR"


class Preferences(BaseModel):
    """Calculator preferences persisted next to the history."""

    default_gst_rate: Money = Field(default=18)
    save_history: bool = True
    default_calculation_mode: Literal["inclusive", "exclusive"] = "exclusive"
    default_currency: str = "INR"
    dark_mode: bool = False
