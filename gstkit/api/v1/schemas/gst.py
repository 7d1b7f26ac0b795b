# gstkit/api/v1/schemas/gst.py
"""Request schemas for the GST calculator endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field

# Raw form input: numbers or strings such as "₹1,18,000" / "18%"
RawNumber = str | float | int


class TaxCalculateRequest(BaseModel):
    amount: RawNumber | None = Field(default=None, description="Amount as typed by the user")
    gst_rate: RawNumber | None = Field(default=None, description="GST rate in percent (defaults to the configured rate)")
    is_inclusive: bool = Field(default=False, description="True when the amount already includes GST")
    description: str | None = None
    currency: str | None = Field(default=None, description="Currency code (defaults to the configured currency)")
    save: bool = Field(default=True, description="Append the result to the calculation history")
