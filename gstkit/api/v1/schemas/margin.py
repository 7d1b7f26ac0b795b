# gstkit/api/v1/schemas/margin.py
"""Request schemas for the profit-margin endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from gstkit.api.v1.schemas.gst import RawNumber
from gstkit.domain.models.common import BusinessType


class MarginCalculateRequest(BaseModel):
    cost_price: RawNumber | None = None
    margin_percent: RawNumber | None = None
    gst_rate: RawNumber | None = None
    business_type: BusinessType = "B2C"
    description: Optional[str] = None
    save: bool = True


class ActualMarginRequest(BaseModel):
    cost_price: RawNumber | None = None
    selling_price: RawNumber | None = None
    gst_rate: RawNumber | None = None
    includes_gst: bool = True


class BreakEvenRequest(BaseModel):
    cost_price: RawNumber | None = None
    gst_rate: RawNumber | None = None


class CompareRequest(BaseModel):
    cost_price: RawNumber | None = None
    margin_percentages: list[RawNumber] = Field(default_factory=list)
    gst_rate: RawNumber | None = None
    business_type: BusinessType = "B2C"


class VolumePricingRequest(BaseModel):
    cost_price: RawNumber | None = None
    margin_percent: RawNumber | None = None
    gst_rate: RawNumber | None = None
    volumes: list[int] = Field(default_factory=lambda: [1, 10, 50, 100, 500])


class PresetCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    margin_percent: RawNumber
    business_type: BusinessType = "B2C"
    description: Optional[str] = None
