from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from gstkit.domain.models.common import BusinessType, Money


class MarginCalculation(BaseModel):
    """Selling price derived from a cost price and a desired pre-tax margin.

    ``desired_margin_percent`` is measured against the pre-tax price while
    ``effective_margin_percent`` is measured against the GST-inclusive
    ``final_selling_price``; the two generally differ.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    cost_price: Money
    desired_margin_percent: Money
    gst_rate: Money
    business_type: BusinessType = "B2C"

    selling_price_before_gst: Money
    gst_amount: Money
    final_selling_price: Money
    profit_amount: Money
    effective_margin_percent: Money

    timestamp: datetime
    description: Optional[str] = None


class ActualMargin(BaseModel):
    """Margin recovered from an observed selling price (pre-tax denominator)."""

    model_config = ConfigDict(frozen=True)

    actual_margin_percent: Money
    profit_amount: Money
    selling_price_before_gst: Money
    gst_amount: Money


class BreakEven(BaseModel):
    model_config = ConfigDict(frozen=True)

    break_even_price_before_gst: Money
    gst_amount: Money
    break_even_price_with_gst: Money


class MarginComparison(BaseModel):
    scenarios: list[MarginCalculation] = Field(default_factory=list)
    best_scenario: Optional[MarginCalculation] = None
    recommendations: list[str] = Field(default_factory=list)


class MarginBand(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: Money
    max: Money


class PricingStrategy(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["cost_plus", "competitive", "value_based", "penetration", "skimming"]
    name: str
    description: str
    recommended_margin: MarginBand


class VolumeTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    volume: int
    adjusted_margin: Money
    unit_price: Money
    total_revenue: Money
    total_profit: Money


class MarginPreset(BaseModel):
    """Named, reusable margin template."""

    id: str
    name: str
    margin_percent: Money
    business_type: BusinessType
    description: Optional[str] = None
    is_default: bool = False


class MarginSettings(BaseModel):
    default_business_type: BusinessType = "B2C"
    default_gst_rate: Money = Field(default=18)
    show_breakdown_by_default: bool = True
    auto_save_calculations: bool = True
    preferred_currency: str = "₹"
    volume_discount_enabled: bool = False


class MarginBucket(BaseModel):
    range: str
    count: int


class MarginStatistics(BaseModel):
    total_calculations: int = 0
    average_margin: Money = Field(default=0)
    most_used_business_type: BusinessType = "B2C"
    average_cost_price: Money = Field(default=0)
    average_selling_price: Money = Field(default=0)
    margin_distribution: list[MarginBucket] = Field(default_factory=list)
