# gstkit/domain/services/margin_engine.py
"""
Profit-margin pricing engine.

Two margin definitions coexist and must not be conflated:

  - desired / actual margin: profit as a share of the *pre-tax* selling price
    (what a trader quotes as "my margin");
  - effective margin: profit as a share of the *GST-inclusive* final price
    (what the customer-facing price actually leaves). Scenario ranking and
    recommendations use this one.

Every function is a pure, single-shot computation.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from gstkit.core.errors import CalculationInputError
from gstkit.domain.models.common import BusinessType, now_ist, to_decimal
from gstkit.domain.models.margin import (
    ActualMargin,
    BreakEven,
    MarginBand,
    MarginBucket,
    MarginCalculation,
    MarginComparison,
    MarginPreset,
    MarginStatistics,
    PricingStrategy,
    VolumeTier,
)

_HUNDRED = Decimal("100")

# Scenarios above this effective margin are never picked as "best"
_BEST_SCENARIO_CEILING = Decimal("50")

PRICING_STRATEGIES: list[PricingStrategy] = [
    PricingStrategy(
        type="cost_plus",
        name="Cost-Plus Pricing",
        description="Add a fixed margin to cost price",
        recommended_margin=MarginBand(min=20, max=50),
    ),
    PricingStrategy(
        type="competitive",
        name="Competitive Pricing",
        description="Price based on market competition",
        recommended_margin=MarginBand(min=15, max=35),
    ),
    PricingStrategy(
        type="value_based",
        name="Value-Based Pricing",
        description="Price based on perceived customer value",
        recommended_margin=MarginBand(min=30, max=80),
    ),
    PricingStrategy(
        type="penetration",
        name="Market Penetration",
        description="Lower margins to gain market share",
        recommended_margin=MarginBand(min=10, max=25),
    ),
    PricingStrategy(
        type="skimming",
        name="Price Skimming",
        description="High margins for premium positioning",
        recommended_margin=MarginBand(min=40, max=100),
    ),
]

DEFAULT_MARGIN_PRESETS: list[MarginPreset] = [
    MarginPreset(
        id="retail_standard",
        name="Retail Standard",
        margin_percent=25,
        business_type="B2C",
        description="Standard retail markup",
        is_default=True,
    ),
    MarginPreset(
        id="wholesale_standard",
        name="Wholesale Standard",
        margin_percent=15,
        business_type="B2B",
        description="Standard wholesale markup",
        is_default=True,
    ),
    MarginPreset(
        id="premium_retail",
        name="Premium Retail",
        margin_percent=40,
        business_type="B2C",
        description="Premium product markup",
    ),
    MarginPreset(
        id="bulk_wholesale",
        name="Bulk Wholesale",
        margin_percent=10,
        business_type="B2B",
        description="High volume, low margin",
    ),
    MarginPreset(
        id="luxury_goods",
        name="Luxury Goods",
        margin_percent=60,
        business_type="B2C",
        description="Luxury product positioning",
    ),
]

# (minimum volume, margin multiplier), checked from the largest threshold down
VOLUME_DISCOUNT_STEPS: list[tuple[int, Decimal]] = [
    (1000, Decimal("0.8")),
    (500, Decimal("0.85")),
    (100, Decimal("0.9")),
    (50, Decimal("0.95")),
]

# (label, lower bound inclusive, upper bound exclusive)
MARGIN_DISTRIBUTION_RANGES: list[tuple[str, Decimal, Decimal | None]] = [
    ("0-10%", Decimal("0"), Decimal("10")),
    ("10-20%", Decimal("10"), Decimal("20")),
    ("20-30%", Decimal("20"), Decimal("30")),
    ("30-40%", Decimal("30"), Decimal("40")),
    ("40%+", Decimal("40"), None),
]

RECOMMEND_RAISE_MARGINS = "Consider increasing margins - current levels may not be sustainable"
RECOMMEND_HIGH_MARGINS = "High margins may affect competitiveness - consider market positioning"
RECOMMEND_HEALTHY = "Margin levels appear healthy for sustainable business"
RECOMMEND_B2B_HIGH = "B2B margins seem high - ensure value proposition justifies pricing"
RECOMMEND_B2C_LOW = "B2C margins may be too low - consider value-added services"


def _new_calculation_id() -> str:
    return f"margin_{uuid.uuid4().hex[:12]}"


def _require_cost(cost_price: Decimal) -> None:
    if cost_price <= 0:
        raise CalculationInputError("Cost price must be greater than 0", field="cost_price")


def _require_rate(gst_rate: Decimal) -> None:
    if gst_rate < 0:
        raise CalculationInputError("GST rate cannot be negative", field="gst_rate")


# ---------------------------------------------------------------------------
# Forward and inverse pricing
# ---------------------------------------------------------------------------
def calculate_profit_margin(
    cost_price,
    desired_margin_percent,
    gst_rate,
    business_type: BusinessType = "B2C",
    description: str | None = None,
    now: datetime | None = None,
) -> MarginCalculation:
    """Price an item so that profit is ``desired_margin_percent`` of the pre-tax price.

    pre_tax = cost / (1 - margin/100), GST is added on top of pre_tax.

    Raises:
        CalculationInputError: cost <= 0, margin < 0, rate < 0, or margin >= 100
            (the price would be infinite or negative).
    """
    cost = to_decimal(cost_price)
    margin = to_decimal(desired_margin_percent)
    rate = to_decimal(gst_rate)

    _require_cost(cost)
    if margin < 0:
        raise CalculationInputError("Margin percentage cannot be negative", field="desired_margin_percent")
    if margin >= _HUNDRED:
        raise CalculationInputError("Margin percentage must be less than 100", field="desired_margin_percent")
    _require_rate(rate)

    selling_price_before_gst = cost / (1 - margin / _HUNDRED)
    gst_amount = selling_price_before_gst * rate / _HUNDRED
    final_selling_price = selling_price_before_gst + gst_amount
    profit_amount = selling_price_before_gst - cost
    effective_margin_percent = profit_amount / final_selling_price * _HUNDRED

    return MarginCalculation(
        id=_new_calculation_id(),
        cost_price=cost,
        desired_margin_percent=margin,
        gst_rate=rate,
        business_type=business_type,
        selling_price_before_gst=selling_price_before_gst,
        gst_amount=gst_amount,
        final_selling_price=final_selling_price,
        profit_amount=profit_amount,
        effective_margin_percent=effective_margin_percent,
        timestamp=now or now_ist(),
        description=description,
    )


def calculate_actual_margin(
    cost_price,
    selling_price,
    gst_rate,
    includes_gst: bool = True,
) -> ActualMargin:
    """Recover the pre-tax margin from an observed selling price."""
    cost = to_decimal(cost_price)
    selling = to_decimal(selling_price)
    rate = to_decimal(gst_rate)

    _require_cost(cost)
    if selling <= 0:
        raise CalculationInputError("Selling price must be greater than 0", field="selling_price")
    _require_rate(rate)

    if includes_gst:
        selling_price_before_gst = selling / (1 + rate / _HUNDRED)
        gst_amount = selling - selling_price_before_gst
    else:
        selling_price_before_gst = selling
        gst_amount = selling * rate / _HUNDRED

    profit_amount = selling_price_before_gst - cost
    return ActualMargin(
        actual_margin_percent=profit_amount / selling_price_before_gst * _HUNDRED,
        profit_amount=profit_amount,
        selling_price_before_gst=selling_price_before_gst,
        gst_amount=gst_amount,
    )


def calculate_break_even_price(cost_price, gst_rate) -> BreakEven:
    """Lowest price that recovers cost: zero margin plus GST."""
    cost = to_decimal(cost_price)
    rate = to_decimal(gst_rate)
    _require_cost(cost)
    _require_rate(rate)

    gst_amount = cost * rate / _HUNDRED
    return BreakEven(
        break_even_price_before_gst=cost,
        gst_amount=gst_amount,
        break_even_price_with_gst=cost + gst_amount,
    )


# ---------------------------------------------------------------------------
# Scenario comparison and strategy
# ---------------------------------------------------------------------------
def _pick_best(scenarios: list[MarginCalculation]) -> MarginCalculation:
    # Left fold: only a strictly higher margin within the ceiling replaces the
    # incumbent, so ties and all-above-ceiling inputs keep the first scenario.
    best = scenarios[0]
    for current in scenarios[1:]:
        if (
            current.effective_margin_percent > best.effective_margin_percent
            and current.effective_margin_percent <= _BEST_SCENARIO_CEILING
        ):
            best = current
    return best


def _recommendations(average_margin: Decimal, business_type: BusinessType) -> list[str]:
    recommendations: list[str] = []

    if average_margin < 15:
        recommendations.append(RECOMMEND_RAISE_MARGINS)
    elif average_margin > 50:
        recommendations.append(RECOMMEND_HIGH_MARGINS)
    else:
        recommendations.append(RECOMMEND_HEALTHY)

    if business_type == "B2B" and average_margin > 30:
        recommendations.append(RECOMMEND_B2B_HIGH)
    if business_type == "B2C" and average_margin < 20:
        recommendations.append(RECOMMEND_B2C_LOW)

    return recommendations


def compare_margin_scenarios(
    cost_price,
    margin_percentages: Iterable,
    gst_rate,
    business_type: BusinessType = "B2C",
) -> MarginComparison:
    """Price the same item at several margins and rank the outcomes."""
    margins = list(margin_percentages)
    if not margins:
        raise CalculationInputError("At least one margin percentage is required", field="margin_percentages")

    scenarios = [
        calculate_profit_margin(cost_price, margin, gst_rate, business_type)
        for margin in margins
    ]
    average = sum((s.effective_margin_percent for s in scenarios), Decimal("0")) / len(scenarios)

    return MarginComparison(
        scenarios=scenarios,
        best_scenario=_pick_best(scenarios),
        recommendations=_recommendations(average, business_type),
    )


def get_pricing_strategy_recommendation(
    margin_percent,
    business_type: BusinessType = "B2C",
) -> PricingStrategy | None:
    """First strategy whose inclusive band contains ``margin_percent``.

    Bands overlap, so table order decides. ``business_type`` is accepted for
    call-site symmetry; the table is shared by B2B and B2C.
    """
    margin = to_decimal(margin_percent)
    for strategy in PRICING_STRATEGIES:
        band = strategy.recommended_margin
        if band.min <= margin <= band.max:
            return strategy
    return None


def volume_adjusted_margin(base_margin_percent, volume: int) -> Decimal:
    margin = to_decimal(base_margin_percent)
    for threshold, multiplier in VOLUME_DISCOUNT_STEPS:
        if volume >= threshold:
            return margin * multiplier
    return margin


def calculate_volume_based_pricing(
    cost_price,
    base_margin_percent,
    gst_rate,
    volumes: Iterable[int],
) -> list[VolumeTier]:
    """Unit price and totals per order volume, with bigger orders earning a smaller margin."""
    tiers: list[VolumeTier] = []
    for volume in volumes:
        adjusted = volume_adjusted_margin(base_margin_percent, volume)
        calc = calculate_profit_margin(cost_price, adjusted, gst_rate)
        tiers.append(
            VolumeTier(
                volume=volume,
                adjusted_margin=adjusted,
                unit_price=calc.final_selling_price,
                total_revenue=calc.final_selling_price * volume,
                total_profit=calc.profit_amount * volume,
            )
        )
    return tiers


# ---------------------------------------------------------------------------
# Statistics over stored calculations
# ---------------------------------------------------------------------------
def margin_statistics(calculations: list[MarginCalculation]) -> MarginStatistics:
    if not calculations:
        return MarginStatistics()

    total = len(calculations)
    zero = Decimal("0")

    counts = {"B2B": 0, "B2C": 0}
    for calc in calculations:
        counts[calc.business_type] += 1

    distribution = []
    for label, low, high in MARGIN_DISTRIBUTION_RANGES:
        count = sum(
            1 for c in calculations
            if c.effective_margin_percent >= low
            and (high is None or c.effective_margin_percent < high)
        )
        distribution.append(MarginBucket(range=label, count=count))

    return MarginStatistics(
        total_calculations=total,
        average_margin=sum((c.effective_margin_percent for c in calculations), zero) / total,
        most_used_business_type="B2B" if counts["B2B"] > counts["B2C"] else "B2C",
        average_cost_price=sum((c.cost_price for c in calculations), zero) / total,
        average_selling_price=sum((c.final_selling_price for c in calculations), zero) / total,
        margin_distribution=distribution,
    )
