# gstkit/api/v1/routes/margin.py
"""
Profit-margin calculators: forward pricing, actual margin, break-even,
scenario comparison, volume tiers and pricing strategy lookup.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from gstkit.config.settings import settings
from gstkit.core.errors import InputParseError, StorageError
from gstkit.domain.models.common import BusinessType
from gstkit.domain.services.input_parsing import parse_amount, parse_margin, parse_number, parse_rate
from gstkit.domain.services.margin_engine import (
    PRICING_STRATEGIES,
    calculate_actual_margin,
    calculate_break_even_price,
    calculate_profit_margin,
    calculate_volume_based_pricing,
    compare_margin_scenarios,
    get_pricing_strategy_recommendation,
)
from gstkit.domain.services.share_text import margin_share_message
from gstkit.infrastructure.repositories.margin_repository import MarginRepository

from gstkit.api.v1.deps import get_margin_repo, require_parsed
from gstkit.api.v1.envelope import ok
from gstkit.api.v1.schemas.margin import (
    ActualMarginRequest,
    BreakEvenRequest,
    CompareRequest,
    MarginCalculateRequest,
    VolumePricingRequest,
)

logger = logging.getLogger("api.v1.margin")

router = APIRouter(prefix="/margin", tags=["Profit Margin"])


def _rate(raw):
    return parse_rate(raw if raw is not None else settings.DEFAULT_GST_RATE)


@router.post("/calculate", response_model=dict)
async def calculate_margin(
    body: MarginCalculateRequest,
    repo: MarginRepository = Depends(get_margin_repo),
):
    """
    Price an item from its cost so the pre-tax profit equals the desired margin.

    Saved to the margin history (and, with auto-save on, to the GST history)
    unless ``save`` is false. Storage failures do not fail the response.
    """
    cost, margin, rate = require_parsed(
        parse_amount(body.cost_price, "cost_price"),
        parse_margin(body.margin_percent, "margin_percent"),
        _rate(body.gst_rate),
    )
    calc = calculate_profit_margin(cost, margin, rate, body.business_type, description=body.description)

    saved = False
    if body.save:
        try:
            await repo.save_calculation(calc)
            saved = True
        except StorageError:
            logger.exception("Could not save margin calculation %s", calc.id)

    return ok(data={
        "calculation": calc,
        "saved": saved,
        "strategy": get_pricing_strategy_recommendation(margin, body.business_type),
        "share_text": margin_share_message(calc),
    })


@router.post("/actual", response_model=dict)
async def actual_margin(body: ActualMarginRequest):
    cost, selling, rate = require_parsed(
        parse_amount(body.cost_price, "cost_price"),
        parse_amount(body.selling_price, "selling_price"),
        _rate(body.gst_rate),
    )
    return ok(data=calculate_actual_margin(cost, selling, rate, body.includes_gst))


@router.post("/break-even", response_model=dict)
async def break_even(body: BreakEvenRequest):
    cost, rate = require_parsed(parse_amount(body.cost_price, "cost_price"), _rate(body.gst_rate))
    return ok(data=calculate_break_even_price(cost, rate))


@router.post("/compare", response_model=dict)
async def compare_scenarios(body: CompareRequest):
    if not body.margin_percentages:
        raise InputParseError([{"field": "margin_percentages", "message": "At least one margin percentage is required"}])
    cost, rate, *margins = require_parsed(
        parse_amount(body.cost_price, "cost_price"),
        _rate(body.gst_rate),
        *(parse_margin(m, f"margin_percentages[{i}]") for i, m in enumerate(body.margin_percentages)),
    )
    return ok(data=compare_margin_scenarios(cost, margins, rate, body.business_type))


@router.post("/volume", response_model=dict)
async def volume_pricing(body: VolumePricingRequest):
    if any(v < 1 for v in body.volumes):
        raise InputParseError([{"field": "volumes", "message": "volumes must be at least 1"}])
    cost, margin, rate = require_parsed(
        parse_amount(body.cost_price, "cost_price"),
        parse_margin(body.margin_percent, "margin_percent"),
        _rate(body.gst_rate),
    )
    return ok(data=calculate_volume_based_pricing(cost, margin, rate, body.volumes))


@router.get("/strategy", response_model=dict)
async def pricing_strategy(margin_percent: str, business_type: BusinessType = "B2C"):
    """Pricing strategy whose recommended band contains the margin (null when none does)."""
    (margin,) = require_parsed(parse_number(margin_percent, "margin_percent"))
    return ok(data=get_pricing_strategy_recommendation(margin, business_type))


@router.get("/strategies", response_model=dict)
async def list_strategies():
    return ok(data=PRICING_STRATEGIES)
