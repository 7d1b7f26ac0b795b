# gstkit/api/v1/routes/margin_history.py
"""Saved margin calculations, statistics, presets and margin settings."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends

from gstkit.domain.models.common import BusinessType
from gstkit.domain.models.margin import MarginPreset, MarginSettings
from gstkit.domain.services.input_parsing import parse_margin
from gstkit.infrastructure.repositories.margin_repository import (
    MarginRepository,
    filter_by_business_type,
    filter_by_date_range,
)

from gstkit.api.v1.deps import get_margin_repo, require_parsed
from gstkit.api.v1.envelope import PaginationParams, ok, paginated
from gstkit.api.v1.schemas.margin import PresetCreateRequest

router = APIRouter(prefix="/margin", tags=["Profit Margin"])


@router.get("/history", response_model=dict)
async def list_margin_history(
    q: Optional[str] = None,
    business_type: Optional[BusinessType] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    page: PaginationParams = Depends(),
    repo: MarginRepository = Depends(get_margin_repo),
):
    """Saved margin calculations, newest first, optionally filtered."""
    if q:
        items = await repo.search(q)
    else:
        items = await repo.get_calculations()
    if business_type:
        items = filter_by_business_type(items, business_type)
    if start or end:
        items = filter_by_date_range(items, start, end)
    return paginated(items, limit=page.limit, offset=page.offset)


@router.delete("/history/{calculation_id}", response_model=dict)
async def delete_margin_calculation(calculation_id: str, repo: MarginRepository = Depends(get_margin_repo)):
    await repo.delete_calculation(calculation_id)
    return ok(message="Calculation deleted")


@router.delete("/history", response_model=dict)
async def clear_margin_history(repo: MarginRepository = Depends(get_margin_repo)):
    await repo.clear_calculations()
    return ok(message="Margin history cleared")


@router.get("/statistics", response_model=dict)
async def margin_statistics(repo: MarginRepository = Depends(get_margin_repo)):
    return ok(data=await repo.statistics())


@router.get("/export", response_model=dict)
async def export_margin_history(
    format: Literal["csv", "json"] = "json",
    repo: MarginRepository = Depends(get_margin_repo),
):
    return ok(data={"format": format, "content": await repo.export(format)})


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

@router.get("/presets", response_model=dict)
async def list_presets(
    defaults_only: bool = False,
    business_type: Optional[BusinessType] = None,
    repo: MarginRepository = Depends(get_margin_repo),
):
    if defaults_only:
        return ok(data=await repo.get_default_presets(business_type))
    presets = await repo.get_presets()
    if business_type:
        presets = [p for p in presets if p.business_type == business_type]
    return ok(data=presets)


@router.post("/presets", response_model=dict)
async def add_preset(body: PresetCreateRequest, repo: MarginRepository = Depends(get_margin_repo)):
    """Add a custom preset; a preset with the same name is replaced."""
    (margin,) = require_parsed(parse_margin(body.margin_percent, "margin_percent"))
    preset = MarginPreset(
        id=f"custom_{uuid.uuid4().hex[:12]}",
        name=body.name.strip(),
        margin_percent=margin,
        business_type=body.business_type,
        description=body.description,
    )
    await repo.add_preset(preset)
    return ok(data=preset, message="Preset saved")


@router.delete("/presets/{preset_id}", response_model=dict)
async def delete_preset(preset_id: str, repo: MarginRepository = Depends(get_margin_repo)):
    await repo.delete_preset(preset_id)
    return ok(message="Preset deleted")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@router.get("/settings", response_model=dict)
async def get_margin_settings(repo: MarginRepository = Depends(get_margin_repo)):
    return ok(data=await repo.get_settings())


@router.put("/settings", response_model=dict)
async def save_margin_settings(body: MarginSettings, repo: MarginRepository = Depends(get_margin_repo)):
    await repo.save_settings(body)
    return ok(data=body, message="Settings saved")
