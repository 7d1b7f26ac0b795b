# gstkit/api/v1/routes/history.py
"""GST calculation history and calculator preferences."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends

from gstkit.domain.models.tax import Preferences
from gstkit.domain.services.history_export import export_tax_history
from gstkit.infrastructure.repositories.history_repository import HistoryRepository

from gstkit.api.v1.deps import get_history_repo
from gstkit.api.v1.envelope import PaginationParams, ok, paginated

router = APIRouter(tags=["History"])


@router.get("/history", response_model=dict)
async def list_history(
    page: PaginationParams = Depends(),
    history: HistoryRepository = Depends(get_history_repo),
):
    """Saved calculations, newest first."""
    items = list(reversed(await history.get_history()))
    return paginated(items, limit=page.limit, offset=page.offset)


@router.delete("/history", response_model=dict)
async def clear_history(history: HistoryRepository = Depends(get_history_repo)):
    await history.clear_history()
    return ok(message="History cleared")


@router.get("/history/export", response_model=dict)
async def export_history(
    format: Literal["csv", "json"] = "json",
    history: HistoryRepository = Depends(get_history_repo),
):
    content = export_tax_history(await history.get_history(), format)
    return ok(data={"format": format, "content": content})


@router.get("/preferences", response_model=dict)
async def get_preferences(history: HistoryRepository = Depends(get_history_repo)):
    return ok(data=await history.get_preferences() or Preferences())


@router.put("/preferences", response_model=dict)
async def save_preferences(
    body: Preferences,
    history: HistoryRepository = Depends(get_history_repo),
):
    await history.save_preferences(body)
    return ok(data=body, message="Preferences saved")
