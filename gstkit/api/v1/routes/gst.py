# gstkit/api/v1/routes/gst.py
"""
GST calculator endpoints: add or remove GST and split it into CGST + SGST.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from gstkit.config.settings import settings
from gstkit.core.errors import StorageError
from gstkit.domain.services.currency import CURRENCIES
from gstkit.domain.services.input_parsing import validate_tax_input
from gstkit.domain.services.share_text import tax_share_message
from gstkit.domain.services.tax_engine import GST_RATES, build_tax_calculation
from gstkit.infrastructure.repositories.history_repository import HistoryRepository

from gstkit.api.v1.deps import get_history_repo, require_parsed
from gstkit.api.v1.envelope import ok
from gstkit.api.v1.schemas.gst import TaxCalculateRequest

logger = logging.getLogger("api.v1.gst")

router = APIRouter(prefix="/gst", tags=["GST"])


@router.post("/calculate", response_model=dict)
async def calculate_gst(
    body: TaxCalculateRequest,
    history: HistoryRepository = Depends(get_history_repo),
):
    """
    Compute net, GST, CGST, SGST and gross for one amount.

    The result is appended to the history unless ``save`` is false or the
    user turned history off. A history write failure is logged and reported
    as ``saved: false``; the calculation itself still succeeds.
    """
    raw_rate = body.gst_rate if body.gst_rate is not None else settings.DEFAULT_GST_RATE
    parsed, failures = validate_tax_input(body.amount, raw_rate)
    if parsed is None:
        require_parsed(*failures)

    calc = build_tax_calculation(
        parsed.amount,
        parsed.gst_rate,
        body.is_inclusive,
        description=body.description,
        currency=body.currency or settings.DEFAULT_CURRENCY,
    )

    saved = False
    if body.save:
        try:
            saved = await history.save_calculation(calc)
        except StorageError:
            logger.exception("Could not save GST calculation to history")

    return ok(data={
        "calculation": calc,
        "saved": saved,
        "share_text": tax_share_message(calc),
    })


@router.get("/rates", response_model=dict)
async def list_rates():
    return ok(data={"rates": list(GST_RATES), "default_rate": settings.DEFAULT_GST_RATE})


@router.get("/currencies", response_model=dict)
async def list_currencies():
    return ok(data=CURRENCIES)
