# gstkit/domain/services/tax_engine.py
"""
GST inclusive / exclusive conversion and the CGST + SGST split.

Intra-state supplies split the GST equally between the Centre (CGST) and
the State (SGST). The functions here are pure; input validation lives in
``input_parsing``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from gstkit.domain.models.common import now_ist, to_decimal
from gstkit.domain.models.tax import TaxBreakdown, TaxCalculation

# GST slabs offered in the rate picker
GST_RATES: tuple[int, ...] = (5, 12, 18, 28, 40)

_HUNDRED = Decimal("100")
_TWO = Decimal("2")


def compute_tax(amount, gst_rate, is_inclusive: bool) -> TaxBreakdown:
    """Split ``amount`` into net, GST and gross at ``gst_rate`` percent.

    If ``is_inclusive`` the amount already contains GST and the net value is
    backed out of it; otherwise GST is added on top.
    """
    amount = to_decimal(amount)
    rate = to_decimal(gst_rate) / _HUNDRED

    if is_inclusive:
        gross = amount
        net = amount / (1 + rate)
        gst = gross - net
    else:
        net = amount
        gst = amount * rate
        gross = net + gst

    half = gst / _TWO
    return TaxBreakdown(
        net_amount=net,
        gst_amount=gst,
        cgst_amount=half,
        sgst_amount=half,
        gross_amount=gross,
    )


def build_tax_calculation(
    amount,
    gst_rate,
    is_inclusive: bool,
    description: str | None = None,
    currency: str = "INR",
    now: datetime | None = None,
) -> TaxCalculation:
    """Run ``compute_tax`` and wrap the result in a history record."""
    breakdown = compute_tax(amount, gst_rate, is_inclusive)
    return TaxCalculation(
        timestamp=now or now_ist(),
        description=description or "Unnamed Item",
        amount=to_decimal(amount),
        is_inclusive=is_inclusive,
        gst_rate=to_decimal(gst_rate),
        net_amount=breakdown.net_amount,
        gst_amount=breakdown.gst_amount,
        cgst_amount=breakdown.cgst_amount,
        sgst_amount=breakdown.sgst_amount,
        gross_amount=breakdown.gross_amount,
        currency=currency,
    )
