# gstkit/domain/services/history_export.py
"""
CSV / JSON export of the stored calculation histories.

Column order is fixed; spreadsheets built on earlier exports depend on it.
"""

from __future__ import annotations

import csv
import io
import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Literal

from gstkit.domain.models.margin import MarginCalculation
from gstkit.domain.models.tax import TaxCalculation

ExportFormat = Literal["csv", "json"]

TAX_HISTORY_COLUMNS = [
    "Date",
    "Description",
    "Amount",
    "GST Rate",
    "Inclusive?",
    "Net",
    "GST",
    "Gross",
]

MARGIN_HISTORY_COLUMNS = [
    "Date",
    "Description",
    "Business Type",
    "Cost Price",
    "Desired Margin %",
    "GST Rate %",
    "Pre-tax Price",
    "GST Amount",
    "Final Price",
    "Profit",
    "Effective Margin %",
]

_CENT = Decimal("0.01")


def _amt(val: Decimal) -> str:
    return f"{val.quantize(_CENT, rounding=ROUND_HALF_UP):.2f}"


def _to_csv(header: list[str], rows: list[list[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buf.getvalue()


def _to_json(records) -> str:
    return json.dumps([r.model_dump(mode="json") for r in records], indent=2, ensure_ascii=False)


def export_tax_history(calculations: list[TaxCalculation], fmt: ExportFormat = "json") -> str:
    if fmt == "json":
        return _to_json(calculations)
    if fmt != "csv":
        raise ValueError(f"Unsupported export format: {fmt}")

    rows = [
        [
            c.timestamp.strftime("%d/%m/%Y"),
            c.description,
            _amt(c.amount),
            _amt(c.gst_rate),
            "Yes" if c.is_inclusive else "No",
            _amt(c.net_amount),
            _amt(c.gst_amount),
            _amt(c.gross_amount),
        ]
        for c in calculations
    ]
    return _to_csv(TAX_HISTORY_COLUMNS, rows)


def export_margin_history(calculations: list[MarginCalculation], fmt: ExportFormat = "json") -> str:
    if fmt == "json":
        return _to_json(calculations)
    if fmt != "csv":
        raise ValueError(f"Unsupported export format: {fmt}")

    rows = [
        [
            c.timestamp.strftime("%d/%m/%Y"),
            c.description or "",
            c.business_type,
            _amt(c.cost_price),
            _amt(c.desired_margin_percent),
            _amt(c.gst_rate),
            _amt(c.selling_price_before_gst),
            _amt(c.gst_amount),
            _amt(c.final_selling_price),
            _amt(c.profit_amount),
            _amt(c.effective_margin_percent),
        ]
        for c in calculations
    ]
    return _to_csv(MARGIN_HISTORY_COLUMNS, rows)
