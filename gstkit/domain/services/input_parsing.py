# gstkit/domain/services/input_parsing.py
"""
Parse-and-validate boundary for raw form input.

Everything typed by a user passes through here exactly once; the engines
downstream only ever see Decimals that already satisfy their preconditions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation


@dataclass(frozen=True)
class ParseResult:
    """Tagged result: ``ok`` with a ``value``, or not ``ok`` with an ``error``."""

    ok: bool
    value: Decimal | None = None
    error: str | None = None
    field: str | None = None

    @classmethod
    def success(cls, value: Decimal, field: str | None = None) -> "ParseResult":
        return cls(ok=True, value=value, field=field)

    @classmethod
    def failure(cls, error: str, field: str | None = None) -> "ParseResult":
        return cls(ok=False, error=error, field=field)


@dataclass(frozen=True)
class TaxInput:
    amount: Decimal
    gst_rate: Decimal


def _clean(raw: str) -> str:
    s = raw.replace("₹", "").replace("Rs.", "").replace("Rs", "").replace("rs", "")
    s = s.replace(" ", "").replace(",", "").replace("%", "")
    # Accountant-style negatives like (-)12.50
    return re.sub(r"\([-−]\)", "-", s)


def parse_number(raw: str | int | float | Decimal | None, field: str = "value") -> ParseResult:
    """Parse ``raw`` into a finite Decimal."""
    if raw is None:
        return ParseResult.failure(f"{field} is required", field)
    if isinstance(raw, bool):
        return ParseResult.failure(f"{field} must be a number", field)

    text = raw if isinstance(raw, str) else str(raw)
    text = _clean(text)
    if not text:
        return ParseResult.failure(f"{field} is required", field)

    try:
        value = Decimal(text)
    except InvalidOperation:
        return ParseResult.failure(f"{field} must be a number", field)

    if not value.is_finite():
        return ParseResult.failure(f"{field} must be a finite number", field)
    return ParseResult.success(value, field)


def parse_amount(raw, field: str = "amount") -> ParseResult:
    """Amounts and prices must be strictly positive."""
    result = parse_number(raw, field)
    if result.ok and result.value <= 0:
        return ParseResult.failure(f"{field} must be greater than 0", field)
    return result


def parse_rate(raw, field: str = "gst_rate") -> ParseResult:
    """GST rates are percentages and may be zero."""
    result = parse_number(raw, field)
    if result.ok and result.value < 0:
        return ParseResult.failure(f"{field} cannot be negative", field)
    return result


def parse_margin(raw, field: str = "margin_percent") -> ParseResult:
    """Desired margins live in [0, 100); 100% would need an infinite price."""
    result = parse_number(raw, field)
    if not result.ok:
        return result
    if result.value < 0:
        return ParseResult.failure(f"{field} cannot be negative", field)
    if result.value >= 100:
        return ParseResult.failure(f"{field} must be less than 100", field)
    return result


def validate_tax_input(raw_amount, raw_rate) -> tuple[TaxInput | None, list[ParseResult]]:
    """Validate the GST calculator form.

    Returns the parsed input and an empty failure list, or ``None`` and every
    failed field so the form can flag them together.
    """
    amount = parse_amount(raw_amount)
    rate = parse_rate(raw_rate)
    failures = [r for r in (amount, rate) if not r.ok]
    if failures:
        return None, failures
    return TaxInput(amount=amount.value, gst_rate=rate.value), []
