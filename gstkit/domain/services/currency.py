# gstkit/domain/services/currency.py
"""Currency symbols and display formatting."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from gstkit.domain.models.common import to_decimal


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    symbol: str
    name: str


CURRENCIES: list[CurrencyInfo] = [
    CurrencyInfo("INR", "₹", "Indian Rupee"),
    CurrencyInfo("USD", "$", "US Dollar"),
    CurrencyInfo("EUR", "€", "Euro"),
    CurrencyInfo("GBP", "£", "British Pound"),
    CurrencyInfo("JPY", "¥", "Japanese Yen"),
    CurrencyInfo("AUD", "A$", "Australian Dollar"),
    CurrencyInfo("CAD", "C$", "Canadian Dollar"),
    CurrencyInfo("SGD", "S$", "Singapore Dollar"),
    CurrencyInfo("AED", "د.إ", "UAE Dirham"),
]

_BY_CODE = {c.code: c for c in CURRENCIES}

DEFAULT_SYMBOL = "₹"

_CENT = Decimal("0.01")


def get_currency_symbol(currency_code: str) -> str:
    """Symbol for ``currency_code``; unknown codes fall back to the rupee sign."""
    currency = _BY_CODE.get(currency_code)
    return currency.symbol if currency else DEFAULT_SYMBOL


def resolve_currency_code(value: str | None) -> str | None:
    """Currency code for a code or a symbol (``"₹" -> "INR"``); None when unknown."""
    if not value:
        return None
    if value.upper() in _BY_CODE:
        return value.upper()
    for currency in CURRENCIES:
        if currency.symbol == value:
            return currency.code
    return None


def _quantize(amount) -> Decimal:
    return to_decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)


def format_currency(amount, currency_code: str) -> str:
    """``format_currency(1234.5, "USD") -> "$1234.50"``."""
    return f"{get_currency_symbol(currency_code)}{_quantize(amount):.2f}"


def format_indian_number(amount) -> str:
    """Two decimals with lakh/crore grouping: ``100300 -> "1,00,300.00"``."""
    value = _quantize(amount)
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    return f"{sign}{whole}.{frac}"


def format_inr(amount) -> str:
    return f"{DEFAULT_SYMBOL}{format_indian_number(amount)}"


def format_percentage(percent) -> str:
    return f"{_quantize(percent):.2f}%"
