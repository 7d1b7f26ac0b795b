from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import PlainSerializer

# IST offset
IST = timezone(timedelta(hours=5, minutes=30))

# Amounts and percentages are Decimals in memory and plain JSON numbers on disk.
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]

BusinessType = Literal["B2B", "B2C"]


def to_decimal(val: int | float | str | Decimal) -> Decimal:
    """Convert an already-validated number to Decimal without binary float noise."""
    if isinstance(val, Decimal):
        return val
    return Decimal(str(val))


def now_ist() -> datetime:
    return datetime.now(IST)
