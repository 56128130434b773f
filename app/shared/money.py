"""Decimal money helpers (two implied fraction digits)"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[Decimal, int, float, str]

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: Number) -> Decimal:
    """Quantize any numeric input to a 2-place Decimal"""
    if isinstance(value, float):
        # Go through str so 0.1 stays 0.1 instead of its binary expansion
        value = str(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def money_to_float(value: Optional[Decimal]) -> Optional[float]:
    """Convert at the API boundary only"""
    if value is None:
        return None
    return float(value)
