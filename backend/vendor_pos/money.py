"""
Fixed-point money helpers.

All monetary columns are Numeric(10, 2). Values cross the service boundary
as Decimal quantized to cents and leave the API as "12.34" strings.
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Numeric(10, 2) upper bound
MAX_AMOUNT = Decimal("99999999.99")


def to_money(value) -> Decimal:
    """
    Coerce a DB or JSON value to a cent-quantized Decimal.

    None becomes 0.00. Floats go through str() so 0.1 stays 0.10.
    Raises InvalidOperation for non-numeric input.
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        raise InvalidOperation(f"not a number: {value!r}")
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money_str(value) -> str | None:
    if value is None:
        return None
    return f"{to_money(value):.2f}"
