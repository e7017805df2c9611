"""Shared field types for schemas.

Money and quantity fields arrive from the editor as numbers, numeric strings
("3", "12,50") or blanks. They are coerced here instead of rejected: an
incomplete draft must still render.

Row amounts are stored as Numeric(10, 2). They are brought to that scale on
input, so a quote recomputed from its stored rows gives the same totals.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BeforeValidator

__all__ = ["LenientDecimal", "coerce_amount", "coerce_decimal"]

# Numeric(10, 2): at most 8 digits before the decimal point
MAX_INTEGER_DIGITS = 8
CENT = Decimal("0.01")


def coerce_decimal(value: Any) -> Decimal | None:
    """Best-effort conversion to Decimal. Returns None when not numeric.

    Accepts ints, floats (via their repr, never binary expansion), Decimals and
    strings using either "." or "," as decimal mark. Magnitudes of 10^8 and
    above cannot be stored and are treated as non-numeric.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    else:
        if isinstance(value, float):
            value = repr(value)
        if not isinstance(value, str):
            return None
        # Thousands may be grouped with plain, no-break or narrow no-break spaces
        cleaned = value.strip().replace("\u00a0", "").replace("\u202f", "").replace(" ", "")
        if not cleaned:
            return None
        try:
            result = Decimal(cleaned.replace(",", "."))
        except InvalidOperation:
            return None

    if not result.is_finite() or (result and result.adjusted() >= MAX_INTEGER_DIGITS):
        return None
    return result


def coerce_amount(value: Any) -> Decimal | None:
    """coerce_decimal, then rounded half-up to the cent (the storage scale)."""
    result = coerce_decimal(value)
    if result is None:
        return None
    return result.quantize(CENT, rounding=ROUND_HALF_UP)


LenientDecimal = Annotated[Decimal | None, BeforeValidator(coerce_amount)]
