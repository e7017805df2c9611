"""Jinja2 custom filters for French locale formatting.

All filters are registered on the Jinja2 environment in render.py.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any


def _decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def _group_thousands(formatted: str) -> str:
    # US: 1,234.50 -> French: 1 234,50
    return formatted.replace(",", " ").replace(".", ",")


def format_currency(value: Decimal | float | int | None) -> str:
    """Format as French currency: 1234.5 -> "1 234,50 €"."""
    d = _decimal(value)
    if d is None:
        return "-"
    d = d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{_group_thousands(f'{d:,.2f}')} €"


def format_number(value: Decimal | float | int | None) -> str:
    """Format a quantity, dropping useless decimals: 2.50 -> "2,5", 3.00 -> "3"."""
    d = _decimal(value)
    if d is None:
        return "-"
    text = f"{d.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):,.2f}".rstrip("0").rstrip(".")
    return _group_thousands(text)


def format_rate(value: Decimal | float | int | None) -> str:
    """Format a VAT rate: 5.5 -> "5,5 %", 20 -> "20 %"."""
    if value is None:
        return "-"
    return f"{format_number(value)} %"


def format_date(value: date | None) -> str:
    """Format as DD/MM/YYYY."""
    if value is None:
        return "-"
    return value.strftime("%d/%m/%Y")
