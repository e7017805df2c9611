"""Quote totals calculator.

Pure Python, Decimal arithmetic. Implements:
- Line totals: quantity × unit price, per billable row
- Section and subsection subtotals from positional ownership
- Tax: summed unrounded per row, rounded once at the end
- Grand totals excl./incl. tax and deposit ("acompte")

Rounding: half-up to the cent at every rounding step, never truncation.
Missing or non-numeric values count as zero. Rows of unknown kind are
carried through untouched. The calculator never raises for data shape.

Idempotent: feeding a result's line items back in yields the same result.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from devispro.calculators.hierarchy import is_billable, kind_of, order_by_position, owned_rows
from devispro.models.enums import HEADING_KINDS
from devispro.schemas.calculators import QuoteTotals, VatBucket
from devispro.schemas.line_items import AnyLineItem, parse_line_item
from devispro.schemas.types import coerce_amount, coerce_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def round2(value: Decimal) -> Decimal:
    """Round to 2 decimal places, half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """Coerce a raw numeric field; None, blanks and garbage become 0."""
    result = coerce_decimal(value)
    return ZERO if result is None else result


def calculate_line_total(quantity: Any, unit_price: Any) -> Decimal:
    """Line total excl. tax = round2(quantity × unit price).

    Quantity and unit price are read at the cent scale they are stored with.
    """
    quantity = coerce_amount(quantity) or ZERO
    unit_price = coerce_amount(unit_price) or ZERO
    return round2(quantity * unit_price)


def calculate_deposit(total_incl_tax: Any, deposit_percent: Any) -> Decimal:
    """Deposit = round2(total incl. tax × percent / 100)."""
    return round2(to_decimal(total_incl_tax) * to_decimal(deposit_percent) / HUNDRED)


def summarize_vat(items: Iterable[Any]) -> list[VatBucket]:
    """Tax base and tax per VAT rate, lowest rate first.

    Uses the stored ``line_total_excl_tax`` of each billable row. Each
    bucket's tax is rounded once; the sum of bucket taxes may differ from
    the quote's total tax by a cent, which is rounded once over all rows.
    """
    bases: dict[Decimal, Decimal] = {}
    taxes: dict[Decimal, Decimal] = {}
    for item in items:
        if not is_billable(item):
            continue
        rate = round2(to_decimal(getattr(item, "tax_rate_percent", None)))
        line_total = to_decimal(getattr(item, "line_total_excl_tax", None))
        bases[rate] = bases.get(rate, ZERO) + line_total
        taxes[rate] = taxes.get(rate, ZERO) + line_total * rate / HUNDRED

    return [
        VatBucket(rate=rate, base_excl_tax=round2(bases[rate]), tax=round2(taxes[rate]))
        for rate in sorted(bases)
    ]


def calculate_quote_totals(
    line_items: Sequence[AnyLineItem | dict[str, Any]],
    deposit_percent: Any = 0,
) -> QuoteTotals:
    """Compute every derived field of a quote in one pass over its rows.

    Args:
        line_items: Rows in any order; they are sorted by position first.
            Raw decoded records are accepted and parsed leniently.
        deposit_percent: Share of the total incl. tax due upfront (0–100).

    Returns:
        QuoteTotals with the rows (line totals and subtotals filled in),
        grand totals, deposit amount and VAT breakdown.
    """
    rows = order_by_position([parse_line_item(item) for item in line_items])

    line_totals: dict[int, Decimal] = {}
    total_excl = ZERO
    tax_unrounded = ZERO

    for i, item in enumerate(rows):
        if not is_billable(item):
            continue
        line_total = calculate_line_total(item.quantity, item.unit_price)  # type: ignore[union-attr]
        line_totals[i] = line_total
        total_excl += line_total
        tax_unrounded += line_total * to_decimal(item.tax_rate_percent) / HUNDRED  # type: ignore[union-attr]

    # Each heading sums the rows it owns; a section includes its subsections' rows
    subtotals: dict[int, Decimal] = {
        i: sum((line_totals[j] for j in owned_rows(rows, i)), start=ZERO)
        for i, item in enumerate(rows)
        if kind_of(item) in HEADING_KINDS
    }

    updated: list[AnyLineItem] = []
    for i, item in enumerate(rows):
        if i in line_totals:
            updated.append(item.model_copy(update={"line_total_excl_tax": line_totals[i]}))
        elif i in subtotals:
            updated.append(item.model_copy(update={"section_subtotal": round2(subtotals[i])}))
        else:
            updated.append(item)

    total_excl_tax = round2(total_excl)
    total_tax = round2(tax_unrounded)
    total_incl_tax = round2(total_excl_tax + total_tax)
    percent = _clamp_percent(deposit_percent)

    logger.debug(
        "Totals computed: rows=%d excl=%s tax=%s incl=%s",
        len(rows), total_excl_tax, total_tax, total_incl_tax,
    )

    return QuoteTotals(
        line_items=updated,
        total_excl_tax=total_excl_tax,
        total_tax=total_tax,
        total_incl_tax=total_incl_tax,
        deposit_percent=percent,
        deposit_amount=calculate_deposit(total_incl_tax, percent),
        vat_breakdown=summarize_vat(updated),
    )


def _clamp_percent(value: Any) -> int:
    """Deposit percent as an int in [0, 100]; garbage becomes 0."""
    percent = to_decimal(value).to_integral_value(rounding=ROUND_HALF_UP)
    return int(min(max(percent, ZERO), HUNDRED))
