"""Invoice amount calculator.

Pure Python, Decimal arithmetic. An invoice bills part of a signed quote:
- deposit: the quote's deposit amount
- intermediate: a percentage of the quote total ("situation de travaux")
- final: the quote total minus everything already invoiced

Each amount is fixed incl. tax first, then split into excl. tax and tax
using the quote's own excl./incl. ratio, so mixed VAT rates stay in
proportion. The tax part absorbs the rounding cent.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from devispro.calculators.totals import HUNDRED, ZERO, round2, to_decimal
from devispro.models.enums import InvoiceType
from devispro.schemas.calculators import InvoiceAmounts


def split_incl_tax(amount_incl_tax: Decimal, quote_excl_tax: Any, quote_incl_tax: Any) -> InvoiceAmounts:
    """Split an incl.-tax amount with the quote's excl./incl. ratio."""
    amount = round2(amount_incl_tax)
    quote_incl = to_decimal(quote_incl_tax)
    if quote_incl == ZERO:
        return InvoiceAmounts(total_excl_tax=amount, total_tax=round2(ZERO), total_incl_tax=amount)

    excl = round2(amount * to_decimal(quote_excl_tax) / quote_incl)
    return InvoiceAmounts(total_excl_tax=excl, total_tax=amount - excl, total_incl_tax=amount)


def calculate_invoice_amounts(
    invoice_type: InvoiceType,
    quote_excl_tax: Any,
    quote_incl_tax: Any,
    deposit_amount: Any = None,
    percent: Any = None,
    already_invoiced_incl_tax: Iterable[Any] = (),
) -> InvoiceAmounts:
    """Amounts billed by a new invoice on a quote.

    Args:
        invoice_type: deposit, intermediate or final.
        quote_excl_tax: Quote total excl. tax.
        quote_incl_tax: Quote total incl. tax.
        deposit_amount: Quote deposit, used by deposit invoices.
        percent: Share of the quote total, used by intermediate invoices.
        already_invoiced_incl_tax: Incl.-tax totals of earlier invoices,
            deducted by the final invoice.

    Returns:
        InvoiceAmounts. A final invoice never bills a negative amount.
    """
    quote_incl = to_decimal(quote_incl_tax)

    if invoice_type == InvoiceType.DEPOSIT:
        amount = to_decimal(deposit_amount)
    elif invoice_type == InvoiceType.INTERMEDIATE:
        amount = quote_incl * to_decimal(percent) / HUNDRED
    else:
        invoiced = sum((to_decimal(v) for v in already_invoiced_incl_tax), start=ZERO)
        amount = max(quote_incl - invoiced, ZERO)

    return split_incl_tax(amount, quote_excl_tax, quote_incl)
