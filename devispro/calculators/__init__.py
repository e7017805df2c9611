"""Quote calculators — hierarchy, totals, numbering, invoicing."""

from devispro.calculators.hierarchy import (
    order_by_position,
    owned_rows,
    owner_section,
    owner_subsection,
    renumber,
)
from devispro.calculators.invoicing import calculate_invoice_amounts
from devispro.calculators.numbering import format_document_number, parse_document_number
from devispro.calculators.totals import (
    calculate_deposit,
    calculate_line_total,
    calculate_quote_totals,
    round2,
    summarize_vat,
)

__all__ = [
    "order_by_position",
    "owned_rows",
    "owner_section",
    "owner_subsection",
    "renumber",
    "calculate_invoice_amounts",
    "format_document_number",
    "parse_document_number",
    "calculate_deposit",
    "calculate_line_total",
    "calculate_quote_totals",
    "round2",
    "summarize_vat",
]
