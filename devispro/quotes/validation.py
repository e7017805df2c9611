"""Range checks on line items submitted through the API.

The calculators accept anything and count bad numbers as zero; the API
rejects values an editor should never send. Errors are collected for every
row so the form can highlight them all at once.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from devispro.calculators.hierarchy import is_billable
from devispro.schemas.line_items import AnyLineItem

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


class LineItemValidationError(ValueError):
    """Raised when submitted rows break a range rule. Carries every problem."""

    def __init__(self, errors: list[dict[str, object]]) -> None:
        self.errors = errors
        super().__init__(f"{len(errors)} invalid line item field(s)")


def line_item_errors(items: Iterable[AnyLineItem], require_labels: bool = True) -> list[dict[str, object]]:
    """Every range problem as {"index", "field", "message"} dicts.

    ``require_labels=False`` skips the label rule, for pricing unsaved drafts.
    """
    errors: list[dict[str, object]] = []
    for index, item in enumerate(items):
        if not is_billable(item):
            continue
        if require_labels and not (item.label or "").strip():
            errors.append(_error(index, "label", "a billable row needs a label"))
        if item.quantity is not None and item.quantity < _ZERO:
            errors.append(_error(index, "quantity", "quantity cannot be negative"))
        if item.unit_price is not None and item.unit_price < _ZERO:
            errors.append(_error(index, "unitPrice", "unit price cannot be negative"))
        rate = item.tax_rate_percent
        if rate is not None and not _ZERO <= rate <= _HUNDRED:
            errors.append(_error(index, "taxRatePercent", "tax rate must be between 0 and 100"))
    return errors


def validate_line_items(items: Iterable[AnyLineItem], require_labels: bool = True) -> None:
    """Raise LineItemValidationError if any row breaks a range rule."""
    errors = line_item_errors(items, require_labels)
    if errors:
        raise LineItemValidationError(errors)


def _error(index: int, field: str, message: str) -> dict[str, object]:
    return {"index": index, "field": field, "message": message}
