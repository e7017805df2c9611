"""Pydantic schemas for calculator results.

Pure data classes, no business logic. Used as return types by the totals,
numbering and invoicing calculators.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from devispro.models.enums import DateComponent, NumberSeparator
from devispro.schemas.line_items import AnyLineItem


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class VatBucket(_CamelModel):
    """Tax base and tax amount for one VAT rate."""

    rate: Decimal
    base_excl_tax: Decimal
    tax: Decimal


class QuoteTotals(_CamelModel):
    """Every derived field of a quote, computed in one pass.

    ``line_items`` holds the rows in position order with
    ``line_total_excl_tax`` and ``section_subtotal`` filled in.
    """

    line_items: list[AnyLineItem]
    total_excl_tax: Decimal
    total_tax: Decimal
    total_incl_tax: Decimal
    deposit_percent: int
    deposit_amount: Decimal
    vat_breakdown: list[VatBucket] = Field(default_factory=list)


class NumberFormat(_CamelModel):
    """How a quote or invoice number is assembled."""

    prefix: str = ""
    separator: NumberSeparator = NumberSeparator.DASH
    date_component: DateComponent = DateComponent.YEAR
    width: int = Field(default=3, ge=3, le=6)


class ParsedNumber(_CamelModel):
    """A document number split back into its format and sequence."""

    number_format: NumberFormat
    sequence: int


class InvoiceAmounts(_CamelModel):
    """Amounts billed by one invoice."""

    total_excl_tax: Decimal
    total_tax: Decimal
    total_incl_tax: Decimal
