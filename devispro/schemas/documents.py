"""Pydantic schemas for a rendered quote document.

Built by documents.builder from a loaded quote; consumed by the Jinja2
templates in documents/templates.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from devispro.schemas.calculators import VatBucket


class DocumentParty(BaseModel):
    """Issuer or recipient block."""

    name: str = ""
    address_lines: list[str] = Field(default_factory=list)
    email: str | None = None
    phone: str | None = None
    legal_lines: list[str] = Field(default_factory=list)


class DocumentLine(BaseModel):
    """One printed row, numbered by its place in the hierarchy."""

    number: str = ""
    kind: str
    label: str = ""
    body: str | None = None
    quantity: Decimal | None = None
    unit: str | None = None
    unit_price: Decimal | None = None
    tax_rate_percent: Decimal | None = None
    line_total_excl_tax: Decimal | None = None
    section_subtotal: Decimal | None = None
    technical_details: list[str] = Field(default_factory=list)


class QuoteDocument(BaseModel):
    """Everything printed on a quote."""

    number: str
    status: str
    issue_date: date
    valid_until: date | None = None
    issuer: DocumentParty
    client: DocumentParty
    project_name: str | None = None
    project_address: str | None = None
    lines: list[DocumentLine] = Field(default_factory=list)
    vat_breakdown: list[VatBucket] = Field(default_factory=list)
    total_excl_tax: Decimal
    total_tax: Decimal
    total_incl_tax: Decimal
    deposit_percent: int = 0
    deposit_amount: Decimal = Decimal("0.00")
    conditions: str | None = None
    notes: str | None = None
    legal_mentions: str | None = None
