"""Quote request/response payloads.

Client-supplied totals are accepted for compatibility but never trusted:
the service recomputes every derived field before saving.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, field_validator

from devispro.models.enums import QuoteStatus
from devispro.schemas.base import ApiModel
from devispro.schemas.calculators import NumberFormat, ParsedNumber, VatBucket
from devispro.schemas.clients import ClientRef, ProjectRef
from devispro.schemas.line_items import AnyLineItem, LenientLineItem


class QuoteIn(ApiModel):
    """Create a quote. Number is allocated when omitted."""

    client_id: uuid.UUID
    project_id: uuid.UUID | None = None
    number: str | None = Field(default=None, max_length=50)
    issue_date: date | None = None
    valid_until: date | None = None
    notes: str | None = None
    conditions: str | None = None
    deposit_percent: int | None = Field(default=None, ge=0, le=100)
    line_items: list[LenientLineItem] = Field(default_factory=list)


class QuoteUpdate(ApiModel):
    """Partial update. A given ``line_items`` list replaces the content."""

    client_id: uuid.UUID | None = None
    project_id: uuid.UUID | None = None
    issue_date: date | None = None
    valid_until: date | None = None
    notes: str | None = None
    conditions: str | None = None
    deposit_percent: int | None = Field(default=None, ge=0, le=100)
    line_items: list[LenientLineItem] | None = None
    version: int | None = Field(default=None, description="Version the editor started from")


class StatusChange(ApiModel):
    status: QuoteStatus


class QuoteSummary(ApiModel):
    """One row of the quote list."""

    id: uuid.UUID
    number: str
    status: QuoteStatus
    issue_date: date
    valid_until: date | None = None
    total_excl_tax: Decimal
    total_incl_tax: Decimal
    client: ClientRef | None = None
    project: ProjectRef | None = None


class QuoteOut(QuoteSummary):
    """Full quote with recomputed content."""

    client_id: uuid.UUID
    project_id: uuid.UUID | None = None
    notes: str | None = None
    conditions: str | None = None
    total_tax: Decimal
    deposit_percent: int
    deposit_amount: Decimal
    version: int
    line_items: list[AnyLineItem] = Field(default_factory=list)
    vat_breakdown: list[VatBucket] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SendQuoteRequest(ApiModel):
    """Recipient and message for sending a quote by email."""

    email: str = Field(min_length=3, max_length=255)
    subject: str = Field(min_length=1, max_length=200)
    message: str = Field(default="", max_length=5000)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        local, _, domain = v.partition("@")
        if not local or "." not in domain or " " in v:
            raise ValueError(f"invalid email address: {v!r}")
        return v


class SendQuoteResult(ApiModel):
    id: uuid.UUID
    number: str
    status: QuoteStatus
    recipient: str


class DashboardStats(ApiModel):
    total_quotes: int = 0
    pending_quotes: int = 0
    accepted_quotes: int = 0
    total_revenue: Decimal = Decimal("0.00")


class LineItemIn(ApiModel):
    """One row to insert or replace. ``index`` is the display place for inserts."""

    item: LenientLineItem
    index: int | None = Field(default=None, ge=0)


class LineItemMove(ApiModel):
    index: int = Field(ge=0)


class TotalsPreviewIn(ApiModel):
    """Unsaved editor content to price."""

    line_items: list[LenientLineItem] = Field(default_factory=list)
    deposit_percent: int = Field(default=0, ge=0, le=100)


class NumberingState(ApiModel):
    """Configured numbering for a document kind, for the numbering dialog."""

    number_format: NumberFormat
    last_number: str | None = None
    parsed_last: ParsedNumber | None = None
    example: str


class SequenceRestart(ApiModel):
    next_sequence: int = Field(ge=1)


class NumberToParse(ApiModel):
    number: str = Field(min_length=1, max_length=50)
