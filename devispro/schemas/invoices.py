"""Invoice request/response payloads."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import Field, model_validator

from devispro.models.enums import InvoiceStatus, InvoiceType
from devispro.schemas.base import ApiModel
from devispro.schemas.clients import ClientRef


class InvoiceIn(ApiModel):
    """Issue an invoice against a signed quote."""

    quote_id: uuid.UUID
    type: InvoiceType = InvoiceType.FINAL
    percent: Decimal | None = Field(default=None, gt=0, le=100)
    issue_date: date | None = None
    due_date: date | None = None

    @model_validator(mode="after")
    def require_percent_for_intermediate(self) -> InvoiceIn:
        if self.type == InvoiceType.INTERMEDIATE and self.percent is None:
            raise ValueError("percent is required for an intermediate invoice")
        return self


class InvoiceUpdate(ApiModel):
    status: InvoiceStatus | None = None
    due_date: date | None = None
    paid_amount: Decimal | None = Field(default=None, ge=0)


class InvoiceOut(ApiModel):
    id: uuid.UUID
    quote_id: uuid.UUID
    client_id: uuid.UUID
    project_id: uuid.UUID | None = None
    number: str
    type: InvoiceType
    status: InvoiceStatus
    issue_date: date
    due_date: date | None = None
    total_excl_tax: Decimal
    total_tax: Decimal
    total_incl_tax: Decimal
    paid_amount: Decimal
    client: ClientRef | None = None
    created_at: datetime | None = None
