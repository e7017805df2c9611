"""Company profile payloads."""

from __future__ import annotations

import uuid
from decimal import Decimal

from pydantic import Field

from devispro.schemas.base import ApiModel


class CompanyIn(ApiModel):
    """Issuer details printed on every quote and invoice."""

    company_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    website: str | None = None
    logo: str | None = None
    primary_color: str | None = None
    siret: str | None = Field(default=None, max_length=14)
    rcs: str | None = None
    naf: str | None = None
    vat_number: str | None = None
    capital_social: str | None = None
    decennale_insurance: str | None = None
    biennale_insurance: str | None = None
    legal_mentions: str | None = None


class CompanyOut(CompanyIn):
    id: uuid.UUID


class QuoteDefaults(ApiModel):
    """Editor defaults: offered VAT rates, deposit and validity."""

    vat_rates: list[Decimal]
    default_vat_rate: Decimal
    default_deposit_percent: int
    validity_days: int
