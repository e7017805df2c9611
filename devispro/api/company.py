"""Company profile API."""
# ruff: noqa: B008

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devispro.config import settings
from devispro.crm.company import get_or_create_company, update_company
from devispro.db.engine import get_session
from devispro.models.company import Company
from devispro.schemas.company import CompanyIn, CompanyOut, QuoteDefaults

router = APIRouter(prefix="/api", tags=["company"])


@router.get("/company", response_model=CompanyOut)
async def get_company_profile(db: AsyncSession = Depends(get_session)) -> Company:
    return await get_or_create_company(db)


@router.put("/company", response_model=CompanyOut)
async def put_company_profile(data: CompanyIn, db: AsyncSession = Depends(get_session)) -> Company:
    return await update_company(db, data)


@router.get("/quote-defaults", response_model=QuoteDefaults)
async def get_quote_defaults() -> QuoteDefaults:
    defaults = settings.quotes
    return QuoteDefaults(
        vat_rates=defaults.vat_rates,
        default_vat_rate=defaults.default_vat_rate,
        default_deposit_percent=defaults.default_deposit_percent,
        validity_days=defaults.validity_days,
    )
