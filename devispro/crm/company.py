"""Company profile service. One issuer profile per installation."""

from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from devispro.config import settings
from devispro.events.bus import emit
from devispro.models.company import Company
from devispro.schemas.company import CompanyIn
from devispro.schemas.events import EventType, SystemEvent

logger = logging.getLogger(__name__)


async def get_company(db: AsyncSession) -> Company | None:
    result = await db.execute(select(Company).order_by(Company.created_at).limit(1))
    return result.scalar_one_or_none()


async def get_or_create_company(db: AsyncSession) -> Company:
    """The issuer profile, created with the configured name on first use."""
    company = await get_company(db)
    if company is None:
        company = Company(id=uuid.uuid4(), company_name=settings.company.app_name)
        db.add(company)
        await db.flush()
        logger.info("Company profile created")
    return company


async def update_company(db: AsyncSession, data: CompanyIn) -> Company:
    company = await get_or_create_company(db)
    fields = data.model_dump(exclude_unset=True)
    for name, value in fields.items():
        setattr(company, name, value)
    await db.flush()
    logger.info("Company profile updated (%s)", ", ".join(sorted(fields)))
    await emit(SystemEvent(
        event_type=EventType.COMPANY_UPDATED,
        entity_type="company",
        entity_id=company.id,
        data={"fields": sorted(fields)},
        source_module="crm.company",
    ))
    return company
