"""Read-only quote queries for list views and the dashboard."""

from __future__ import annotations

import uuid
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devispro.models.enums import QuoteStatus
from devispro.models.quote import Quote
from devispro.schemas.quotes import DashboardStats


async def list_quotes(
    db: AsyncSession,
    status: QuoteStatus | None = None,
    client_id: uuid.UUID | None = None,
    project_id: uuid.UUID | None = None,
    page: int = 1,
    per_page: int = 50,
) -> tuple[list[Quote], int]:
    """Quotes most recent first, with optional filters.

    Returns (quotes, total_count).
    """
    query = select(Quote).options(selectinload(Quote.client), selectinload(Quote.project))
    count_query = select(func.count(Quote.id))

    if status:
        query = query.where(Quote.status == status.value)
        count_query = count_query.where(Quote.status == status.value)
    if client_id:
        query = query.where(Quote.client_id == client_id)
        count_query = count_query.where(Quote.client_id == client_id)
    if project_id:
        query = query.where(Quote.project_id == project_id)
        count_query = count_query.where(Quote.project_id == project_id)

    result = await db.execute(count_query)
    total = result.scalar() or 0

    offset = (page - 1) * per_page
    result = await db.execute(
        query.order_by(Quote.issue_date.desc(), Quote.number.desc()).offset(offset).limit(per_page)
    )
    return list(result.scalars().all()), total


async def get_last_number(db: AsyncSession) -> str | None:
    """Number of the most recently created quote, used to pre-fill the numbering dialog."""
    result = await db.execute(select(Quote.number).order_by(Quote.created_at.desc()).limit(1))
    return result.scalar_one_or_none()


async def get_dashboard_stats(db: AsyncSession) -> DashboardStats:
    """Quote counts by status and revenue from signed quotes."""
    result = await db.execute(select(Quote.status, func.count(Quote.id)).group_by(Quote.status))
    counts = {status: count for status, count in result.all()}

    result = await db.execute(
        select(func.coalesce(func.sum(Quote.total_incl_tax), 0))
        .where(Quote.status == QuoteStatus.SIGNED.value)
    )
    revenue = Decimal(result.scalar() or 0).quantize(Decimal("0.01"))

    return DashboardStats(
        total_quotes=sum(counts.values()),
        pending_quotes=counts.get(QuoteStatus.SENT.value, 0),
        accepted_quotes=counts.get(QuoteStatus.SIGNED.value, 0),
        total_revenue=revenue,
    )
