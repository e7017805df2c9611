"""Dashboard API — quote counts and signed revenue."""
# ruff: noqa: B008

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devispro.db.engine import get_session
from devispro.quotes.queries import get_dashboard_stats
from devispro.schemas.quotes import DashboardStats

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardStats)
async def dashboard(db: AsyncSession = Depends(get_session)) -> DashboardStats:
    return await get_dashboard_stats(db)
