"""Dashboard API - Visitor statistics and the daily entries chart"""
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from api.deps import get_admin_context
from config import Settings, get_settings
from domain.models import Visitor
from domain.session import AdminContext, require_admin
from domain.stats import DailyEntryCount, Stats, compute_stats, daily_entry_histogram
from infrastructure.database import get_session

router = APIRouter()


class DashboardResponse(BaseModel):
    stats: Stats
    chart: List[DailyEntryCount]
    generated_at: datetime


@router.get("/stats", response_model=DashboardResponse)
async def get_dashboard_stats(
    ctx: AdminContext = Depends(get_admin_context),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
):
    """Counters and entries per day over the whole visitor table"""
    require_admin(ctx)

    result = await session.execute(select(Visitor))
    visitors = result.scalars().all()
    now = datetime.now(timezone.utc)
    tz = settings.local_timezone

    return DashboardResponse(
        stats=compute_stats(visitors, now, tz=tz, window_days=settings.expiring_soon_days),
        chart=daily_entry_histogram(visitors, now, days=settings.chart_days, tz=tz),
        generated_at=now,
    )
