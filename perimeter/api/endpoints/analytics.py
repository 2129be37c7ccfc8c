"""Analytics and trend endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...domain.models.analytics import AnalyticsSnapshot, TrendPoint
from ...domain.services.analytics_service import AnalyticsService
from ...infrastructure.dependencies import get_analytics_service
from ...infrastructure.settings import settings

router = APIRouter(prefix="/v1/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsSnapshot)
async def get_analytics(
    domain: Optional[str] = Query(None, description="Only claims in this domain"),
    period: Optional[str] = Query(None, description="Window: 1y, 6m, 3m, 1m or 7d"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> AnalyticsSnapshot:
    """Totals, breakdowns, score histogram and top forecasters."""
    return await service.get_analytics(domain=domain, period=period)


@router.get("/trends", response_model=List[TrendPoint])
async def get_trends(
    days: int = Query(settings.trend_days, ge=1, le=366, description="Days to cover, today included"),
    domain: Optional[str] = Query(None, description="Only claims in this domain"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> List[TrendPoint]:
    """One point per day, oldest first."""
    return await service.get_trends(days=days, domain=domain)
