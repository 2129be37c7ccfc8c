"""Leaderboard endpoint."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ...domain.models.analytics import LeaderboardEntry
from ...domain.services.analytics_service import AnalyticsService
from ...infrastructure.dependencies import get_analytics_service

router = APIRouter(prefix="/v1/leaderboard", tags=["leaderboard"])


class LeaderboardResponse(BaseModel):
    """Ranked forecasters with the filters that produced them."""

    domain: Optional[str] = None
    period: Optional[str] = None
    entries: List[LeaderboardEntry]


@router.get("", response_model=LeaderboardResponse)
async def get_leaderboard(
    domain: Optional[str] = Query(None, description="Only claims in this domain"),
    period: Optional[str] = Query(None, description="Window: 1y, 6m, 3m, 1m or 7d"),
    min_claims: Optional[int] = Query(None, ge=0, description="Minimum resolved claims"),
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Maximum entries"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> LeaderboardResponse:
    """Forecasters ranked by weighted Perimeter score."""
    entries = await service.get_leaderboard(domain=domain, period=period, min_claims=min_claims, limit=limit)
    return LeaderboardResponse(domain=domain, period=period, entries=entries)
