"""Service producing leaderboards, analytics snapshots and trends."""

import logging
from datetime import datetime
from typing import Callable, Hashable, List, Optional, Tuple

from cachetools import TTLCache

from ..models.analytics import AnalyticsSnapshot, ClaimRecord, LeaderboardEntry, TrendPoint
from ..models.claim import Claim, utc_now
from ..models.forecaster import Forecaster
from ..models.outcome import Outcome
from ..ports.claim_repository import ClaimRepository
from .aggregation import AggregationEngine, utc_day
from .ranking import RankingPolicy, window_start

logger = logging.getLogger(__name__)

DEFAULT_LEADERBOARD_LIMIT = 100
DEFAULT_TREND_DAYS = 30


def _normalize_domain(domain: Optional[str]) -> Optional[str]:
    return domain.strip().lower() if domain else None


class AnalyticsService:
    """Reads claim records from storage and aggregates them on demand.

    Results are cached per (kind, domain, window, ...) key. Any new claim or
    outcome drops the cached entries for its domain and for "all domains".
    """

    def __init__(
        self,
        repository: ClaimRepository,
        aggregation: Optional[AggregationEngine] = None,
        ranking: Optional[RankingPolicy] = None,
        cache_ttl: int = 300,
        cache_maxsize: int = 256,
        clock: Callable[[], datetime] = utc_now,
        leaderboard_limit: int = DEFAULT_LEADERBOARD_LIMIT,
    ):
        """Initialize the service.

        Args:
            repository: Storage to read claims and forecasters from
            aggregation: Aggregation engine
            ranking: Leaderboard ordering policy
            cache_ttl: Seconds a cached result stays valid
            cache_maxsize: Maximum number of cached results
            clock: Source of "now", for windows and trends
            leaderboard_limit: Default number of leaderboard entries
        """
        self._repository = repository
        self._aggregation = aggregation or AggregationEngine()
        self._ranking = ranking or RankingPolicy()
        self._cache: TTLCache = TTLCache(maxsize=cache_maxsize, ttl=cache_ttl)
        self._clock = clock
        self._leaderboard_limit = leaderboard_limit

    async def _records(self, domain: Optional[str], period: Optional[str]) -> Tuple[List[ClaimRecord], datetime]:
        now = self._clock()
        since = window_start(period, now)
        records = await self._repository.list_claim_records(domain=domain, since=since)
        return records, now

    async def _rank(
        self,
        records: List[ClaimRecord],
        min_claims: Optional[int],
        limit: Optional[int],
    ) -> List[LeaderboardEntry]:
        summaries = self._aggregation.summarize_forecasters(records)
        forecasters = {f.id: f for f in await self._repository.list_forecasters()}
        return self._ranking.rank(summaries.values(), forecasters, min_claims=min_claims, limit=limit)

    async def get_leaderboard(
        self,
        domain: Optional[str] = None,
        period: Optional[str] = None,
        min_claims: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[LeaderboardEntry]:
        """Ranked forecasters for a domain and period.

        Args:
            domain: Only claims in this domain, all domains when None
            period: Window token (1y, 6m, 3m, 1m, 7d), all time when None
            min_claims: Minimum resolved claims, policy default when None
            limit: Maximum entries, service default when None

        Returns:
            Leaderboard entries, best first
        """
        domain = _normalize_domain(domain)
        limit = self._leaderboard_limit if limit is None else limit
        key = ("leaderboard", domain, period, min_claims, limit)
        if key in self._cache:
            return list(self._cache[key])

        records, _ = await self._records(domain, period)
        entries = await self._rank(records, min_claims, limit)
        logger.info(f"🏆 Leaderboard computed: domain={domain or 'all'}, period={period or 'all'}, {len(entries)} entries")

        self._cache[key] = entries
        return list(entries)

    async def get_analytics(
        self,
        domain: Optional[str] = None,
        period: Optional[str] = None,
    ) -> AnalyticsSnapshot:
        """Totals, breakdowns, histogram, recent activity and top forecasters."""
        domain = _normalize_domain(domain)
        key = ("analytics", domain, period)
        if key in self._cache:
            return self._cache[key]

        records, now = await self._records(domain, period)
        leaderboard = await self._rank(records, None, None)
        snapshot = self._aggregation.snapshot(records, now, leaderboard)
        logger.info(f"📊 Analytics computed: domain={domain or 'all'}, period={period or 'all'}, {snapshot.total_claims} claims")

        self._cache[key] = snapshot
        return snapshot

    async def get_trends(
        self,
        days: int = DEFAULT_TREND_DAYS,
        domain: Optional[str] = None,
    ) -> List[TrendPoint]:
        """Daily points for the last ``days`` days, today included."""
        domain = _normalize_domain(domain)
        today = utc_day(self._clock())
        key = ("trends", domain, days, today)
        if key in self._cache:
            return list(self._cache[key])

        records = await self._repository.list_claim_records(domain=domain)
        points = self._aggregation.trend_series(records, days, today)

        self._cache[key] = points
        return list(points)

    def invalidate(self, claim: Claim, outcome: Optional[Outcome] = None) -> None:
        """Drop cached results affected by a new claim or outcome."""
        stale: List[Hashable] = [
            key for key in list(self._cache.keys())
            if key[1] is None or key[1] == claim.domain
        ]
        for key in stale:
            self._cache.pop(key, None)
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached aggregates for {claim.domain}")

    def clear_cache(self) -> None:
        """Drop every cached result."""
        self._cache.clear()

    def forget_forecaster(self, forecaster: Forecaster) -> None:
        """Drop every cached result after a forecaster changed name."""
        self.clear_cache()
