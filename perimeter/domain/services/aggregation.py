"""Roll per-claim Perimeter scores up into summaries, breakdowns and trends."""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from ..models.analytics import (
    AnalyticsSnapshot,
    ClaimRecord,
    DomainStats,
    ForecasterSummary,
    LeaderboardEntry,
    RecentActivity,
    ScoreDistribution,
    TrendPoint,
)
from ..models.claim import ClaimStatus, Domain
from .score_engine import ScoreEngine

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_DAYS = 7
TOP_FORECASTERS = 10

# Lower bounds of the histogram buckets, checked top down.
EXCELLENT_MIN = 80.0
GOOD_MIN = 60.0
FAIR_MIN = 40.0


def as_utc(moment: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utc_day(moment: datetime) -> date:
    """UTC calendar day of a timestamp."""
    return as_utc(moment).date()


def _enum_value(value) -> str:
    return value.value if hasattr(value, "value") else str(value)


def _mean(values: Sequence[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def filter_records(
    records: Iterable[ClaimRecord],
    domain: Optional[str] = None,
    since: Optional[datetime] = None,
) -> List[ClaimRecord]:
    """Keep records in a domain and created at or after ``since``."""
    wanted = domain.strip().lower() if domain else None
    cutoff = as_utc(since) if since else None

    kept = []
    for record in records:
        if wanted and record.claim.domain.lower() != wanted:
            continue
        if cutoff and as_utc(record.claim.created_at) < cutoff:
            continue
        kept.append(record)
    return kept


def bucket_for(score: float) -> str:
    """Histogram bucket name for a score in [0, 100]."""
    if score >= EXCELLENT_MIN:
        return "excellent"
    if score >= GOOD_MIN:
        return "good"
    if score >= FAIR_MIN:
        return "fair"
    return "poor"


class AggregationEngine:
    """Stateless aggregation over an already filtered set of claim records.

    Scores come from the outcomes attached to each record; the engine only
    uses the ScoreEngine for its weighted-average helper.
    """

    def __init__(
        self,
        score_engine: Optional[ScoreEngine] = None,
        known_domains: Optional[Iterable[str]] = None,
    ):
        """Initialize the engine.

        Args:
            score_engine: Provides the weighted-average helper
            known_domains: Domains always listed in the domain breakdown
        """
        self.score_engine = score_engine or ScoreEngine()
        if known_domains is None:
            known_domains = [d.value for d in Domain]
        self.known_domains = list(known_domains)

    def summarize_forecasters(self, records: Iterable[ClaimRecord]) -> Dict[str, ForecasterSummary]:
        """Per-forecaster totals and scores.

        Claims without a forecaster are not attributed to anyone.
        """
        grouped: Dict[str, List[ClaimRecord]] = defaultdict(list)
        for record in records:
            if record.claim.forecaster_id:
                grouped[record.claim.forecaster_id].append(record)

        summaries = {}
        for forecaster_id, owned in grouped.items():
            scored = [r for r in owned if r.is_scored]
            weighted = None
            if scored:
                weighted = self.score_engine.weighted_average(
                    (r.claim, r.outcome) for r in scored
                )
            summaries[forecaster_id] = ForecasterSummary(
                forecaster_id=forecaster_id,
                total_claims=len(owned),
                resolved_claims=sum(1 for r in owned if r.claim.is_resolved),
                average_perimeter=_mean([r.perimeter_score for r in scored]),
                weighted_perimeter=weighted,
            )

        return summaries

    def domain_breakdown(self, records: Iterable[ClaimRecord]) -> Dict[str, DomainStats]:
        """Totals, resolved counts and mean score per domain."""
        grouped: Dict[str, List[ClaimRecord]] = {d: [] for d in self.known_domains}
        for record in records:
            grouped.setdefault(record.claim.domain, []).append(record)

        breakdown = {}
        for domain, owned in grouped.items():
            scores = [r.perimeter_score for r in owned if r.is_scored]
            breakdown[domain] = DomainStats(
                total=len(owned),
                resolved=sum(1 for r in owned if r.claim.is_resolved),
                average_perimeter=_mean(scores) or 0.0,
            )
        return breakdown

    def type_breakdown(self, records: Iterable[ClaimRecord]) -> Dict[str, int]:
        """Claim counts per claim type."""
        counts: Dict[str, int] = defaultdict(int)
        for record in records:
            counts[_enum_value(record.claim.claim_type)] += 1
        return dict(counts)

    def status_breakdown(self, records: Iterable[ClaimRecord]) -> Dict[str, int]:
        """Claim counts per status."""
        counts: Dict[str, int] = defaultdict(int)
        for record in records:
            counts[_enum_value(record.claim.status)] += 1
        return dict(counts)

    def score_distribution(self, records: Iterable[ClaimRecord]) -> ScoreDistribution:
        """Histogram of resolved, scored claims."""
        counts = {"excellent": 0, "good": 0, "fair": 0, "poor": 0}
        for record in records:
            if record.is_scored:
                counts[bucket_for(record.perimeter_score)] += 1
        return ScoreDistribution(**counts)

    def recent_activity(
        self,
        records: Iterable[ClaimRecord],
        now: datetime,
        days: int = RECENT_ACTIVITY_DAYS,
    ) -> RecentActivity:
        """Claims created and outcomes verified within the last ``days``."""
        cutoff = as_utc(now) - timedelta(days=days)
        claims = 0
        resolutions = 0
        for record in records:
            if as_utc(record.claim.created_at) >= cutoff:
                claims += 1
            if record.outcome is not None and as_utc(record.outcome.verified_at) >= cutoff:
                resolutions += 1
        return RecentActivity(claims=claims, resolutions=resolutions)

    def trend_series(
        self,
        records: Iterable[ClaimRecord],
        days: int,
        today: date,
    ) -> List[TrendPoint]:
        """One point per day for the last ``days`` days, oldest first.

        ``resolved`` and ``average_perimeter`` follow the creation day of each
        claim; ``resolutions`` counts outcomes by the day they were verified.
        """
        if days <= 0:
            return []

        first_day = today - timedelta(days=days - 1)
        created: Dict[date, List[ClaimRecord]] = defaultdict(list)
        verified: Dict[date, int] = defaultdict(int)

        for record in records:
            created[utc_day(record.claim.created_at)].append(record)
            if record.outcome is not None:
                verified[utc_day(record.outcome.verified_at)] += 1

        points = []
        for offset in range(days):
            day = first_day + timedelta(days=offset)
            day_records = created.get(day, [])
            scores = [r.perimeter_score for r in day_records if r.is_scored]
            points.append(TrendPoint(
                date=day,
                claims=len(day_records),
                resolved=sum(1 for r in day_records if r.claim.is_resolved),
                resolutions=verified.get(day, 0),
                average_perimeter=_mean(scores) or 0.0,
            ))
        return points

    def snapshot(
        self,
        records: Sequence[ClaimRecord],
        now: datetime,
        leaderboard: Optional[List[LeaderboardEntry]] = None,
    ) -> AnalyticsSnapshot:
        """Totals, breakdowns, histogram and recent activity in one record."""
        statuses = self.status_breakdown(records)
        scores = [r.perimeter_score for r in records if r.is_scored]

        snapshot = AnalyticsSnapshot(
            total_claims=len(records),
            resolved_claims=statuses.get(ClaimStatus.RESOLVED.value, 0),
            pending_claims=statuses.get(ClaimStatus.PENDING.value, 0),
            expired_claims=statuses.get(ClaimStatus.EXPIRED.value, 0),
            average_perimeter=_mean(scores) or 0.0,
            domain_breakdown=self.domain_breakdown(records),
            type_breakdown=self.type_breakdown(records),
            status_breakdown=statuses,
            score_distribution=self.score_distribution(records),
            recent_activity=self.recent_activity(records, now),
            top_forecasters=(leaderboard or [])[:TOP_FORECASTERS],
        )
        logger.debug(f"Aggregated {snapshot.total_claims} claims, {snapshot.resolved_claims} resolved")
        return snapshot
