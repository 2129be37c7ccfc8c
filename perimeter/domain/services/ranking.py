"""Leaderboard ordering and time-window filters."""

import logging
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional

from ..models.analytics import ForecasterSummary, LeaderboardEntry
from ..models.forecaster import Forecaster

logger = logging.getLogger(__name__)

PERIOD_DAYS: Dict[str, int] = {
    "1y": 365,
    "6m": 180,
    "3m": 90,
    "1m": 30,
    "7d": 7,
}
DEFAULT_PERIOD_DAYS = 365
DEFAULT_MIN_CLAIMS = 1


def period_to_days(period: Optional[str]) -> Optional[int]:
    """Map a period token to a day count.

    Returns:
        Day count, 365 for unrecognized tokens, or None for all time
    """
    if not period:
        return None
    days = PERIOD_DAYS.get(period.strip().lower())
    if days is None:
        logger.warning(f"⚠️ Unknown period '{period}', defaulting to {DEFAULT_PERIOD_DAYS} days")
        return DEFAULT_PERIOD_DAYS
    return days


def window_start(period: Optional[str], now: datetime) -> Optional[datetime]:
    """Earliest claim creation time included by a period, None for all time."""
    days = period_to_days(period)
    if days is None:
        return None
    return now - timedelta(days=days)


def _score_key(value: Optional[float]) -> tuple:
    # Missing scores sort after every real score in a descending sort.
    return (0, 0.0) if value is None else (1, value)


class RankingPolicy:
    """Orders forecaster summaries into a leaderboard.

    Primary key weighted_perimeter, secondary average_perimeter, both
    descending with missing scores last; remaining ties are broken by
    forecaster id so repeated calls give the same order.
    """

    def __init__(self, min_claims: int = DEFAULT_MIN_CLAIMS):
        self.min_claims = min_claims

    def order(self, summaries: Iterable[ForecasterSummary]) -> List[ForecasterSummary]:
        """Sort summaries, best first."""
        by_id = sorted(summaries, key=lambda s: s.forecaster_id)
        return sorted(
            by_id,
            key=lambda s: (_score_key(s.weighted_perimeter), _score_key(s.average_perimeter)),
            reverse=True,
        )

    def rank(
        self,
        summaries: Iterable[ForecasterSummary],
        forecasters: Mapping[str, Forecaster],
        min_claims: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[LeaderboardEntry]:
        """Build leaderboard entries.

        Args:
            summaries: Per-forecaster statistics
            forecasters: Forecaster records by id, for names and handles
            min_claims: Minimum resolved claims to be listed
            limit: Maximum number of entries

        Returns:
            Ranked entries, rank 1 first
        """
        threshold = self.min_claims if min_claims is None else min_claims
        eligible = [s for s in summaries if s.resolved_claims >= threshold]

        entries = []
        for position, summary in enumerate(self.order(eligible), start=1):
            if limit is not None and position > limit:
                break
            forecaster = forecasters.get(summary.forecaster_id)
            entries.append(LeaderboardEntry(
                rank=position,
                forecaster_id=summary.forecaster_id,
                forecaster_name=forecaster.name if forecaster else "Unknown",
                forecaster_handle=forecaster.handle if forecaster else None,
                total_claims=summary.total_claims,
                resolved_claims=summary.resolved_claims,
                average_perimeter=summary.average_perimeter or 0.0,
                weighted_perimeter=summary.weighted_perimeter or 0.0,
            ))

        return entries
