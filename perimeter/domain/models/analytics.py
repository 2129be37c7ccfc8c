"""Derived records produced by aggregation and ranking.

None of these are stored: they are recomputed on demand from claims and
outcomes.
"""

from dataclasses import dataclass
from datetime import date as CalendarDate
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .claim import Claim
from .outcome import Outcome


@dataclass(frozen=True)
class ClaimRecord:
    """A claim together with its outcome, if it has one."""

    claim: Claim
    outcome: Optional[Outcome] = None

    @property
    def perimeter_score(self) -> Optional[float]:
        """Score of a resolved claim, None while unresolved."""
        if self.outcome is None:
            return None
        return self.outcome.perimeter_score

    @property
    def is_scored(self) -> bool:
        """Check if the claim is resolved and carries a score."""
        return self.claim.is_resolved and self.perimeter_score is not None


@dataclass
class ForecasterSummary:
    """Per-forecaster statistics over a filtered claim set."""

    forecaster_id: str
    total_claims: int = 0
    resolved_claims: int = 0
    average_perimeter: Optional[float] = None  # None when nothing is scored
    weighted_perimeter: Optional[float] = None


class LeaderboardEntry(BaseModel):
    """One ranked row of the leaderboard."""

    rank: int = Field(..., ge=1, description="1-based position")
    forecaster_id: str
    forecaster_name: str
    forecaster_handle: Optional[str] = None
    total_claims: int
    resolved_claims: int
    average_perimeter: float
    weighted_perimeter: float


class DomainStats(BaseModel):
    """Counts and average score for one domain."""

    total: int = 0
    resolved: int = 0
    average_perimeter: float = 0.0


class ScoreDistribution(BaseModel):
    """Histogram of scored claims.

    excellent [80, 100], good [60, 80), fair [40, 60), poor [0, 40).
    """

    excellent: int = 0
    good: int = 0
    fair: int = 0
    poor: int = 0


class RecentActivity(BaseModel):
    """Activity within the recent-activity window."""

    claims: int = 0
    resolutions: int = 0


class TrendPoint(BaseModel):
    """Aggregates for one calendar day."""

    date: CalendarDate
    claims: int = Field(0, description="Claims created that day")
    resolved: int = Field(0, description="Claims created that day that are now resolved")
    resolutions: int = Field(0, description="Outcomes verified that day")
    average_perimeter: float = Field(0.0, description="Mean score of that day's resolved claims")


class AnalyticsSnapshot(BaseModel):
    """Totals, breakdowns and histogram for a filtered claim set."""

    total_claims: int = 0
    resolved_claims: int = 0
    pending_claims: int = 0
    expired_claims: int = 0
    average_perimeter: float = 0.0
    domain_breakdown: Dict[str, DomainStats] = Field(default_factory=dict)
    type_breakdown: Dict[str, int] = Field(default_factory=dict)
    status_breakdown: Dict[str, int] = Field(default_factory=dict)
    score_distribution: ScoreDistribution = Field(default_factory=ScoreDistribution)
    recent_activity: RecentActivity = Field(default_factory=RecentActivity)
    top_forecasters: List[LeaderboardEntry] = Field(default_factory=list)
