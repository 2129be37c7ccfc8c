"""Command line scoring of a forecast dataset.

Usage::

    python -m perimeter.main DATASET.json [--period 6m] [--domain economy]

The dataset is a JSON object with ``forecasters`` and ``claims``; each claim
may carry an ``outcome`` with the actual value, category or probability.
"""

import argparse
import asyncio
import json
import logging
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .domain.exceptions import PerimeterError
from .domain.models.claim import ClaimDraft
from .domain.models.forecaster import Forecaster
from .domain.models.outcome import ObservedOutcome
from .domain.services.aggregation import AggregationEngine
from .domain.services.analytics_service import AnalyticsService
from .domain.services.domain_ranges import DomainRangeRegistry
from .domain.services.ranking import RankingPolicy
from .domain.services.resolution_service import ResolutionService
from .domain.services.score_engine import ScoreEngine
from .infrastructure.settings import configure_logging, settings
from .infrastructure.storage.factory import RepositoryFactory

logger = logging.getLogger(__name__)


class DatasetOutcome(ObservedOutcome):
    """Outcome entry of a dataset claim."""

    verified_at: Optional[datetime] = None


class DatasetClaim(ClaimDraft):
    """Claim entry of a dataset."""

    created_at: Optional[datetime] = None
    outcome: Optional[DatasetOutcome] = None


class Dataset(BaseModel):
    """A batch of forecasters and their claims."""

    forecasters: List[Forecaster] = Field(default_factory=list)
    claims: List[DatasetClaim] = Field(default_factory=list)


def load_dataset(path: str) -> Dataset:
    """Read and validate a dataset file."""
    with open(path, "r", encoding="utf-8") as f:
        return Dataset.model_validate(json.load(f))


async def score_dataset(dataset: Dataset, args: argparse.Namespace) -> AnalyticsService:
    """Load a dataset into memory, resolve its claims and return analytics over it."""
    ranges = DomainRangeRegistry.from_file(args.ranges) if args.ranges else DomainRangeRegistry()
    engine = ScoreEngine(ranges)

    factory = RepositoryFactory()
    repository = await factory.create_backend("memory")

    resolution = ResolutionService(repository, engine)
    analytics = AnalyticsService(
        repository,
        aggregation=AggregationEngine(engine),
        ranking=RankingPolicy(min_claims=args.min_claims),
    )

    for forecaster in dataset.forecasters:
        await repository.add_forecaster(forecaster)

    resolved = 0
    skipped = 0
    for entry in dataset.claims:
        claim = await resolution.create_claim(entry, created_at=entry.created_at)
        if entry.outcome is None:
            continue
        try:
            await resolution.resolve_claim(claim.id, entry.outcome, entry.outcome.verified_at)
            resolved += 1
        except PerimeterError as e:
            logger.warning(f"⚠️ Skipping claim {claim.id}: {e}")
            skipped += 1

    logger.info(f"📦 Loaded {len(dataset.claims)} claims, resolved {resolved}, skipped {skipped}")
    return analytics


async def main(argv: Optional[List[str]] = None) -> int:
    """Score a dataset and print the leaderboard and daily trends."""
    parser = argparse.ArgumentParser(description="Score forecasts and rank forecasters")
    parser.add_argument("dataset", help="Path to a JSON dataset")
    parser.add_argument("--period", default=None, help="Window: 1y, 6m, 3m, 1m or 7d")
    parser.add_argument("--domain", default=None, help="Only claims in this domain")
    parser.add_argument("--min-claims", type=int, default=settings.default_min_claims,
                        help="Minimum resolved claims per forecaster")
    parser.add_argument("--limit", type=int, default=settings.leaderboard_limit, help="Leaderboard size")
    parser.add_argument("--trend-days", type=int, default=settings.trend_days, help="Days of trend output")
    parser.add_argument("--ranges", default=settings.domain_ranges_file, help="JSON domain range overrides")
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)

    analytics = await score_dataset(load_dataset(args.dataset), args)
    leaderboard = await analytics.get_leaderboard(
        domain=args.domain, period=args.period, limit=args.limit
    )
    trends = await analytics.get_trends(days=args.trend_days, domain=args.domain)

    print("Perimeter Leaderboard")
    print("---------------------")
    if not leaderboard:
        print("No forecasters with enough resolved claims.")
    for entry in leaderboard:
        print(
            f"{entry.rank:>3}. {entry.forecaster_name:<24} "
            f"weighted={entry.weighted_perimeter:6.2f} "
            f"average={entry.average_perimeter:6.2f} "
            f"resolved={entry.resolved_claims}/{entry.total_claims}"
        )

    print("\nDaily Trends")
    print("------------")
    for point in trends:
        if point.claims or point.resolutions:
            print(
                f"{point.date.isoformat()}  claims={point.claims} "
                f"resolutions={point.resolutions} average={point.average_perimeter:.2f}"
            )

    return 0


def run() -> None:
    """Console entry point."""
    raise SystemExit(asyncio.run(main()))


if __name__ == "__main__":
    run()
