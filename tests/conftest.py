"""Test configuration and common fixtures."""

from datetime import datetime, timezone
from typing import Optional

import pytest
import pytest_asyncio

from perimeter.domain.models.analytics import ClaimRecord
from perimeter.domain.models.claim import Claim, ClaimStatus, ClaimType
from perimeter.domain.models.forecaster import Forecaster
from perimeter.domain.models.outcome import Outcome
from perimeter.domain.services.analytics_service import AnalyticsService
from perimeter.domain.services.resolution_service import ResolutionService
from perimeter.domain.services.score_engine import ScoreEngine
from perimeter.infrastructure.storage.memory_repository import InMemoryClaimRepository

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def _build_claim(
    claim_type: ClaimType = ClaimType.NUMERIC,
    domain: str = "economy",
    forecaster_id: Optional[str] = None,
    created_at: datetime = NOW,
    status: ClaimStatus = ClaimStatus.PENDING,
    **predicted,
) -> Claim:
    """Build a claim with sensible defaults for its type."""
    if not predicted:
        predicted = {
            ClaimType.NUMERIC: {"predicted_value": 10.0},
            ClaimType.CATEGORICAL: {"predicted_category": "Biden"},
            ClaimType.PROBABILISTIC: {"predicted_probability": 0.7},
        }[claim_type]
    return Claim(
        text=f"{claim_type.value} prediction",
        domain=domain,
        claim_type=claim_type,
        forecaster_id=forecaster_id,
        status=status,
        created_at=created_at,
        updated_at=created_at,
        **predicted,
    )


def _build_record(
    score: Optional[float],
    forecaster_id: Optional[str] = "f1",
    domain: str = "economy",
    created_at: datetime = NOW,
    verified_at: Optional[datetime] = None,
    claim_type: ClaimType = ClaimType.NUMERIC,
) -> ClaimRecord:
    """Build a record that is resolved with ``score``, or pending when score is None."""
    status = ClaimStatus.PENDING if score is None else ClaimStatus.RESOLVED
    claim = _build_claim(
        claim_type=claim_type,
        domain=domain,
        forecaster_id=forecaster_id,
        created_at=created_at,
        status=status,
    )
    if score is None:
        return ClaimRecord(claim)
    outcome = Outcome(
        claim_id=claim.id,
        actual_value=10.0,
        perimeter_score=score,
        verified_at=verified_at or created_at,
    )
    return ClaimRecord(claim, outcome)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time."""
    return NOW


@pytest.fixture
def score_engine() -> ScoreEngine:
    """Provide a score engine with the built-in ranges."""
    return ScoreEngine()


@pytest_asyncio.fixture
async def repository() -> InMemoryClaimRepository:
    """Provide an initialized in-memory repository."""
    repo = InMemoryClaimRepository()
    await repo.initialize()
    yield repo
    await repo.shutdown()


@pytest_asyncio.fixture
async def forecaster(repository: InMemoryClaimRepository) -> Forecaster:
    """Provide a stored forecaster."""
    return await repository.add_forecaster(Forecaster(id="f1", name="Alice", handle="alice", platform="x"))


@pytest.fixture
def resolution_service(repository, score_engine) -> ResolutionService:
    """Provide a resolution service over the test repository."""
    return ResolutionService(repository, score_engine)


@pytest.fixture
def analytics_service(repository) -> AnalyticsService:
    """Provide an analytics service with a fixed clock."""
    return AnalyticsService(repository, clock=lambda: NOW)


@pytest.fixture
def make_claim():
    """Factory for unsaved claims."""
    return _build_claim


@pytest.fixture
def make_record():
    """Factory for claim records, resolved or pending."""
    return _build_record
