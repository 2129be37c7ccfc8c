"""In-memory implementation of the claim repository port."""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from ...domain.exceptions import ClaimNotFoundError, ForecasterNotFoundError, OutcomeConflictError
from ...domain.models.analytics import ClaimRecord
from ...domain.models.claim import Claim, ClaimStatus, utc_now
from ...domain.models.forecaster import Forecaster
from ...domain.models.outcome import Outcome
from ...domain.ports.claim_repository import ClaimRepository
from ...domain.services.aggregation import filter_records

logger = logging.getLogger(__name__)


class InMemoryClaimRepository(ClaimRepository):
    """Dictionary-backed storage for development, tests and the CLI.

    Outcome inserts are serialized by a lock so the one-outcome-per-claim
    check and the write happen atomically.
    """

    def __init__(self, provider_name: str = "memory"):
        """Initialize empty storage."""
        self._name = provider_name
        self._claims: Dict[str, Claim] = {}
        self._outcomes: Dict[str, Outcome] = {}
        self._forecasters: Dict[str, Forecaster] = {}
        self._outcome_lock = asyncio.Lock()
        self._initialized = False

    async def initialize(self) -> None:
        """Nothing to connect to."""
        self._initialized = True
        logger.info("🗄️ In-memory claim repository ready")

    async def shutdown(self) -> None:
        """Drop all stored data."""
        self._claims.clear()
        self._outcomes.clear()
        self._forecasters.clear()
        self._initialized = False

    @property
    def backend_name(self) -> str:
        """Get the backend name."""
        return self._name

    @property
    def is_available(self) -> bool:
        """Check if the repository is ready."""
        return self._initialized

    async def add_claim(self, claim: Claim) -> Claim:
        if claim.id in self._claims:
            raise ValueError(f"Claim {claim.id} already exists")
        self._claims[claim.id] = claim
        return claim

    async def get_claim(self, claim_id: str) -> Optional[Claim]:
        return self._claims.get(claim_id)

    async def update_claim_status(self, claim_id: str, status: ClaimStatus) -> Claim:
        claim = self._claims.get(claim_id)
        if claim is None:
            raise ClaimNotFoundError(f"Claim not found: {claim_id}")
        updated = claim.model_copy(update={"status": status, "updated_at": utc_now()})
        self._claims[claim_id] = updated
        return updated

    async def list_claims(
        self,
        domain: Optional[str] = None,
        status: Optional[ClaimStatus] = None,
        forecaster_id: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Claim]:
        records = filter_records(
            (ClaimRecord(claim) for claim in self._claims.values()),
            domain=domain,
            since=since,
        )
        claims = [
            r.claim for r in records
            if (status is None or r.claim.status == status)
            and (forecaster_id is None or r.claim.forecaster_id == forecaster_id)
        ]
        claims.sort(key=lambda c: (c.created_at, c.id), reverse=True)
        return claims[offset:offset + limit]

    async def list_claim_records(
        self,
        domain: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> List[ClaimRecord]:
        records = (
            ClaimRecord(claim, self._outcomes.get(claim_id))
            for claim_id, claim in self._claims.items()
        )
        return filter_records(records, domain=domain, since=since)

    async def get_outcome(self, claim_id: str) -> Optional[Outcome]:
        return self._outcomes.get(claim_id)

    async def insert_outcome(self, outcome: Outcome) -> Outcome:
        async with self._outcome_lock:
            if outcome.claim_id not in self._claims:
                raise ClaimNotFoundError(f"Claim not found: {outcome.claim_id}")
            if outcome.claim_id in self._outcomes:
                raise OutcomeConflictError(outcome.claim_id)
            self._outcomes[outcome.claim_id] = outcome
        return outcome

    async def add_forecaster(self, forecaster: Forecaster) -> Forecaster:
        if forecaster.id in self._forecasters:
            raise ValueError(f"Forecaster {forecaster.id} already exists")
        self._forecasters[forecaster.id] = forecaster
        return forecaster

    async def get_forecaster(self, forecaster_id: str) -> Optional[Forecaster]:
        return self._forecasters.get(forecaster_id)

    async def find_forecaster(
        self,
        handle: Optional[str],
        platform: Optional[str],
    ) -> Optional[Forecaster]:
        if not handle:
            return None
        for forecaster in self._forecasters.values():
            if forecaster.handle == handle and forecaster.platform == platform:
                return forecaster
        return None

    async def update_forecaster(self, forecaster: Forecaster) -> Forecaster:
        if forecaster.id not in self._forecasters:
            raise ForecasterNotFoundError(f"Forecaster not found: {forecaster.id}")
        self._forecasters[forecaster.id] = forecaster
        return forecaster

    async def list_forecasters(self) -> List[Forecaster]:
        return list(self._forecasters.values())
