"""Service for recording claims and resolving them into scored outcomes."""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from ..exceptions import ClaimNotFoundError, ForecasterNotFoundError, OutcomeConflictError, ScoringError
from ..models.analytics import ClaimRecord
from ..models.claim import Claim, ClaimDraft, ClaimStatus
from ..models.forecaster import Forecaster
from ..models.outcome import ObservedOutcome, Outcome
from ..ports.claim_repository import ClaimRepository
from .score_engine import ScoreEngine

logger = logging.getLogger(__name__)

OutcomeListener = Callable[[Claim, Outcome], None]
ClaimListener = Callable[[Claim], None]
ForecasterListener = Callable[[Forecaster], None]

# Draft fields copied onto the stored claim; forecaster fields are resolved separately
CLAIM_FIELDS = set(ClaimDraft.model_fields) - {
    "forecaster_id", "forecaster_name", "forecaster_handle", "forecaster_platform",
}


class ResolutionService:
    """Coordinates claim storage and scoring.

    The only path that creates outcomes: every outcome gets its score from
    the ScoreEngine, and a claim can be resolved once.
    """

    def __init__(self, repository: ClaimRepository, score_engine: Optional[ScoreEngine] = None):
        """Initialize the service.

        Args:
            repository: Storage for claims, outcomes and forecasters
            score_engine: Scorer for resolutions
        """
        self._repository = repository
        self._engine = score_engine or ScoreEngine()
        self._listeners: List[OutcomeListener] = []
        self._claim_listeners: List[ClaimListener] = []
        self._forecaster_listeners: List[ForecasterListener] = []
        logger.info("🔧 ResolutionService initialized")

    def add_outcome_listener(self, listener: OutcomeListener) -> None:
        """Call ``listener(claim, outcome)`` after every stored outcome."""
        self._listeners.append(listener)

    def add_claim_listener(self, listener: ClaimListener) -> None:
        """Call ``listener(claim)`` after every stored claim."""
        self._claim_listeners.append(listener)

    def add_forecaster_listener(self, listener: ForecasterListener) -> None:
        """Call ``listener(forecaster)`` after a forecaster is renamed."""
        self._forecaster_listeners.append(listener)

    async def _resolve_forecaster(self, draft: ClaimDraft) -> Optional[str]:
        if draft.forecaster_id:
            if await self._repository.get_forecaster(draft.forecaster_id) is None:
                raise ForecasterNotFoundError(f"Forecaster not found: {draft.forecaster_id}")
            return draft.forecaster_id

        if not (draft.forecaster_name or draft.forecaster_handle):
            return None

        platform = draft.forecaster_platform or "manual"
        existing = await self._repository.find_forecaster(draft.forecaster_handle, platform)
        if existing:
            if draft.forecaster_name and draft.forecaster_name != existing.name:
                existing = await self._repository.update_forecaster(
                    existing.model_copy(update={"name": draft.forecaster_name})
                )
                logger.info(f"👤 Renamed forecaster {existing.id} to {existing.name}")
                for listener in self._forecaster_listeners:
                    listener(existing)
            return existing.id

        forecaster = await self._repository.add_forecaster(Forecaster(
            name=draft.forecaster_name or "Unknown",
            handle=draft.forecaster_handle,
            platform=platform,
        ))
        logger.info(f"👤 Registered forecaster {forecaster.name} ({forecaster.id})")
        return forecaster.id

    async def create_claim(self, draft: ClaimDraft, created_at: Optional[datetime] = None) -> Claim:
        """Store a new pending claim.

        Args:
            draft: Validated claim submission
            created_at: Creation time override, for imports

        Returns:
            The stored claim
        """
        forecaster_id = await self._resolve_forecaster(draft)
        fields = draft.model_dump(include=CLAIM_FIELDS)
        if created_at is not None:
            fields["created_at"] = created_at
            fields["updated_at"] = created_at

        claim = await self._repository.add_claim(Claim(forecaster_id=forecaster_id, **fields))
        logger.info(f"📝 Created {claim.claim_type.value} claim {claim.id} in {claim.domain}")

        for listener in self._claim_listeners:
            listener(claim)

        return claim

    async def get_claim(self, claim_id: str) -> ClaimRecord:
        """Claim with its outcome, if any.

        Raises:
            ClaimNotFoundError: If the claim does not exist
        """
        claim = await self._repository.get_claim(claim_id)
        if claim is None:
            raise ClaimNotFoundError(f"Claim not found: {claim_id}")
        return ClaimRecord(claim, await self._repository.get_outcome(claim_id))

    async def list_claims(self, **filters) -> List[Claim]:
        """List claims, passing filters through to storage."""
        return await self._repository.list_claims(**filters)

    async def resolve_claim(
        self,
        claim_id: str,
        observed: ObservedOutcome,
        verified_at: Optional[datetime] = None,
    ) -> Outcome:
        """Score a claim against what happened and store the outcome.

        Args:
            claim_id: Claim to resolve
            observed: Realized value, category or probability
            verified_at: Verification time, defaults to now

        Returns:
            The stored, scored outcome

        Raises:
            ClaimNotFoundError: If the claim does not exist
            OutcomeConflictError: If the claim already has an outcome
            ScoringError: If the pair cannot be scored; nothing is stored
        """
        claim = await self._repository.get_claim(claim_id)
        if claim is None:
            raise ClaimNotFoundError(f"Claim not found: {claim_id}")

        if await self._repository.get_outcome(claim_id) is not None:
            logger.warning(f"⚠️ Rejected second resolution of claim {claim_id}")
            raise OutcomeConflictError(claim_id)

        try:
            score = self._engine.calculate(claim, observed)
        except ScoringError as e:
            logger.warning(f"⚠️ Cannot score claim {claim_id}: {e}")
            raise

        outcome = await self._repository.insert_outcome(
            Outcome.from_observed(claim_id, observed, score, verified_at)
        )
        claim = await self._repository.update_claim_status(claim_id, ClaimStatus.RESOLVED)
        logger.info(f"✅ Resolved claim {claim_id}: perimeter={score:.2f}")

        for listener in self._listeners:
            listener(claim, outcome)

        return outcome
