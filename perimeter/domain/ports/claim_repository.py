"""Storage port for claims, outcomes and forecasters."""

from datetime import datetime
from typing import List, Optional, Protocol

from ..models.analytics import ClaimRecord
from ..models.claim import Claim, ClaimStatus
from ..models.forecaster import Forecaster
from ..models.outcome import Outcome


class ClaimRepository(Protocol):
    """Protocol for claim storage backends.

    Implementations own every entity. They must guarantee at most one
    outcome per claim: ``insert_outcome`` raises ``OutcomeConflictError``
    instead of overwriting, even when two resolutions race.
    """

    async def initialize(self) -> None:
        """Open connections or load data."""
        ...

    async def shutdown(self) -> None:
        """Release resources."""
        ...

    async def add_claim(self, claim: Claim) -> Claim:
        """Store a new claim."""
        ...

    async def get_claim(self, claim_id: str) -> Optional[Claim]:
        """Look up a claim by id."""
        ...

    async def update_claim_status(self, claim_id: str, status: ClaimStatus) -> Claim:
        """Change a claim's status and return the updated claim."""
        ...

    async def list_claims(
        self,
        domain: Optional[str] = None,
        status: Optional[ClaimStatus] = None,
        forecaster_id: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Claim]:
        """List claims, newest first."""
        ...

    async def list_claim_records(
        self,
        domain: Optional[str] = None,
        since: Optional[datetime] = None,
    ) -> List[ClaimRecord]:
        """Claims with their outcomes, filtered by domain and creation time."""
        ...

    async def get_outcome(self, claim_id: str) -> Optional[Outcome]:
        """Outcome of a claim, if resolved."""
        ...

    async def insert_outcome(self, outcome: Outcome) -> Outcome:
        """Store the single outcome of a claim.

        Raises:
            OutcomeConflictError: If the claim already has an outcome
        """
        ...

    async def add_forecaster(self, forecaster: Forecaster) -> Forecaster:
        """Store a new forecaster."""
        ...

    async def get_forecaster(self, forecaster_id: str) -> Optional[Forecaster]:
        """Look up a forecaster by id."""
        ...

    async def find_forecaster(
        self,
        handle: Optional[str],
        platform: Optional[str],
    ) -> Optional[Forecaster]:
        """Look up a forecaster by handle and platform."""
        ...

    async def update_forecaster(self, forecaster: Forecaster) -> Forecaster:
        """Replace a stored forecaster."""
        ...

    async def list_forecasters(self) -> List[Forecaster]:
        """All forecasters."""
        ...

    @property
    def backend_name(self) -> str:
        """Name of the storage backend."""
        ...
