"""Claim submission, lookup and resolution endpoints."""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from ...domain.models.claim import Claim, ClaimDraft, ClaimStatus
from ...domain.models.outcome import ObservedOutcome, Outcome
from ...domain.services.resolution_service import ResolutionService
from ...infrastructure.dependencies import get_resolution_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/claims", tags=["claims"])


class ClaimDetailResponse(BaseModel):
    """A claim with its outcome, when resolved."""

    claim: Claim
    outcome: Optional[Outcome] = None


class ClaimListResponse(BaseModel):
    """A page of claims."""

    claims: List[Claim]
    limit: int
    offset: int


class ResolveClaimRequest(BaseModel):
    """What actually happened for a claim."""

    actual_value: Optional[float] = Field(None, allow_inf_nan=False, description="Realized numeric value")
    actual_category: Optional[str] = Field(None, description="Realized category")
    actual_probability: Optional[float] = Field(
        None, ge=0, le=1, allow_inf_nan=False, description="Realized event indicator in [0, 1]"
    )
    data_source: Optional[str] = Field(None, description="Where the outcome was verified")
    verified_at: Optional[datetime] = Field(None, description="Verification time, defaults to now")

    def to_observed(self) -> ObservedOutcome:
        """Convert to the domain outcome model."""
        return ObservedOutcome(
            actual_value=self.actual_value,
            actual_category=self.actual_category,
            actual_probability=self.actual_probability,
            data_source=self.data_source,
        )


@router.post("", response_model=Claim, status_code=201)
async def create_claim(
    draft: ClaimDraft,
    service: ResolutionService = Depends(get_resolution_service),
) -> Claim:
    """Record a new pending claim."""
    return await service.create_claim(draft)


@router.get("", response_model=ClaimListResponse)
async def list_claims(
    domain: Optional[str] = Query(None, description="Filter by domain"),
    status: Optional[ClaimStatus] = Query(None, description="Filter by status"),
    forecaster_id: Optional[str] = Query(None, description="Filter by forecaster"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: ResolutionService = Depends(get_resolution_service),
) -> ClaimListResponse:
    """List claims, newest first."""
    claims = await service.list_claims(
        domain=domain,
        status=status,
        forecaster_id=forecaster_id,
        limit=limit,
        offset=offset,
    )
    return ClaimListResponse(claims=claims, limit=limit, offset=offset)


@router.get("/{claim_id}", response_model=ClaimDetailResponse)
async def get_claim(
    claim_id: str,
    service: ResolutionService = Depends(get_resolution_service),
) -> ClaimDetailResponse:
    """Get a claim and its outcome."""
    record = await service.get_claim(claim_id)
    return ClaimDetailResponse(claim=record.claim, outcome=record.outcome)


@router.post("/{claim_id}/resolve", response_model=Outcome, status_code=201)
async def resolve_claim(
    claim_id: str,
    request: ResolveClaimRequest,
    service: ResolutionService = Depends(get_resolution_service),
) -> Outcome:
    """Resolve a claim and return its scored outcome.

    Raises:
        400 if the outcome cannot be scored against the claim,
        404 if the claim does not exist,
        409 if the claim is already resolved.
    """
    logger.info(f"🎯 Resolving claim {claim_id}")
    return await service.resolve_claim(claim_id, request.to_observed(), request.verified_at)
