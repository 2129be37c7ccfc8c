"""Domain models for realized outcomes."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .claim import new_id, utc_now


class ObservedOutcome(BaseModel):
    """What actually happened, as reported by whoever resolves a claim.

    Carries no score: the Perimeter score is always computed, never supplied.
    """

    actual_value: Optional[float] = Field(None, allow_inf_nan=False, description="Realized numeric value")
    actual_category: Optional[str] = Field(None, description="Realized category")
    actual_probability: Optional[float] = Field(
        None, allow_inf_nan=False, description="Realized probability, 0 or 1 for binary events"
    )
    data_source: Optional[str] = Field(None, description="Where the outcome was verified")

    class Config:
        """Pydantic model configuration."""
        frozen = True


class Outcome(ObservedOutcome):
    """A scored outcome, tied 1:1 to a claim and immutable once written."""

    id: str = Field(default_factory=new_id, description="Outcome identifier")
    claim_id: str = Field(..., description="The resolved claim")
    perimeter_score: float = Field(..., ge=0, le=100, description="Computed accuracy score")
    verified_at: datetime = Field(default_factory=utc_now, description="When the outcome was verified")
    created_at: datetime = Field(default_factory=utc_now, description="When the outcome was recorded")

    class Config:
        """Pydantic model configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "claim_id": "0b7c1f7e-6f0e-4c4e-9a51-0d3f0b1b2c3d",
                "actual_value": 3.4,
                "perimeter_score": 99.71,
                "data_source": "BLS CPI release",
            }
        }

    @classmethod
    def from_observed(
        cls,
        claim_id: str,
        observed: ObservedOutcome,
        perimeter_score: float,
        verified_at: Optional[datetime] = None,
    ) -> "Outcome":
        """Attach a computed score to an observed outcome."""
        return cls(
            claim_id=claim_id,
            actual_value=observed.actual_value,
            actual_category=observed.actual_category,
            actual_probability=observed.actual_probability,
            data_source=observed.data_source,
            perimeter_score=perimeter_score,
            verified_at=verified_at or utc_now(),
        )
