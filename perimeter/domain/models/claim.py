"""Domain model for recorded predictions."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Generate a new entity identifier."""
    return str(uuid4())


class Domain(str, Enum):
    """Prediction domains known out of the box."""

    ECONOMY = "economy"
    POLITICS = "politics"
    TECHNOLOGY = "technology"
    EARTHQUAKES = "earthquakes"


class ClaimType(str, Enum):
    """How a claim encodes its prediction."""

    NUMERIC = "numeric"  # predicted_value
    CATEGORICAL = "categorical"  # predicted_category
    PROBABILISTIC = "probabilistic"  # predicted_probability


class ClaimStatus(str, Enum):
    """Lifecycle status of a claim."""

    PENDING = "pending"
    RESOLVED = "resolved"
    EXPIRED = "expired"
    INVALID = "invalid"


class Claim(BaseModel):
    """A public prediction awaiting or having received an outcome."""

    id: str = Field(default_factory=new_id, description="Claim identifier")
    text: str = Field(..., description="Free-text description of the prediction")
    domain: str = Field(..., description="Prediction domain, e.g. economy")
    subtype: Optional[str] = Field(None, description="Domain subtype used for numeric normalization")
    claim_type: ClaimType = Field(..., description="Prediction encoding")
    predicted_value: Optional[float] = Field(None, allow_inf_nan=False, description="Numeric prediction")
    predicted_category: Optional[str] = Field(None, description="Categorical prediction")
    predicted_probability: Optional[float] = Field(
        None, allow_inf_nan=False, description="Probability prediction, intended range [0, 1]"
    )
    status: ClaimStatus = Field(default=ClaimStatus.PENDING, description="Lifecycle status")
    forecaster_id: Optional[str] = Field(None, description="Forecaster who made the claim")
    source_url: Optional[str] = Field(None, description="Where the claim was published")
    tags: List[str] = Field(default_factory=list, description="Free-form tags")
    deadline: Optional[datetime] = Field(None, description="When the claim should be resolved by")
    created_at: datetime = Field(default_factory=utc_now, description="When the claim was recorded")
    updated_at: datetime = Field(default_factory=utc_now, description="Last status change")

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "text": "US CPI inflation will be 3.1% for March",
                "domain": "economy",
                "subtype": "cpi",
                "claim_type": "numeric",
                "predicted_value": 3.1,
                "status": "pending",
                "tags": ["inflation"],
            }
        }

    @field_validator("domain", mode="before")
    @classmethod
    def _normalize_domain(cls, value):
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @property
    def is_resolved(self) -> bool:
        """Check if the claim has been resolved."""
        return self.status == ClaimStatus.RESOLVED


class ClaimDraft(BaseModel):
    """A new claim as submitted, before it is stored.

    Exactly one predicted field must be set, and it must be the one that
    matches ``claim_type``; nothing is coerced.
    """

    text: str = Field(..., min_length=1, description="Free-text description of the prediction")
    domain: str = Field(..., min_length=1, description="Prediction domain, e.g. economy")
    subtype: Optional[str] = Field(None, description="Domain subtype used for numeric normalization")
    claim_type: ClaimType = Field(..., description="Prediction encoding")
    predicted_value: Optional[float] = Field(None, allow_inf_nan=False)
    predicted_category: Optional[str] = Field(None)
    predicted_probability: Optional[float] = Field(None, ge=0, le=1, allow_inf_nan=False)
    forecaster_id: Optional[str] = Field(None, description="Existing forecaster id")
    forecaster_name: Optional[str] = Field(None, description="Creates or reuses a forecaster")
    forecaster_handle: Optional[str] = Field(None, description="Forecaster username")
    forecaster_platform: Optional[str] = Field(None, description="Forecaster platform")
    source_url: Optional[str] = Field(None)
    tags: List[str] = Field(default_factory=list)
    deadline: Optional[datetime] = Field(None)

    @model_validator(mode="after")
    def _check_prediction_matches_type(self) -> "ClaimDraft":
        populated = {
            ClaimType.NUMERIC: self.predicted_value is not None,
            ClaimType.CATEGORICAL: bool(self.predicted_category and self.predicted_category.strip()),
            ClaimType.PROBABILISTIC: self.predicted_probability is not None,
        }
        set_types = [t for t, is_set in populated.items() if is_set]
        if set_types != [self.claim_type]:
            field = {
                ClaimType.NUMERIC: "predicted_value",
                ClaimType.CATEGORICAL: "predicted_category",
                ClaimType.PROBABILISTIC: "predicted_probability",
            }[self.claim_type]
            raise ValueError(f"A {self.claim_type.value} claim must set {field} and no other predicted field")
        return self
