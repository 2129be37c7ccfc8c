"""Domain model for forecasters."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .claim import new_id, utc_now


class Forecaster(BaseModel):
    """Author of one or more claims."""

    id: str = Field(default_factory=new_id, description="Forecaster identifier")
    name: str = Field(..., description="Display name")
    handle: Optional[str] = Field(None, description="Username on the publishing platform")
    platform: Optional[str] = Field(None, description="Publishing platform, e.g. twitter")
    verified: bool = Field(default=False, description="Whether the identity was verified")
    created_at: datetime = Field(default_factory=utc_now, description="When the forecaster was recorded")

    class Config:
        """Pydantic model configuration."""
        frozen = True
