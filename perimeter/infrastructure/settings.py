"""Environment-driven configuration."""

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Load environment variables from .env file if it exists
load_dotenv()


class PerimeterSettings(BaseModel):
    """Runtime configuration for the Perimeter service."""

    storage_backend: str = Field(default="memory", description="Registered storage backend name")
    cache_ttl: int = Field(default=300, ge=0, description="Aggregate cache TTL in seconds")
    cache_maxsize: int = Field(default=256, ge=1, description="Maximum cached aggregates")
    domain_ranges_file: Optional[str] = Field(None, description="JSON file with extra normalization ranges")
    default_min_claims: int = Field(default=1, ge=0, description="Default leaderboard threshold")
    leaderboard_limit: int = Field(default=100, ge=1, description="Default leaderboard size")
    trend_days: int = Field(default=30, ge=1, description="Default trend window in days")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    log_level: str = Field(default="INFO", description="Root log level")

    @classmethod
    def from_env(cls) -> "PerimeterSettings":
        """Create configuration from environment variables."""
        origins = os.getenv("PERIMETER_CORS_ORIGINS", "*")
        ranges_file = os.getenv("PERIMETER_DOMAIN_RANGES_FILE") or None

        if ranges_file:
            logger.info(f"📐 Domain range overrides configured: {ranges_file}")

        return cls(
            storage_backend=os.getenv("PERIMETER_STORAGE_BACKEND", "memory"),
            cache_ttl=int(os.getenv("PERIMETER_CACHE_TTL", "300")),
            cache_maxsize=int(os.getenv("PERIMETER_CACHE_MAXSIZE", "256")),
            domain_ranges_file=ranges_file,
            default_min_claims=int(os.getenv("PERIMETER_DEFAULT_MIN_CLAIMS", "1")),
            leaderboard_limit=int(os.getenv("PERIMETER_LEADERBOARD_LIMIT", "100")),
            trend_days=int(os.getenv("PERIMETER_TREND_DAYS", "30")),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("PERIMETER_LOG_LEVEL", "INFO").upper(),
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for an entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


# Global instance - initialized from environment
settings = PerimeterSettings.from_env()
