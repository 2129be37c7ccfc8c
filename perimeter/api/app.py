"""FastAPI application for the Perimeter scoring service."""

import contextlib
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Load environment variables from .env file
load_dotenv()

from ..domain.exceptions import (
    ClaimNotFoundError,
    ForecasterNotFoundError,
    OutcomeConflictError,
    ScoringError,
)
from ..infrastructure.dependencies import get_service_container
from ..infrastructure.settings import configure_logging, settings
from .endpoints import analytics, claims, health, leaderboard

# Configure logging
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Create storage on startup and release it on shutdown."""
    container = get_service_container()
    await container.startup()
    logger.info("🚀 Perimeter API started")

    yield  # Application runs here

    await container.shutdown()
    logger.info("🛑 Perimeter API stopped")


# Create FastAPI application
app = FastAPI(
    title="Perimeter API",
    description="Scoring and ranking of public forecasts",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ScoringError)
async def scoring_error_handler(request: Request, exc: ScoringError) -> JSONResponse:
    """Unscorable claim/outcome pairs are caller errors."""
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


@app.exception_handler(ClaimNotFoundError)
@app.exception_handler(ForecasterNotFoundError)
async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unknown claim or forecaster ids."""
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(OutcomeConflictError)
async def conflict_handler(request: Request, exc: OutcomeConflictError) -> JSONResponse:
    """Second resolution of a claim."""
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "claim_id": exc.claim_id},
    )


# Include routers
app.include_router(health.router)
app.include_router(claims.router)
app.include_router(leaderboard.router)
app.include_router(analytics.router)
