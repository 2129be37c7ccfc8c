"""Health check endpoints."""

from typing import Dict, List

from fastapi import APIRouter
from pydantic import BaseModel

from ...infrastructure.dependencies import get_service_container

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    storage_backends: Dict[str, bool]
    domains: List[str]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health, storage backends and configured domains."""
    container = get_service_container()
    return HealthResponse(
        status="healthy",
        version="0.1.0",
        storage_backends=container.repository_factory.available_backends,
        domains=list(container.get_domain_ranges().domains),
    )
