"""Dependency injection configuration for hexagonal architecture."""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from ..domain.services.aggregation import AggregationEngine
from ..domain.services.analytics_service import AnalyticsService
from ..domain.services.domain_ranges import DomainRangeRegistry
from ..domain.services.ranking import RankingPolicy
from ..domain.services.resolution_service import ResolutionService
from ..domain.services.score_engine import ScoreEngine
from .settings import PerimeterSettings, settings as default_settings
from .storage.factory import RepositoryFactory

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Service container for dependency injection.

    Pure engines are built eagerly. Storage needs an async initialize, so the
    repository and the services that use it are created on first use.
    """

    def __init__(self, config: Optional[PerimeterSettings] = None):
        """Initialize service container."""
        self.settings = config or default_settings
        self.repository_factory = RepositoryFactory()
        self._services: Dict[str, Any] = {}
        self._setup_engines()

    def _setup_engines(self):
        """Setup the stateless scoring and aggregation engines."""
        logger.info("🔧 Setting up service container...")

        if self.settings.domain_ranges_file:
            ranges = DomainRangeRegistry.from_file(self.settings.domain_ranges_file)
        else:
            ranges = DomainRangeRegistry()

        score_engine = ScoreEngine(ranges)
        self._services = {
            'domain_ranges': ranges,
            'score_engine': score_engine,
            'aggregation_engine': AggregationEngine(score_engine),
            'ranking_policy': RankingPolicy(min_claims=self.settings.default_min_claims),
            'repository': None,
            'resolution_service': None,
            'analytics_service': None,
        }

    async def startup(self) -> None:
        """Create the storage backend and the services built on it."""
        if self._services['repository'] is not None:
            return

        backend = self.settings.storage_backend
        logger.info(f"🗄️ Creating storage backend: {backend}")
        repository = await self.repository_factory.create_backend(backend)

        resolution_service = ResolutionService(repository, self._services['score_engine'])
        analytics_service = AnalyticsService(
            repository,
            aggregation=self._services['aggregation_engine'],
            ranking=self._services['ranking_policy'],
            cache_ttl=self.settings.cache_ttl,
            cache_maxsize=self.settings.cache_maxsize,
            leaderboard_limit=self.settings.leaderboard_limit,
        )
        resolution_service.add_claim_listener(analytics_service.invalidate)
        resolution_service.add_outcome_listener(analytics_service.invalidate)
        resolution_service.add_forecaster_listener(analytics_service.forget_forecaster)

        self._services.update({
            'repository': repository,
            'resolution_service': resolution_service,
            'analytics_service': analytics_service,
        })
        logger.info("✅ Service container setup completed")

    async def shutdown(self) -> None:
        """Shutdown storage and forget the services built on it."""
        await self.repository_factory.shutdown_all()
        for name in ('repository', 'resolution_service', 'analytics_service'):
            self._services[name] = None

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Args:
            service_name: Name of the service

        Returns:
            Service instance

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    def get_domain_ranges(self) -> DomainRangeRegistry:
        """Get domain range registry."""
        return self.get('domain_ranges')

    async def get_resolution_service(self) -> ResolutionService:
        """Get resolution service with storage."""
        await self.startup()
        return self.get('resolution_service')

    async def get_analytics_service(self) -> AnalyticsService:
        """Get analytics service with storage."""
        await self.startup()
        return self.get('analytics_service')


# Global service container instance
@lru_cache()
def get_service_container() -> ServiceContainer:
    """Get global service container instance.

    Returns:
        Service container instance
    """
    return ServiceContainer()


# Convenience functions for FastAPI dependency injection
async def get_resolution_service() -> ResolutionService:
    """FastAPI dependency for the resolution service."""
    return await get_service_container().get_resolution_service()


async def get_analytics_service() -> AnalyticsService:
    """FastAPI dependency for the analytics service."""
    return await get_service_container().get_analytics_service()
