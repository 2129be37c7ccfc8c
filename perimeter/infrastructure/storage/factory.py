"""Registry of claim storage backends."""

import logging
from typing import Dict, Type

from ...domain.ports.claim_repository import ClaimRepository
from .memory_repository import InMemoryClaimRepository

logger = logging.getLogger(__name__)


class RepositoryFactory:
    """Maps backend names to repository classes and owns the live instances.

    At most one instance per name is alive; asking for an active backend
    again returns it instead of opening a second store.
    """

    def __init__(self):
        """Initialize the factory with the in-memory backend registered."""
        self._backend_registry: Dict[str, Type[ClaimRepository]] = {
            "memory": InMemoryClaimRepository,
        }
        self._active_backends: Dict[str, ClaimRepository] = {}

    def register_backend(self, name: str, backend_class: Type[ClaimRepository]) -> None:
        """Register a storage backend class under a unique name."""
        if name in self._backend_registry:
            raise ValueError(f"Backend {name} already registered")
        self._backend_registry[name] = backend_class

    async def create_backend(self, name: str, **config) -> ClaimRepository:
        """Return the active backend, creating and initializing it if needed.

        Raises:
            ValueError: If backend not registered
            RuntimeError: If initialization fails
        """
        if name in self._active_backends:
            return self._active_backends[name]
        if name not in self._backend_registry:
            raise ValueError(f"Backend {name} not registered")

        backend = self._backend_registry[name](**config)
        try:
            await backend.initialize()
        except Exception as e:
            raise RuntimeError(f"Failed to initialize backend {name}: {e}") from e

        self._active_backends[name] = backend
        return backend

    async def shutdown_all(self) -> None:
        """Shutdown and forget every active backend."""
        while self._active_backends:
            name, backend = self._active_backends.popitem()
            await backend.shutdown()
            logger.info(f"🛑 Storage backend {name} shut down")

    @property
    def available_backends(self) -> Dict[str, bool]:
        """Registered backend names and whether each is active."""
        return {name: name in self._active_backends for name in self._backend_registry}
