"""Connection manager for infrastructure resources.

Owns the single store handle shared by every request for the lifetime of
the process and the adapters built on top of it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..domain.exceptions import KVStoreError, StoreUnavailableException
from ..ports.id_generator import OrderIdGeneratorPort
from ..ports.kv_store import KVStorePort
from ..ports.order_repository import OrderRepositoryPort
from .factory import InfrastructureFactory

if TYPE_CHECKING:
    from ..domain.models import ServiceConfiguration

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages infrastructure connections lifecycle."""

    def __init__(self, config: ServiceConfiguration, kv_store: KVStorePort | None = None):
        """Initialize the connection manager.

        Args:
            config: Service configuration
            kv_store: Optional pre-built store; a Redis store is created otherwise
        """
        self.config = config
        self._kv_store = kv_store
        self._order_repository: OrderRepositoryPort | None = None
        self._id_generator: OrderIdGeneratorPort | None = None

    async def startup(self) -> None:
        """Open the store and build the repository during application startup.

        Raises:
            StoreUnavailableException: If the store cannot be reached
        """
        if self._kv_store is None:
            logger.info(f"Connecting to Redis at {self.config.redis_url}")
            self._kv_store = InfrastructureFactory.create_kv_store(self.config)

        try:
            await self._kv_store.ping()
        except KVStoreError as e:
            logger.error(f"Failed to initialize connections: {e.message}")
            await self._kv_store.close()
            self._kv_store = None
            raise StoreUnavailableException(f"Failed to initialize connections: {e.message}") from e

        self._order_repository = InfrastructureFactory.create_order_repository(
            self._kv_store, self.config
        )
        self._id_generator = InfrastructureFactory.create_id_generator(
            self._kv_store, self.config.order_id_strategy
        )
        logger.info("Order store connected and repository initialized")

    async def shutdown(self) -> None:
        """Clean up all connections during application shutdown."""
        if self._kv_store is None:
            return
        try:
            await self._kv_store.close()
            logger.info("Disconnected from order store")
        except Exception as e:
            logger.error(f"Error during shutdown: {e}")
        finally:
            self._kv_store = None
            self._order_repository = None
            self._id_generator = None

    @property
    def kv_store(self) -> KVStorePort:
        """Get the KV Store instance.

        Raises:
            StoreUnavailableException: If not initialized
        """
        if self._kv_store is None:
            raise StoreUnavailableException("KV Store not initialized. Call startup() first.")
        return self._kv_store

    @property
    def order_repository(self) -> OrderRepositoryPort:
        """Get the order repository.

        Raises:
            StoreUnavailableException: If not initialized
        """
        if self._order_repository is None:
            raise StoreUnavailableException(
                "Order repository not initialized. Call startup() first."
            )
        return self._order_repository

    @property
    def id_generator(self) -> OrderIdGeneratorPort:
        """Get the order id generator.

        Raises:
            StoreUnavailableException: If not initialized
        """
        if self._id_generator is None:
            raise StoreUnavailableException("Id generator not initialized. Call startup() first.")
        return self._id_generator


# Global instance managed by the application lifecycle
_connection_manager: ConnectionManager | None = None


def get_connection_manager() -> ConnectionManager:
    """Get the global connection manager instance.

    Raises:
        RuntimeError: If not initialized
    """
    if not _connection_manager:
        raise RuntimeError("Connection manager not initialized")
    return _connection_manager


def set_connection_manager(manager: ConnectionManager | None) -> None:
    """Set the global connection manager instance."""
    global _connection_manager
    _connection_manager = manager
