"""Infrastructure factory for creating adapters and dependencies.

Centralizes the wiring of store adapters, the order repository and the id
generator so the API layer and tests can swap implementations.
"""

from __future__ import annotations

from ..domain.exceptions import ConfigurationException
from ..domain.models import ServiceConfiguration
from ..ports.configuration import ConfigurationPort
from ..ports.id_generator import OrderIdGeneratorPort
from ..ports.kv_store import KVStorePort
from ..ports.order_repository import OrderRepositoryPort
from .configuration_adapter import EnvironmentConfigurationAdapter
from .id_generators import RandomOrderIdGenerator, SequenceOrderIdGenerator
from .order_repository_adapter import KVOrderRepository
from .redis_kv_store import RedisKVStore


class InfrastructureFactory:
    """Factory for creating infrastructure adapters."""

    @staticmethod
    def create_configuration_port() -> ConfigurationPort:
        """Create a configuration port adapter.

        Returns:
            ConfigurationPort implementation
        """
        return EnvironmentConfigurationAdapter()

    @staticmethod
    def create_kv_store(config: ServiceConfiguration) -> KVStorePort:
        """Create a Redis-backed KV store port adapter.

        The connection pool connects lazily; call ``ping`` to verify it.

        Args:
            config: Service configuration

        Returns:
            KVStorePort implementation
        """
        return RedisKVStore.from_url(
            config.redis_url, socket_timeout=config.store_timeout_seconds
        )

    @staticmethod
    def create_order_repository(
        kv_store: KVStorePort, config: ServiceConfiguration | None = None
    ) -> OrderRepositoryPort:
        """Create an order repository adapter.

        Args:
            kv_store: KV store the repository reads and writes
            config: Optional service configuration for codec and listing behaviour

        Returns:
            OrderRepositoryPort implementation
        """
        if config is None:
            return KVOrderRepository(kv_store)
        return KVOrderRepository(
            kv_store,
            codec=config.order_codec,
            skip_malformed=config.skip_malformed_orders,
        )

    @staticmethod
    def create_id_generator(
        kv_store: KVStorePort, strategy: str = "sequence"
    ) -> OrderIdGeneratorPort:
        """Create an order id generator.

        Args:
            kv_store: KV store holding the id sequence
            strategy: "sequence" or "random"

        Returns:
            OrderIdGeneratorPort implementation

        Raises:
            ConfigurationException: If the strategy is unknown
        """
        if strategy == "sequence":
            return SequenceOrderIdGenerator(kv_store)
        if strategy == "random":
            return RandomOrderIdGenerator()
        raise ConfigurationException(f"Unknown order id strategy: {strategy}")
