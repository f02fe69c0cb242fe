"""Infrastructure layer: store adapters, repository and wiring."""

from .configuration_adapter import EnvironmentConfigurationAdapter
from .connection_manager import ConnectionManager
from .factory import InfrastructureFactory
from .id_generators import RandomOrderIdGenerator, SequenceOrderIdGenerator
from .in_memory_kv_store import InMemoryKVStore
from .order_repository_adapter import KVOrderRepository
from .redis_kv_store import RedisKVStore
from .system_clock import SystemClock

__all__ = [
    "ConnectionManager",
    "EnvironmentConfigurationAdapter",
    "InMemoryKVStore",
    "InfrastructureFactory",
    "KVOrderRepository",
    "RandomOrderIdGenerator",
    "RedisKVStore",
    "SequenceOrderIdGenerator",
    "SystemClock",
]
