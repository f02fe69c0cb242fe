"""FastAPI dependency injection setup.

Routes only see the application service; the store handle and repository
come from the connection manager started in the application lifespan.
"""

from __future__ import annotations

from functools import lru_cache

from ...application.order_service import OrderService
from ...domain.models import ServiceConfiguration
from ...ports.clock import ClockPort
from ...ports.configuration import ConfigurationPort
from ..connection_manager import get_connection_manager
from ..factory import InfrastructureFactory
from ..system_clock import SystemClock


@lru_cache
def get_configuration_port() -> ConfigurationPort:
    """Get the configuration port instance using factory."""
    return InfrastructureFactory.create_configuration_port()


@lru_cache
def get_service_configuration() -> ServiceConfiguration:
    """Get the service configuration.

    Returns:
        ServiceConfiguration: Loaded service configuration
    """
    config_port = get_configuration_port()
    return config_port.load_configuration()


@lru_cache
def get_clock() -> ClockPort:
    """Get the clock used for order timestamps."""
    return SystemClock()


def get_order_service() -> OrderService:
    """Get the order service.

    Returns:
        OrderService: Application service for order use cases
    """
    manager = get_connection_manager()
    return OrderService(
        manager.order_repository,
        manager.id_generator,
        get_clock(),
        page_size=manager.config.page_size,
    )
