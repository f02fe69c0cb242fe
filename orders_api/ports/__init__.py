"""Ports layer - Interfaces for the order store and its collaborators."""

from .clock import ClockPort
from .configuration import ConfigurationPort
from .id_generator import OrderIdGeneratorPort
from .kv_store import KVStorePort, KVTransaction
from .order_repository import OrderRepositoryPort

__all__ = [
    "ClockPort",
    "ConfigurationPort",
    "KVStorePort",
    "KVTransaction",
    "OrderIdGeneratorPort",
    "OrderRepositoryPort",
]
