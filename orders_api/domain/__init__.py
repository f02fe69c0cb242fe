"""Domain layer: order entities, lifecycle rules and exceptions."""

from .exceptions import (
    DomainException,
    InvalidTransitionException,
    OrderAlreadyExistsException,
    OrderNotFoundException,
    SerializationException,
    StoreUnavailableException,
    TransactionFailedException,
)
from .models import FindAllPage, FindResult, LineItem, Order, OrderStatus
from .services import OrderStatusTransitionService

__all__ = [
    "DomainException",
    "FindAllPage",
    "FindResult",
    "InvalidTransitionException",
    "LineItem",
    "Order",
    "OrderAlreadyExistsException",
    "OrderNotFoundException",
    "OrderStatus",
    "OrderStatusTransitionService",
    "SerializationException",
    "StoreUnavailableException",
    "TransactionFailedException",
]
