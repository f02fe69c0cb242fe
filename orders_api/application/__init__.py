"""Application layer: order use cases."""

from .order_service import ORDER_ID_MAX_RETRIES, OrderService

__all__ = ["ORDER_ID_MAX_RETRIES", "OrderService"]
