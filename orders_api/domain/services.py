"""Domain services containing order lifecycle rules.

The lifecycle is linear: created -> shipped -> completed. A transition is
validated against the currently stored order and, when accepted, produces a
new order value with the matching timestamp filled in.
"""

from __future__ import annotations

from datetime import datetime

from .exceptions import InvalidTransitionException
from .models import Order, OrderStatus


class OrderStatusTransitionService:
    """Domain service applying status transitions to orders."""

    @staticmethod
    def apply(order: Order, requested: str, now: datetime) -> Order:
        """Apply a requested status to an order.

        Args:
            order: The order as currently stored
            requested: The requested status ("shipped" or "completed")
            now: Current time used for the new timestamp

        Returns:
            A new Order with the transition applied; ``order`` is left untouched

        Raises:
            InvalidTransitionException: If the transition is not allowed
        """
        if requested == OrderStatus.SHIPPED.value:
            if order.shipped_at is not None:
                raise InvalidTransitionException(order.order_id, requested, "already shipped")
            shipped_at = max(now, order.created_at)
            return Order.model_validate({**order.model_dump(), "shipped_at": shipped_at})

        if requested == OrderStatus.COMPLETED.value:
            if order.completed_at is not None:
                raise InvalidTransitionException(order.order_id, requested, "already completed")
            if order.shipped_at is None:
                raise InvalidTransitionException(order.order_id, requested, "not yet shipped")
            completed_at = max(now, order.shipped_at)
            return Order.model_validate({**order.model_dump(), "completed_at": completed_at})

        raise InvalidTransitionException(order.order_id, requested, "unknown status")

    @staticmethod
    def can_transition(order: Order, requested: str) -> bool:
        """Check whether a requested status would be accepted."""
        if requested == OrderStatus.SHIPPED.value:
            return order.status == OrderStatus.CREATED
        if requested == OrderStatus.COMPLETED.value:
            return order.status == OrderStatus.SHIPPED
        return False
