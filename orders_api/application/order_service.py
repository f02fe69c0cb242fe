"""Application service for order management.

Composes identifier generation, the order repository and the lifecycle rules
into the use cases exposed over HTTP.
"""

from __future__ import annotations

import logging
from uuid import UUID

from ..domain.exceptions import OrderAlreadyExistsException
from ..domain.models import DEFAULT_PAGE_SIZE, FindAllPage, FindResult, LineItem, Order
from ..domain.services import OrderStatusTransitionService
from ..ports.clock import ClockPort
from ..ports.id_generator import OrderIdGeneratorPort
from ..ports.order_repository import OrderRepositoryPort

logger = logging.getLogger(__name__)

ORDER_ID_MAX_RETRIES = 5


class OrderService:
    """Service for creating, reading, advancing and deleting orders."""

    def __init__(
        self,
        repository: OrderRepositoryPort,
        id_generator: OrderIdGeneratorPort,
        clock: ClockPort,
        transition_service: OrderStatusTransitionService | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """Initialize the order service.

        Args:
            repository: Order repository port implementation
            id_generator: Source of new order identifiers
            clock: Clock used for creation and transition timestamps
            transition_service: Lifecycle rules, defaults to the standard service
            page_size: Page size used when a listing does not ask for one
        """
        self._repository = repository
        self._id_generator = id_generator
        self._clock = clock
        self._transitions = transition_service or OrderStatusTransitionService()
        self._page_size = page_size

    async def create_order(self, customer_id: UUID, line_items: list[LineItem]) -> Order:
        """Create and persist a new order.

        A fresh identifier is drawn when the generated one is already taken.

        Raises:
            OrderAlreadyExistsException: If every attempted identifier was taken
            RepositoryException: If the store fails
        """
        last_error: OrderAlreadyExistsException | None = None
        for attempt in range(1, ORDER_ID_MAX_RETRIES + 1):
            order = Order(
                order_id=await self._id_generator.next_id(),
                customer_id=customer_id,
                line_items=list(line_items),
                created_at=self._clock.now(),
            )
            try:
                await self._repository.insert(order)
            except OrderAlreadyExistsException as e:
                logger.warning(
                    f"Order id {order.order_id} taken (attempt {attempt}/{ORDER_ID_MAX_RETRIES})"
                )
                last_error = e
                continue

            logger.info(f"Created order: {order.order_id} for customer {customer_id}")
            return order

        assert last_error is not None
        raise last_error

    async def get_order(self, order_id: int) -> Order:
        """Get an order by identifier.

        Raises:
            OrderNotFoundException: If the order does not exist
        """
        return await self._repository.find_by_id(order_id)

    async def list_orders(self, cursor: int = 0, size: int | None = None) -> FindResult:
        """List one page of orders starting at ``cursor``."""
        page = FindAllPage(cursor=cursor, size=size or self._page_size)
        return await self._repository.find_all(page)

    async def update_status(self, order_id: int, status: str) -> Order:
        """Move an order to the requested status.

        Args:
            order_id: The order to advance
            status: "shipped" or "completed"

        Returns:
            The stored order after the transition

        Raises:
            OrderNotFoundException: If the order does not exist
            InvalidTransitionException: If the lifecycle forbids the change
        """
        current = await self._repository.find_by_id(order_id)
        updated = self._transitions.apply(current, status, self._clock.now())
        await self._repository.update(updated)
        logger.info(f"Order {order_id} moved to {updated.status.value}")
        return updated

    async def delete_order(self, order_id: int) -> None:
        """Delete an order and its index entry.

        Raises:
            OrderNotFoundException: If the order does not exist
        """
        await self._repository.delete_by_id(order_id)
        logger.info(f"Deleted order: {order_id}")
