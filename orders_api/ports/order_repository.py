"""Port interface for order persistence.

The service layer depends exclusively on this contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..domain.models import FindAllPage, FindResult, Order


class OrderRepositoryPort(ABC):
    """Abstract interface for order persistence operations."""

    @abstractmethod
    async def insert(self, order: Order) -> None:
        """Insert a new order and register it in the index.

        Raises:
            OrderAlreadyExistsException: If the order id is already taken
            SerializationException: If the order cannot be encoded
            StoreUnavailableException: If the store cannot be reached
            TransactionFailedException: If the transaction fails to commit
        """
        ...

    @abstractmethod
    async def find_by_id(self, order_id: int) -> Order:
        """Retrieve an order by identifier.

        Raises:
            OrderNotFoundException: If the order does not exist
            SerializationException: If the stored record cannot be decoded
            StoreUnavailableException: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def update(self, order: Order) -> None:
        """Overwrite an existing order.

        Raises:
            OrderNotFoundException: If the order does not exist
            SerializationException: If the order cannot be encoded
            StoreUnavailableException: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def delete_by_id(self, order_id: int) -> None:
        """Delete an order and its index entry.

        Raises:
            OrderNotFoundException: If the order does not exist
            StoreUnavailableException: If the store cannot be reached
            TransactionFailedException: If the transaction fails to commit
        """
        ...

    @abstractmethod
    async def find_all(self, page: FindAllPage) -> FindResult:
        """Retrieve one page of orders from the index.

        Raises:
            SerializationException: If a stored record cannot be decoded
            StoreUnavailableException: If the store cannot be reached
        """
        ...
