"""KV-backed implementation of the order repository.

Each order is stored under ``order:{order_id}`` and its key is registered in
the ``orders`` index set. Inserts and deletes touch both in one atomic
transaction so the index always matches the stored orders; updates are blind
overwrites of an existing key (last writer wins).
"""

from __future__ import annotations

import logging

from ..domain.exceptions import (
    ConfigurationException,
    KVConnectionError,
    KVKeyAlreadyExistsError,
    KVKeyNotFoundError,
    KVStoreError,
    OrderAlreadyExistsException,
    OrderNotFoundException,
    SerializationException,
    StoreUnavailableException,
    TransactionFailedException,
)
from ..domain.models import FindAllPage, FindResult, Order
from ..ports.kv_store import KVStorePort
from ..ports.order_repository import OrderRepositoryPort
from .serialization import SUPPORTED_CODECS, detect_and_deserialize, serialize

logger = logging.getLogger(__name__)

ORDER_KEY_PREFIX = "order:"
ORDER_INDEX_SET = "orders"


def order_key(order_id: int) -> str:
    """Map an order identifier to its primary key."""
    return f"{ORDER_KEY_PREFIX}{order_id}"


def _store_failure(error: KVStoreError, action: str) -> StoreUnavailableException:
    return StoreUnavailableException(f"Failed to {action}: {error.message}")


class KVOrderRepository(OrderRepositoryPort):
    """Order repository on top of any KVStorePort."""

    def __init__(
        self,
        kv_store: KVStorePort,
        codec: str = "json",
        skip_malformed: bool = False,
    ):
        """Initialize the repository.

        Args:
            kv_store: The store handle, shared for the process lifetime
            codec: Codec used to write records ("json" or "msgpack")
            skip_malformed: Skip undecodable records in find_all instead of failing

        Raises:
            ConfigurationException: If the codec is not supported
        """
        if codec not in SUPPORTED_CODECS:
            raise ConfigurationException(f"Unsupported order codec: {codec}")
        self._kv_store = kv_store
        self._codec = codec
        self._skip_malformed = skip_malformed

    async def insert(self, order: Order) -> None:
        key = order_key(order.order_id)
        data = serialize(order, self._codec)

        txn = self._kv_store.transaction()
        txn.set_if_absent(key, data)
        txn.add_to_set(ORDER_INDEX_SET, key)

        try:
            await txn.commit()
        except KVKeyAlreadyExistsError as e:
            logger.warning(f"Duplicate order id on insert: {order.order_id}")
            raise OrderAlreadyExistsException(order.order_id) from e
        except KVConnectionError as e:
            raise _store_failure(e, "insert order") from e
        except KVStoreError as e:
            raise TransactionFailedException(f"Failed to insert order: {e.message}") from e

        logger.info(f"Inserted order: {order.order_id}")

    async def find_by_id(self, order_id: int) -> Order:
        key = order_key(order_id)
        try:
            data = await self._kv_store.get(key)
        except KVStoreError as e:
            raise _store_failure(e, "get order") from e

        if data is None:
            raise OrderNotFoundException(order_id)

        try:
            return detect_and_deserialize(data, Order)
        except SerializationException as e:
            raise SerializationException(f"Failed to decode order: {e.message}", key=key) from e

    async def update(self, order: Order) -> None:
        key = order_key(order.order_id)
        data = serialize(order, self._codec)

        try:
            await self._kv_store.set_if_present(key, data)
        except KVKeyNotFoundError as e:
            raise OrderNotFoundException(order.order_id) from e
        except KVStoreError as e:
            raise _store_failure(e, "update order") from e

        logger.info(f"Updated order: {order.order_id} ({order.status.value})")

    async def delete_by_id(self, order_id: int) -> None:
        key = order_key(order_id)

        txn = self._kv_store.transaction()
        txn.delete(key)
        txn.remove_from_set(ORDER_INDEX_SET, key)

        try:
            await txn.commit()
        except KVKeyNotFoundError as e:
            raise OrderNotFoundException(order_id) from e
        except KVConnectionError as e:
            raise _store_failure(e, "delete order") from e
        except KVStoreError as e:
            raise TransactionFailedException(f"Failed to delete order: {e.message}") from e

        logger.info(f"Deleted order: {order_id}")

    async def find_all(self, page: FindAllPage) -> FindResult:
        try:
            keys, cursor = await self._kv_store.scan_set(
                ORDER_INDEX_SET, cursor=page.cursor, pattern="*", count=page.size
            )
        except KVStoreError as e:
            raise _store_failure(e, "get order ids") from e

        if not keys:
            return FindResult(orders=[], cursor=cursor)

        try:
            values = await self._kv_store.multi_get(keys)
        except KVStoreError as e:
            raise _store_failure(e, "get orders") from e

        orders: list[Order] = []
        for key, data in zip(keys, values, strict=True):
            if data is None:
                # Deleted between the scan and the read
                logger.debug(f"Order vanished during listing: {key}")
                continue
            try:
                orders.append(detect_and_deserialize(data, Order))
            except SerializationException as e:
                if not self._skip_malformed:
                    raise SerializationException(
                        f"Failed to decode order: {e.message}", key=key
                    ) from e
                logger.warning(f"Skipping malformed order record {key}: {e.message}")

        return FindResult(orders=orders, cursor=cursor)
