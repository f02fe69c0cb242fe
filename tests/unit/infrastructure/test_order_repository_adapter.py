"""Unit tests for KVOrderRepository.

Most tests run against the in-memory store; failure translation is checked
with a mocked store port.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, Mock

import pytest

from orders_api.domain.exceptions import (
    ConfigurationException,
    KVConnectionError,
    KVStoreError,
    KVTransactionError,
    OrderAlreadyExistsException,
    OrderNotFoundException,
    SerializationException,
    StoreUnavailableException,
    TransactionFailedException,
)
from orders_api.domain.models import FindAllPage, Order, OrderStatus
from orders_api.infrastructure.order_repository_adapter import (
    ORDER_INDEX_SET,
    KVOrderRepository,
    order_key,
)
from orders_api.infrastructure.serialization import serialize_to_msgpack


def copy_with_id(order: Order, order_id: int) -> Order:
    return order.model_copy(update={"order_id": order_id})


async def collect_all(repository: KVOrderRepository, size: int) -> tuple[list[Order], int]:
    orders: list[Order] = []
    cursor = 0
    steps = 0
    while True:
        result = await repository.find_all(FindAllPage(cursor=cursor, size=size))
        orders.extend(result.orders)
        cursor = result.cursor
        steps += 1
        if cursor == 0:
            return orders, steps
        assert steps < 10_000


class TestInsertAndFind:
    """Insert and FindByID."""

    def test_order_key(self):
        assert order_key(1001) == "order:1001"

    @pytest.mark.asyncio
    async def test_insert_then_find_round_trip(self, repository, kv_store, sample_order):
        # Act
        await repository.insert(sample_order)
        found = await repository.find_by_id(1001)

        # Assert
        assert found == sample_order
        assert kv_store.members(ORDER_INDEX_SET) == {"order:1001"}

    @pytest.mark.asyncio
    async def test_stored_record_is_json_with_field_names(self, repository, kv_store, sample_order):
        await repository.insert(sample_order)

        raw = await kv_store.get("order:1001")

        assert raw.startswith(b"{")
        for field in (b'"order_id"', b'"customer_id"', b'"line_items"', b'"shipped_at":null'):
            assert field in raw

    @pytest.mark.asyncio
    async def test_duplicate_insert_keeps_original(self, repository, kv_store, sample_order):
        # Arrange
        await repository.insert(sample_order)
        other = sample_order.model_copy(update={"line_items": []})

        # Act
        with pytest.raises(OrderAlreadyExistsException) as exc_info:
            await repository.insert(other)

        # Assert
        assert exc_info.value.order_id == 1001
        assert await repository.find_by_id(1001) == sample_order
        assert kv_store.members(ORDER_INDEX_SET) == {"order:1001"}

    @pytest.mark.asyncio
    async def test_find_missing(self, repository):
        with pytest.raises(OrderNotFoundException) as exc_info:
            await repository.find_by_id(404)

        assert exc_info.value.order_id == 404

    @pytest.mark.asyncio
    async def test_find_malformed_record(self, repository, kv_store):
        await kv_store.set_if_absent("order:5", b"{not json")

        with pytest.raises(SerializationException) as exc_info:
            await repository.find_by_id(5)

        assert exc_info.value.key == "order:5"

    @pytest.mark.asyncio
    async def test_msgpack_codec_round_trip(self, kv_store, sample_order):
        repository = KVOrderRepository(kv_store, codec="msgpack")

        await repository.insert(sample_order)

        assert (await kv_store.get("order:1001"))[0] & 0xF0 == 0x80
        assert await repository.find_by_id(1001) == sample_order

    def test_unknown_codec_rejected(self, kv_store):
        with pytest.raises(ConfigurationException, match="Unsupported order codec: xml"):
            KVOrderRepository(kv_store, codec="xml")

    @pytest.mark.asyncio
    async def test_reads_both_codecs_in_one_keyspace(self, repository, kv_store, sample_order):
        # Arrange - one record written as msgpack behind the repository's back
        await repository.insert(sample_order)
        second = copy_with_id(sample_order, 1002)
        await kv_store.transaction().set_if_absent(
            "order:1002", serialize_to_msgpack(second)
        ).add_to_set(ORDER_INDEX_SET, "order:1002").commit()

        # Act
        orders, _ = await collect_all(repository, size=10)

        # Assert
        assert sorted(o.order_id for o in orders) == [1001, 1002]


class TestUpdate:
    """Update is a blind overwrite of an existing order."""

    @pytest.mark.asyncio
    async def test_update_existing(self, repository, sample_order):
        await repository.insert(sample_order)
        shipped = sample_order.model_copy(
            update={"shipped_at": sample_order.created_at + timedelta(hours=1)}
        )

        await repository.update(shipped)

        found = await repository.find_by_id(1001)
        assert found.status == OrderStatus.SHIPPED
        assert found.shipped_at == shipped.shipped_at

    @pytest.mark.asyncio
    async def test_update_missing_creates_nothing(self, repository, kv_store, sample_order):
        with pytest.raises(OrderNotFoundException):
            await repository.update(sample_order)

        assert kv_store.keys() == []
        assert kv_store.members(ORDER_INDEX_SET) == set()

    @pytest.mark.asyncio
    async def test_last_writer_wins(self, repository, sample_order):
        await repository.insert(sample_order)
        t = sample_order.created_at
        first = sample_order.model_copy(update={"shipped_at": t + timedelta(hours=1)})
        second = sample_order.model_copy(update={"shipped_at": t + timedelta(hours=2)})

        await repository.update(first)
        await repository.update(second)

        assert (await repository.find_by_id(1001)).shipped_at == t + timedelta(hours=2)


class TestDelete:
    """DeleteByID removes the primary record and index entry together."""

    @pytest.mark.asyncio
    async def test_delete_removes_record_and_index(self, repository, kv_store, sample_order):
        await repository.insert(sample_order)

        await repository.delete_by_id(1001)

        assert await kv_store.get("order:1001") is None
        assert kv_store.members(ORDER_INDEX_SET) == set()
        with pytest.raises(OrderNotFoundException):
            await repository.find_by_id(1001)

    @pytest.mark.asyncio
    async def test_delete_missing_mutates_nothing(self, repository, kv_store, sample_order):
        # Arrange - a stray index entry without a primary record
        await repository.insert(sample_order)
        await kv_store.add_to_set(ORDER_INDEX_SET, "order:7")

        # Act
        with pytest.raises(OrderNotFoundException):
            await repository.delete_by_id(7)

        # Assert
        assert kv_store.members(ORDER_INDEX_SET) == {"order:1001", "order:7"}
        assert kv_store.keys() == ["order:1001"]


class TestFindAll:
    """Cursor pagination over the index set."""

    @pytest.mark.asyncio
    async def test_empty_store(self, repository):
        result = await repository.find_all(FindAllPage())

        assert result.orders == []
        assert result.cursor == 0

    @pytest.mark.asyncio
    async def test_full_traversal_returns_every_order(self, repository, sample_order):
        # Arrange
        expected = set(range(1, 121))
        for order_id in expected:
            await repository.insert(copy_with_id(sample_order, order_id))

        # Act
        orders, steps = await collect_all(repository, size=7)

        # Assert
        assert {o.order_id for o in orders} == expected
        assert len(orders) == len(expected)
        assert steps > 1

    @pytest.mark.asyncio
    async def test_page_size_is_a_hint(self, repository, sample_order):
        for order_id in range(1, 31):
            await repository.insert(copy_with_id(sample_order, order_id))

        result = await repository.find_all(FindAllPage(cursor=0, size=5))

        assert len(result.orders) >= 5
        assert result.cursor != 0

    @pytest.mark.asyncio
    async def test_traversal_with_concurrent_inserts_and_deletes(self, repository, sample_order):
        # Arrange
        stable = set(range(1, 61))
        for order_id in stable | set(range(500, 530)):
            await repository.insert(copy_with_id(sample_order, order_id))

        # Act - interleave mutations with the scan
        seen: set[int] = set()
        cursor = 0
        step = 0
        while True:
            result = await repository.find_all(FindAllPage(cursor=cursor, size=4))
            seen.update(o.order_id for o in result.orders)
            cursor = result.cursor
            if step < 30:
                await repository.delete_by_id(500 + step)
                await repository.insert(copy_with_id(sample_order, 900 + step))
            step += 1
            if cursor == 0:
                break

        # Assert
        assert stable <= seen

    @pytest.mark.asyncio
    async def test_order_deleted_between_scan_and_read_is_skipped(self, kv_store, sample_order):
        # Arrange - index entry without a record, as after a racing delete
        repository = KVOrderRepository(kv_store)
        await repository.insert(sample_order)
        await kv_store.add_to_set(ORDER_INDEX_SET, "order:99")

        # Act
        result = await repository.find_all(FindAllPage(size=50))

        # Assert
        assert [o.order_id for o in result.orders] == [1001]

    @pytest.mark.asyncio
    async def test_malformed_record_aborts_listing(self, repository, kv_store, sample_order):
        await repository.insert(sample_order)
        await kv_store.transaction().set_if_absent("order:13", b"garbage").add_to_set(
            ORDER_INDEX_SET, "order:13"
        ).commit()

        with pytest.raises(SerializationException) as exc_info:
            await collect_all(repository, size=50)

        assert exc_info.value.key == "order:13"

    @pytest.mark.asyncio
    async def test_malformed_record_skipped_when_enabled(self, kv_store, sample_order):
        repository = KVOrderRepository(kv_store, skip_malformed=True)
        await repository.insert(sample_order)
        await kv_store.transaction().set_if_absent("order:13", b"garbage").add_to_set(
            ORDER_INDEX_SET, "order:13"
        ).commit()

        orders, _ = await collect_all(repository, size=50)

        assert [o.order_id for o in orders] == [1001]


class TestFailureTranslation:
    """Store errors become repository errors."""

    @pytest.fixture
    def mock_store(self):
        store = AsyncMock()
        store.txn = Mock()
        store.txn.commit = AsyncMock()
        store.transaction = Mock(return_value=store.txn)
        return store

    @pytest.mark.asyncio
    async def test_insert_connection_failure(self, mock_store, sample_order):
        mock_store.txn.commit.side_effect = KVConnectionError("down", operation="commit")

        with pytest.raises(StoreUnavailableException):
            await KVOrderRepository(mock_store).insert(sample_order)

    @pytest.mark.asyncio
    async def test_insert_transaction_failure(self, mock_store, sample_order):
        mock_store.txn.commit.side_effect = KVTransactionError("aborted")

        with pytest.raises(TransactionFailedException):
            await KVOrderRepository(mock_store).insert(sample_order)

    @pytest.mark.asyncio
    async def test_delete_transaction_failure(self, mock_store):
        mock_store.txn.commit.side_effect = KVTransactionError("aborted")

        with pytest.raises(TransactionFailedException):
            await KVOrderRepository(mock_store).delete_by_id(1)

    @pytest.mark.asyncio
    async def test_find_store_failure(self, mock_store):
        mock_store.get.side_effect = KVConnectionError("down")

        with pytest.raises(StoreUnavailableException):
            await KVOrderRepository(mock_store).find_by_id(1)

    @pytest.mark.asyncio
    async def test_update_store_failure(self, mock_store, sample_order):
        mock_store.set_if_present.side_effect = KVStoreError("boom")

        with pytest.raises(StoreUnavailableException):
            await KVOrderRepository(mock_store).update(sample_order)

    @pytest.mark.asyncio
    async def test_find_all_scan_failure(self, mock_store):
        mock_store.scan_set.side_effect = KVConnectionError("down")

        with pytest.raises(StoreUnavailableException):
            await KVOrderRepository(mock_store).find_all(FindAllPage())

    @pytest.mark.asyncio
    async def test_cancellation_is_not_swallowed(self, mock_store):
        mock_store.get.side_effect = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await KVOrderRepository(mock_store).find_by_id(1)

    @pytest.mark.asyncio
    async def test_insert_is_single_transaction(self, mock_store, sample_order):
        await KVOrderRepository(mock_store).insert(sample_order)

        mock_store.transaction.assert_called_once()
        mock_store.txn.set_if_absent.assert_called_once()
        mock_store.txn.add_to_set.assert_called_once_with(ORDER_INDEX_SET, "order:1001")
        mock_store.txn.commit.assert_awaited_once()
