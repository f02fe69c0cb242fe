"""Unit tests for order id generators."""

from unittest.mock import AsyncMock

import pytest

from orders_api.domain.exceptions import KVConnectionError, StoreUnavailableException
from orders_api.infrastructure.id_generators import (
    ORDER_SEQUENCE_KEY,
    RandomOrderIdGenerator,
    SequenceOrderIdGenerator,
)


class TestSequenceOrderIdGenerator:
    """Counter-backed identifiers."""

    @pytest.mark.asyncio
    async def test_ids_increase(self, kv_store):
        generator = SequenceOrderIdGenerator(kv_store)

        ids = [await generator.next_id() for _ in range(3)]

        assert ids == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_uses_sequence_key(self):
        store = AsyncMock()
        store.increment.return_value = 42

        assert await SequenceOrderIdGenerator(store).next_id() == 42
        store.increment.assert_awaited_once_with(ORDER_SEQUENCE_KEY)

    @pytest.mark.asyncio
    async def test_store_failure(self):
        store = AsyncMock()
        store.increment.side_effect = KVConnectionError("down")

        with pytest.raises(StoreUnavailableException):
            await SequenceOrderIdGenerator(store).next_id()


class TestRandomOrderIdGenerator:
    """Random identifiers."""

    @pytest.mark.asyncio
    async def test_ids_fit_in_63_bits(self):
        generator = RandomOrderIdGenerator()

        for _ in range(100):
            assert 0 <= await generator.next_id() < 2**63

    @pytest.mark.asyncio
    async def test_custom_width(self):
        generator = RandomOrderIdGenerator(bits=8)

        for _ in range(50):
            assert 0 <= await generator.next_id() < 256
