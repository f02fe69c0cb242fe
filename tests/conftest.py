"""Shared pytest fixtures for Orders API tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest

from orders_api.domain.models import LineItem, Order
from orders_api.infrastructure.in_memory_kv_store import InMemoryKVStore
from orders_api.infrastructure.order_repository_adapter import KVOrderRepository
from orders_api.ports.clock import ClockPort

CUSTOMER_ID = UUID("5b1d8f3e-4e8a-4f57-9c43-2a3f1f0b8d11")
ITEM_ID = UUID("0f6c2c1e-6f0e-4a7e-9d0a-6f2d4c1b7e55")
T0 = datetime(2024, 1, 1, tzinfo=UTC)


class FixedClock(ClockPort):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def kv_store() -> InMemoryKVStore:
    """Empty in-memory KV store."""
    return InMemoryKVStore()


@pytest.fixture
def repository(kv_store: InMemoryKVStore) -> KVOrderRepository:
    """Order repository over the in-memory store."""
    return KVOrderRepository(kv_store)


@pytest.fixture
def clock() -> FixedClock:
    """Controllable clock starting at 2024-01-01T00:00:00Z."""
    return FixedClock()


@pytest.fixture
def sample_order() -> Order:
    """Freshly created order 1001 with one line item."""
    return Order(
        order_id=1001,
        customer_id=CUSTOMER_ID,
        line_items=[LineItem(item_id=ITEM_ID, quantity=2, price=500)],
        created_at=T0,
    )
