"""Order identifier generators."""

from __future__ import annotations

import secrets

from ..domain.exceptions import KVStoreError, StoreUnavailableException
from ..ports.id_generator import OrderIdGeneratorPort
from ..ports.kv_store import KVStorePort

ORDER_SEQUENCE_KEY = "order:sequence"


class SequenceOrderIdGenerator(OrderIdGeneratorPort):
    """Monotonic identifiers from a counter kept in the store."""

    def __init__(self, kv_store: KVStorePort, key: str = ORDER_SEQUENCE_KEY):
        self._kv_store = kv_store
        self._key = key

    async def next_id(self) -> int:
        try:
            return await self._kv_store.increment(self._key)
        except KVStoreError as e:
            raise StoreUnavailableException(f"Failed to allocate order id: {e.message}") from e


class RandomOrderIdGenerator(OrderIdGeneratorPort):
    """Random 63-bit identifiers.

    Collisions are possible; the repository rejects them on insert.
    """

    def __init__(self, bits: int = 63):
        self._bits = bits

    async def next_id(self) -> int:
        return secrets.randbits(self._bits)
