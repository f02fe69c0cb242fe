"""Redis KV Store adapter - Concrete implementation of KVStorePort.

Reads map directly to GET, MGET, SSCAN and INCR. Transactions are executed
by one Lua script: Redis runs a script atomically, so the script checks the
preconditions of every queued operation first and only then applies the
writes. A failed precondition therefore leaves the store untouched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ..domain.exceptions import (
    KVConnectionError,
    KVKeyAlreadyExistsError,
    KVKeyNotFoundError,
    KVStoreError,
    KVTransactionError,
)
from ..ports.kv_store import DEFAULT_SCAN_COUNT, KVStorePort
from .kv_transaction import BufferedTransaction, KVOperation

if TYPE_CHECKING:
    from redis.commands.core import AsyncScript

logger = logging.getLogger(__name__)

# KEYS[i] is the target of operation i; ARGV[i] its kind and ARGV[n + i] its value.
TRANSACTION_SCRIPT = """
local n = #KEYS
local present = {}
for i = 1, n do
  local kind = ARGV[i]
  local key = KEYS[i]
  if kind == 'set_if_absent' or kind == 'set_if_present' or kind == 'delete' then
    local exists = present[key]
    if exists == nil then
      exists = redis.call('EXISTS', key) == 1
    end
    if kind == 'set_if_absent' then
      if exists then
        return {'exists', key}
      end
      present[key] = true
    else
      if not exists then
        return {'missing', key}
      end
      if kind == 'delete' then
        present[key] = false
      end
    end
  end
end
for i = 1, n do
  local kind = ARGV[i]
  local key = KEYS[i]
  local value = ARGV[n + i]
  if kind == 'set_if_absent' or kind == 'set_if_present' then
    redis.call('SET', key, value)
  elseif kind == 'delete' then
    redis.call('DEL', key)
  elseif kind == 'add_to_set' then
    redis.call('SADD', key, value)
  elseif kind == 'remove_from_set' then
    redis.call('SREM', key, value)
  end
end
return {'ok', ''}
"""


def _text(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value


class RedisKVStore(KVStorePort):
    """Redis implementation of the KV Store port.

    The wrapped ``redis.asyncio.Redis`` client owns a connection pool and is
    safe to share between concurrent requests.
    """

    def __init__(self, client: aioredis.Redis):
        """Initialize the adapter.

        Args:
            client: Connected redis client with ``decode_responses=False``
        """
        self._redis = client
        self._transaction_script: AsyncScript = client.register_script(TRANSACTION_SCRIPT)

    @classmethod
    def from_url(
        cls,
        url: str,
        socket_timeout: float = 5.0,
        max_connections: int = 50,
    ) -> RedisKVStore:
        """Create an adapter with its own connection pool.

        Args:
            url: Redis URL (redis://, rediss:// or unix://)
            socket_timeout: Per-command socket timeout in seconds
            max_connections: Size of the connection pool
        """
        client = aioredis.from_url(
            url,
            max_connections=max_connections,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
            decode_responses=False,
        )
        return cls(client)

    @property
    def client(self) -> aioredis.Redis:
        """The underlying redis client."""
        return self._redis

    def _translate(self, error: RedisError, operation: str, key: str | None = None) -> KVStoreError:
        if isinstance(error, (RedisConnectionError, RedisTimeoutError)):
            logger.error(f"Redis unreachable during {operation}: {error}")
            return KVConnectionError(f"Redis unreachable: {error}", operation=operation)
        logger.error(f"Redis {operation} failed: {error}")
        return KVStoreError(f"Redis {operation} failed: {error}", key=key, operation=operation)

    # Reads
    async def get(self, key: str) -> bytes | None:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            raise self._translate(e, "get", key) from e

    async def multi_get(self, keys: list[str]) -> list[bytes | None]:
        if not keys:
            return []
        try:
            return list(await self._redis.mget(keys))
        except RedisError as e:
            raise self._translate(e, "multi_get") from e

    async def scan_set(
        self,
        set_name: str,
        cursor: int = 0,
        pattern: str = "*",
        count: int = DEFAULT_SCAN_COUNT,
    ) -> tuple[list[str], int]:
        try:
            next_cursor, members = await self._redis.sscan(
                set_name, cursor=cursor, match=pattern, count=count
            )
        except RedisError as e:
            raise self._translate(e, "scan_set", set_name) from e
        return [_text(member) for member in members], int(next_cursor)

    # Single mutations
    async def set_if_absent(self, key: str, value: bytes) -> None:
        try:
            created = await self._redis.set(key, value, nx=True)
        except RedisError as e:
            raise self._translate(e, "set_if_absent", key) from e
        if not created:
            raise KVKeyAlreadyExistsError(key)

    async def set_if_present(self, key: str, value: bytes) -> None:
        try:
            updated = await self._redis.set(key, value, xx=True)
        except RedisError as e:
            raise self._translate(e, "set_if_present", key) from e
        if not updated:
            raise KVKeyNotFoundError(key, operation="set_if_present")

    async def delete(self, key: str) -> None:
        try:
            removed = await self._redis.delete(key)
        except RedisError as e:
            raise self._translate(e, "delete", key) from e
        if not removed:
            raise KVKeyNotFoundError(key, operation="delete")

    async def add_to_set(self, set_name: str, member: str) -> None:
        try:
            await self._redis.sadd(set_name, member)
        except RedisError as e:
            raise self._translate(e, "add_to_set", set_name) from e

    async def remove_from_set(self, set_name: str, member: str) -> None:
        try:
            await self._redis.srem(set_name, member)
        except RedisError as e:
            raise self._translate(e, "remove_from_set", set_name) from e

    async def increment(self, key: str) -> int:
        try:
            return int(await self._redis.incr(key))
        except RedisError as e:
            raise self._translate(e, "increment", key) from e

    # Batches
    def transaction(self) -> BufferedTransaction:
        return BufferedTransaction(self._execute)

    async def _execute(self, operations: list[KVOperation]) -> None:
        keys = [op.key for op in operations]
        args: list[bytes | str] = [op.kind for op in operations]
        args.extend(op.value if op.value is not None else "" for op in operations)

        try:
            status, key = await self._transaction_script(keys=keys, args=args)
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise self._translate(e, "commit") from e
        except RedisError as e:
            logger.error(f"Redis transaction failed: {e}")
            raise KVTransactionError(f"Transaction failed to commit: {e}") from e

        status = _text(status)
        if status == "exists":
            raise KVKeyAlreadyExistsError(_text(key))
        if status == "missing":
            raise KVKeyNotFoundError(_text(key), operation="commit")

    # Connection lifecycle
    async def ping(self) -> None:
        try:
            await self._redis.ping()
        except RedisError as e:
            raise KVConnectionError(f"Failed to connect to Redis: {e}", operation="ping") from e

    async def close(self) -> None:
        await self._redis.aclose()
        logger.info("Closed Redis connection pool")
