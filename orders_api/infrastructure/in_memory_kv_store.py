"""In-memory implementation of the KVStorePort.

This is an infrastructure adapter for testing and local development. It
mirrors the Redis semantics the repository relies on: conditional writes,
all-or-nothing transactions and cursor-based set scans that stay correct
while the set is modified between steps.
"""

from __future__ import annotations

import asyncio
import fnmatch
import zlib

from ..domain.exceptions import (
    KVConnectionError,
    KVKeyAlreadyExistsError,
    KVKeyNotFoundError,
)
from ..ports.kv_store import DEFAULT_SCAN_COUNT, KVStorePort
from .kv_transaction import (
    ADD_TO_SET,
    CONDITIONAL_OPERATIONS,
    DELETE,
    REMOVE_FROM_SET,
    SET_IF_ABSENT,
    SET_IF_PRESENT,
    BufferedTransaction,
    KVOperation,
)


def _bucket(member: str) -> int:
    # Buckets start at 1 so that cursor 0 always means "from the beginning"
    return zlib.crc32(member.encode()) + 1


class InMemoryKVStore(KVStorePort):
    """In-memory KV store guarded by a single asyncio lock."""

    def __init__(self) -> None:
        """Initialize the in-memory storage."""
        self._values: dict[str, bytes] = {}
        self._sets: dict[str, set[str]] = {}
        self._counters: dict[str, int] = {}
        self._lock = asyncio.Lock()
        self._closed = False

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise KVConnectionError("In-memory store is closed", operation=operation)

    async def get(self, key: str) -> bytes | None:
        self._ensure_open("get")
        return self._values.get(key)

    async def multi_get(self, keys: list[str]) -> list[bytes | None]:
        self._ensure_open("multi_get")
        return [self._values.get(key) for key in keys]

    async def scan_set(
        self,
        set_name: str,
        cursor: int = 0,
        pattern: str = "*",
        count: int = DEFAULT_SCAN_COUNT,
    ) -> tuple[list[str], int]:
        """Scan a set in hash-bucket order.

        The cursor is the lowest bucket still to visit, so members added or
        removed elsewhere in the set do not shift the remaining traversal.
        """
        self._ensure_open("scan_set")
        async with self._lock:
            remaining = sorted(
                (_bucket(member), member)
                for member in self._sets.get(set_name, ())
                if _bucket(member) >= cursor
            )

        page = remaining[:count]
        if len(remaining) > count:
            last_bucket = page[-1][0]
            # Finish the bucket so the next cursor can start past it
            page.extend(entry for entry in remaining[count:] if entry[0] == last_bucket)
            next_cursor = last_bucket + 1
        else:
            next_cursor = 0

        members = [member for _, member in page if fnmatch.fnmatchcase(member, pattern)]
        return members, next_cursor

    async def set_if_absent(self, key: str, value: bytes) -> None:
        await self.transaction().set_if_absent(key, value).commit()

    async def set_if_present(self, key: str, value: bytes) -> None:
        await self.transaction().set_if_present(key, value).commit()

    async def delete(self, key: str) -> None:
        await self.transaction().delete(key).commit()

    async def add_to_set(self, set_name: str, member: str) -> None:
        await self.transaction().add_to_set(set_name, member).commit()

    async def remove_from_set(self, set_name: str, member: str) -> None:
        await self.transaction().remove_from_set(set_name, member).commit()

    async def increment(self, key: str) -> int:
        self._ensure_open("increment")
        async with self._lock:
            self._counters[key] = self._counters.get(key, 0) + 1
            return self._counters[key]

    def transaction(self) -> BufferedTransaction:
        return BufferedTransaction(self._apply)

    async def _apply(self, operations: list[KVOperation]) -> None:
        self._ensure_open("commit")
        async with self._lock:
            # Check every precondition before touching any data
            present: dict[str, bool] = {}
            for op in operations:
                if op.kind not in CONDITIONAL_OPERATIONS:
                    continue
                exists = present.get(op.key, op.key in self._values)
                if op.kind == SET_IF_ABSENT:
                    if exists:
                        raise KVKeyAlreadyExistsError(op.key)
                    present[op.key] = True
                elif not exists:
                    raise KVKeyNotFoundError(op.key, operation=op.kind)
                elif op.kind == DELETE:
                    present[op.key] = False

            for op in operations:
                if op.kind in (SET_IF_ABSENT, SET_IF_PRESENT):
                    self._values[op.key] = op.value  # type: ignore[assignment]
                elif op.kind == DELETE:
                    del self._values[op.key]
                elif op.kind == ADD_TO_SET:
                    self._sets.setdefault(op.key, set()).add(str(op.value))
                elif op.kind == REMOVE_FROM_SET:
                    members = self._sets.get(op.key)
                    if members is not None:
                        members.discard(str(op.value))
                        if not members:
                            del self._sets[op.key]

    async def ping(self) -> None:
        self._ensure_open("ping")

    async def close(self) -> None:
        self._closed = True

    def clear(self) -> None:
        """Clear all stored data (useful for testing)."""
        self._values.clear()
        self._sets.clear()
        self._counters.clear()

    def members(self, set_name: str) -> set[str]:
        """Get a copy of a set's members (useful for testing)."""
        return set(self._sets.get(set_name, ()))

    def keys(self) -> list[str]:
        """Get all stored value keys (useful for testing)."""
        return list(self._values)
