"""Buffered transaction shared by the KV store adapters.

Operations are recorded locally and handed to the adapter's executor in a
single call on commit, so each adapter only has to implement the atomic
apply step.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..domain.exceptions import KVTransactionError
from ..ports.kv_store import KVTransaction

SET_IF_ABSENT = "set_if_absent"
SET_IF_PRESENT = "set_if_present"
DELETE = "delete"
ADD_TO_SET = "add_to_set"
REMOVE_FROM_SET = "remove_from_set"

CONDITIONAL_OPERATIONS = frozenset({SET_IF_ABSENT, SET_IF_PRESENT, DELETE})


@dataclass(frozen=True)
class KVOperation:
    """A single queued mutation.

    For set operations ``key`` is the set name and ``value`` the member.
    """

    kind: str
    key: str
    value: bytes | str | None = None


TransactionExecutor = Callable[[list[KVOperation]], Awaitable[None]]


class BufferedTransaction(KVTransaction):
    """Transaction that queues operations until commit."""

    def __init__(self, executor: TransactionExecutor) -> None:
        self._executor = executor
        self._operations: list[KVOperation] = []
        self._committed = False

    @property
    def operations(self) -> tuple[KVOperation, ...]:
        """Operations queued so far."""
        return tuple(self._operations)

    def _queue(self, operation: KVOperation) -> BufferedTransaction:
        if self._committed:
            raise KVTransactionError("Transaction already committed")
        self._operations.append(operation)
        return self

    def set_if_absent(self, key: str, value: bytes) -> BufferedTransaction:
        return self._queue(KVOperation(SET_IF_ABSENT, key, value))

    def set_if_present(self, key: str, value: bytes) -> BufferedTransaction:
        return self._queue(KVOperation(SET_IF_PRESENT, key, value))

    def delete(self, key: str) -> BufferedTransaction:
        return self._queue(KVOperation(DELETE, key))

    def add_to_set(self, set_name: str, member: str) -> BufferedTransaction:
        return self._queue(KVOperation(ADD_TO_SET, set_name, member))

    def remove_from_set(self, set_name: str, member: str) -> BufferedTransaction:
        return self._queue(KVOperation(REMOVE_FROM_SET, set_name, member))

    async def commit(self) -> None:
        """Hand all queued operations to the executor in one call."""
        if self._committed:
            raise KVTransactionError("Transaction already committed")
        self._committed = True
        if not self._operations:
            return
        await self._executor(list(self._operations))
