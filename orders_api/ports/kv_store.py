"""Key-Value store interface - Port definition for the order store.

This port defines the minimal capability surface the order repository needs
from its backing store: point reads, multi-reads, set scans, conditional
writes and set membership, with every mutation groupable into one atomic
transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

DEFAULT_SCAN_COUNT = 50


class KVTransaction(ABC):
    """A batch of mutations that commits entirely or not at all.

    Operations are queued in call order and only sent to the store by
    :meth:`commit`. Preconditions of every queued operation are checked before
    any of them is applied.
    """

    @abstractmethod
    def set_if_absent(self, key: str, value: bytes) -> KVTransaction:
        """Queue a write that requires ``key`` to be absent."""
        ...

    @abstractmethod
    def set_if_present(self, key: str, value: bytes) -> KVTransaction:
        """Queue a write that requires ``key`` to exist."""
        ...

    @abstractmethod
    def delete(self, key: str) -> KVTransaction:
        """Queue a delete that requires ``key`` to exist."""
        ...

    @abstractmethod
    def add_to_set(self, set_name: str, member: str) -> KVTransaction:
        """Queue adding ``member`` to the set ``set_name``."""
        ...

    @abstractmethod
    def remove_from_set(self, set_name: str, member: str) -> KVTransaction:
        """Queue removing ``member`` from the set ``set_name``."""
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Apply all queued operations atomically.

        Raises:
            KVKeyAlreadyExistsError: If a set_if_absent key exists
            KVKeyNotFoundError: If a set_if_present or delete key is missing
            KVConnectionError: If the store cannot be reached
            KVTransactionError: If the batch fails to commit
        """
        ...


class KVStorePort(ABC):
    """Abstract interface for key-value store operations."""

    # Reads
    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Get a value by key.

        Args:
            key: The key to retrieve

        Returns:
            The stored bytes, or None if the key does not exist

        Raises:
            KVConnectionError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def multi_get(self, keys: list[str]) -> list[bytes | None]:
        """Get several values in one round-trip.

        Args:
            keys: Keys to retrieve

        Returns:
            Values aligned with ``keys``; None where a key does not exist
        """
        ...

    @abstractmethod
    async def scan_set(
        self,
        set_name: str,
        cursor: int = 0,
        pattern: str = "*",
        count: int = DEFAULT_SCAN_COUNT,
    ) -> tuple[list[str], int]:
        """Scan a set incrementally.

        The page size is a hint: a step may return fewer or more members.
        Repeating the call with each returned cursor, starting from 0, visits
        every member present for the whole traversal and ends when the
        returned cursor is 0.

        Args:
            set_name: Name of the set to scan
            cursor: Cursor returned by the previous step, 0 to start
            pattern: Glob-style filter applied to members
            count: Page size hint

        Returns:
            Tuple of (members, next_cursor)
        """
        ...

    # Single mutations
    @abstractmethod
    async def set_if_absent(self, key: str, value: bytes) -> None:
        """Store ``value`` only if ``key`` does not exist.

        Raises:
            KVKeyAlreadyExistsError: If the key exists
        """
        ...

    @abstractmethod
    async def set_if_present(self, key: str, value: bytes) -> None:
        """Overwrite ``key`` only if it exists.

        Raises:
            KVKeyNotFoundError: If the key does not exist
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete an existing key.

        Raises:
            KVKeyNotFoundError: If the key does not exist
        """
        ...

    @abstractmethod
    async def add_to_set(self, set_name: str, member: str) -> None:
        """Add ``member`` to the set ``set_name``."""
        ...

    @abstractmethod
    async def remove_from_set(self, set_name: str, member: str) -> None:
        """Remove ``member`` from the set ``set_name``."""
        ...

    @abstractmethod
    async def increment(self, key: str) -> int:
        """Atomically increment an integer counter and return its new value."""
        ...

    # Batches
    @abstractmethod
    def transaction(self) -> KVTransaction:
        """Start a new atomic transaction batch."""
        ...

    # Connection lifecycle
    @abstractmethod
    async def ping(self) -> None:
        """Verify the store is reachable.

        Raises:
            KVConnectionError: If the store cannot be reached
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the underlying connection resources."""
        ...
