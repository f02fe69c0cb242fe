"""Order identifier generation port."""

from abc import ABC, abstractmethod


class OrderIdGeneratorPort(ABC):
    """Produces candidate identifiers for new orders.

    Uniqueness is ultimately enforced by the repository's insert; callers
    retry with a fresh identifier when an insert reports a duplicate.
    """

    @abstractmethod
    async def next_id(self) -> int:
        """Return a new candidate order identifier."""
        ...
