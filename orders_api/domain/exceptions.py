"""Domain exceptions for the Orders API.

Domain errors (not found, duplicate, invalid transition) are kept apart from
infrastructure errors (serialization, store availability, transaction
failures) so the API layer can map each to a distinct response.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base exception for all domain-related errors."""

    def __init__(self, message: str, error_code: str):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details: dict = {}


class OrderNotFoundException(DomainException):
    """Raised when an order does not exist in the store."""

    def __init__(self, order_id: int):
        super().__init__(f"Order '{order_id}' not found", "ORDER_NOT_FOUND")
        self.order_id = order_id
        self.details["order_id"] = order_id


class OrderAlreadyExistsException(DomainException):
    """Raised when inserting an order whose identifier is already taken."""

    def __init__(self, order_id: int):
        super().__init__(f"Order '{order_id}' already exists", "ORDER_ALREADY_EXISTS")
        self.order_id = order_id
        self.details["order_id"] = order_id


class InvalidTransitionException(DomainException):
    """Raised when a requested status change violates the order lifecycle."""

    def __init__(self, order_id: int, requested: str, reason: str):
        super().__init__(
            f"Cannot move order '{order_id}' to '{requested}': {reason}",
            "INVALID_TRANSITION",
        )
        self.order_id = order_id
        self.requested = requested
        self.reason = reason
        self.details.update({"order_id": order_id, "requested": requested, "reason": reason})


class RepositoryException(DomainException):
    """Base class for infrastructure failures surfaced by the repository."""


class SerializationException(RepositoryException):
    """Raised when a stored order cannot be encoded or decoded."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message, "SERIALIZATION_ERROR")
        self.key = key
        if key:
            self.details["key"] = key


class StoreUnavailableException(RepositoryException):
    """Raised when the backing store cannot be reached."""

    def __init__(self, message: str = "Order store is currently unavailable"):
        super().__init__(message, "STORE_UNAVAILABLE")


class TransactionFailedException(RepositoryException):
    """Raised when an atomic store transaction is aborted or fails to commit."""

    def __init__(self, message: str):
        super().__init__(message, "TRANSACTION_FAILED")


class ConfigurationException(DomainException):
    """Raised when there's a configuration error."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")


class KVStoreError(Exception):
    """Base exception for KV Store operations."""

    def __init__(
        self,
        message: str,
        key: str | None = None,
        operation: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.key = key
        self.operation = operation
        self.details: dict = {}
        if key:
            self.details["key"] = key
        if operation:
            self.details["operation"] = operation


class KVConnectionError(KVStoreError):
    """Raised when the KV store cannot be reached."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message, operation=operation)


class KVKeyNotFoundError(KVStoreError):
    """Raised when a conditional write or delete targets a missing key."""

    def __init__(self, key: str, operation: str | None = None):
        super().__init__(f"Key '{key}' not found", key=key, operation=operation)


class KVKeyAlreadyExistsError(KVStoreError):
    """Raised when trying to create a key that already exists."""

    def __init__(self, key: str):
        super().__init__(f"Key '{key}' already exists", key=key, operation="set_if_absent")


class KVTransactionError(KVStoreError):
    """Raised when a transaction batch fails to commit."""

    def __init__(self, message: str):
        super().__init__(message, operation="commit")
