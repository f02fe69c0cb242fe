"""Domain models for the Orders API.

Orders and their line items are Pydantic v2 models. The order status is not
stored: it is derived from which lifecycle timestamps are present.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MAX_ORDER_ID = 2**64 - 1
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 1000


class OrderStatus(str, Enum):
    """Lifecycle status derived from an order's timestamps."""

    CREATED = "created"
    SHIPPED = "shipped"
    COMPLETED = "completed"


class LineItem(BaseModel):
    """A single item of an order, owned by value by its parent order."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    item_id: UUID = Field(..., description="Item identifier")
    quantity: int = Field(..., ge=0, description="Ordered quantity")
    price: int = Field(..., ge=0, description="Unit price in the smallest currency unit")


class Order(BaseModel):
    """Order aggregate.

    ``created_at`` is set once by the creator; ``shipped_at`` and
    ``completed_at`` are filled in by status transitions and never cleared.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        json_schema_extra={
            "example": {
                "order_id": 1001,
                "customer_id": "5b1d8f3e-4e8a-4f57-9c43-2a3f1f0b8d11",
                "line_items": [
                    {
                        "item_id": "0f6c2c1e-6f0e-4a7e-9d0a-6f2d4c1b7e55",
                        "quantity": 2,
                        "price": 500,
                    }
                ],
                "created_at": "2024-01-01T00:00:00Z",
                "shipped_at": None,
                "completed_at": None,
            }
        },
    )

    order_id: int = Field(..., ge=0, le=MAX_ORDER_ID, description="Unique order identifier")
    customer_id: UUID = Field(..., description="Customer identifier")
    line_items: list[LineItem] = Field(default_factory=list, description="Ordered items")
    created_at: datetime = Field(..., description="Creation timestamp")
    shipped_at: datetime | None = Field(None, description="Shipping timestamp")
    completed_at: datetime | None = Field(None, description="Completion timestamp")

    @field_validator("created_at", "shipped_at", "completed_at")
    @classmethod
    def ensure_timezone(cls, v: datetime | None) -> datetime | None:
        """Treat naive timestamps as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v

    @model_validator(mode="after")
    def validate_timeline(self) -> Order:
        """Check that lifecycle timestamps are consistent and ordered."""
        if self.completed_at is not None and self.shipped_at is None:
            raise ValueError("completed_at requires shipped_at")
        if self.shipped_at is not None and self.shipped_at < self.created_at:
            raise ValueError("shipped_at cannot be earlier than created_at")
        if (
            self.completed_at is not None
            and self.shipped_at is not None
            and self.completed_at < self.shipped_at
        ):
            raise ValueError("completed_at cannot be earlier than shipped_at")
        return self

    @property
    def status(self) -> OrderStatus:
        """Current lifecycle status."""
        if self.completed_at is not None:
            return OrderStatus.COMPLETED
        if self.shipped_at is not None:
            return OrderStatus.SHIPPED
        return OrderStatus.CREATED


class FindAllPage(BaseModel):
    """Cursor-based page request over the order index."""

    model_config = ConfigDict(frozen=True)

    cursor: int = Field(0, ge=0, description="Scan cursor, 0 starts a new traversal")
    size: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Page size hint")


class FindResult(BaseModel):
    """A page of orders plus the cursor to continue the traversal."""

    model_config = ConfigDict(frozen=True)

    orders: list[Order] = Field(default_factory=list)
    cursor: int = Field(0, ge=0, description="Next cursor, 0 when traversal is complete")


class ValidationLevel(str, Enum):
    """Value object representing validation issue severity levels."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class ValidationIssue(BaseModel):
    """Value object representing a configuration validation issue."""

    model_config = ConfigDict(frozen=True, strict=True)

    level: ValidationLevel = Field(..., description="Issue severity")
    category: str = Field(..., description="Issue category: REDIS, CONFIG, etc.")
    message: str = Field(..., description="Human-readable issue description")
    resolution: str | None = Field(None, description="Suggested resolution steps")
    details: dict = Field(default_factory=dict, description="Additional context")

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        """Ensure category is uppercase."""
        return v.upper()


class ValidationResult(BaseModel):
    """Outcome of validating a configuration."""

    is_valid: bool = Field(default=True, description="Overall validation status")
    context: str = Field(default="", description="Validation context")
    issues: list[ValidationIssue] = Field(default_factory=list, description="All validation issues")
    diagnostics: dict = Field(default_factory=dict, description="Diagnostic information")

    def add_issue(self, issue: ValidationIssue) -> None:
        """Add a validation issue to the result."""
        self.issues.append(issue)
        if issue.level == ValidationLevel.ERROR:
            self.is_valid = False

    def get_issues_by_level(self, level: ValidationLevel) -> list[ValidationIssue]:
        """Get all issues of a specific level."""
        return [issue for issue in self.issues if issue.level == level]

    def has_warnings(self) -> bool:
        """Check if validation has any warnings."""
        return any(issue.level == ValidationLevel.WARNING for issue in self.issues)


class ServiceConfiguration(BaseModel):
    """Runtime configuration of the Orders API."""

    model_config = ConfigDict(strict=True, frozen=True)

    redis_url: str = Field(..., description="Redis connection URL")
    server_port: int = Field(..., ge=1, le=65535, description="HTTP port number")
    log_level: str = Field("INFO", description="Logging level")
    environment: str = Field("development", description="Deployment environment")
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Default page size")
    store_timeout_seconds: float = Field(5.0, gt=0, description="Redis socket timeout")
    order_id_strategy: str = Field("sequence", description="Order id generator: sequence or random")
    order_codec: str = Field("json", description="Stored record codec: json or msgpack")
    skip_malformed_orders: bool = Field(
        False, description="Skip undecodable records while listing instead of failing"
    )

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("Redis URL must start with redis://, rediss:// or unix://")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate the logging level name."""
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate the deployment environment."""
        if v not in ("development", "staging", "production"):
            raise ValueError(f"Invalid environment: {v}")
        return v

    @field_validator("order_id_strategy")
    @classmethod
    def validate_id_strategy(cls, v: str) -> str:
        """Validate the order id generation strategy."""
        if v not in ("sequence", "random"):
            raise ValueError(f"Invalid order id strategy: {v}")
        return v

    @field_validator("order_codec")
    @classmethod
    def validate_codec(cls, v: str) -> str:
        """Validate the stored record codec."""
        if v not in ("json", "msgpack"):
            raise ValueError(f"Invalid order codec: {v}")
        return v
