"""API routes for the Orders API.

Thin FastAPI layer: request parsing, response shaping and status codes.
Everything else is delegated to the OrderService.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field

from ...application.order_service import OrderService
from ...domain.models import MAX_ORDER_ID, MAX_PAGE_SIZE, LineItem, Order, OrderStatus
from .dependencies import get_order_service


# Request/Response models
class OrderCreateRequest(BaseModel):
    """Request model for creating an order."""

    model_config = ConfigDict(extra="forbid")

    customer_id: UUID = Field(..., description="Customer placing the order")
    line_items: list[LineItem] = Field(default_factory=list, description="Ordered items")


class OrderStatusUpdateRequest(BaseModel):
    """Request model for moving an order to a new status."""

    model_config = ConfigDict(extra="forbid")

    status: str = Field(..., description="Requested status: shipped or completed")


class OrderResponse(BaseModel):
    """API response model for a single order."""

    order_id: int
    customer_id: UUID
    line_items: list[LineItem]
    created_at: datetime
    shipped_at: datetime | None
    completed_at: datetime | None
    status: OrderStatus

    @classmethod
    def from_order(cls, order: Order) -> OrderResponse:
        """Build the response from a domain order."""
        return cls(**order.model_dump(), status=order.status)


class OrderPageResponse(BaseModel):
    """API response model for one page of orders."""

    items: list[OrderResponse]
    next: int | None = Field(None, description="Cursor of the next page, absent when done")


class HealthResponse(BaseModel):
    """API response model for the root endpoint."""

    status: str = "ok"


OrderId = Annotated[int, Path(ge=0, le=MAX_ORDER_ID, description="Order identifier")]

# Create routers
router = APIRouter()
order_router = APIRouter(prefix="/orders", tags=["Orders"])


@router.get("/", response_model=HealthResponse)
async def root() -> HealthResponse:
    """Liveness endpoint."""
    return HealthResponse()


@order_router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderCreateRequest,
    response: Response,
    order_service: OrderService = Depends(get_order_service),  # noqa: B008
) -> OrderResponse:
    """Create a new order."""
    order = await order_service.create_order(request.customer_id, request.line_items)
    response.headers["Location"] = f"/orders/{order.order_id}"
    return OrderResponse.from_order(order)


@order_router.get("", response_model=OrderPageResponse, response_model_exclude_unset=True)
async def list_orders(
    cursor: int = Query(0, ge=0, description="Cursor returned by the previous page"),
    size: int | None = Query(None, ge=1, le=MAX_PAGE_SIZE, description="Page size hint"),
    order_service: OrderService = Depends(get_order_service),  # noqa: B008
) -> OrderPageResponse:
    """List orders one page at a time."""
    result = await order_service.list_orders(cursor, size)
    items = [OrderResponse.from_order(order) for order in result.orders]
    if result.cursor:
        return OrderPageResponse(items=items, next=result.cursor)
    return OrderPageResponse(items=items)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: OrderId,
    order_service: OrderService = Depends(get_order_service),  # noqa: B008
) -> OrderResponse:
    """Get a specific order by identifier."""
    return OrderResponse.from_order(await order_service.get_order(order_id))


@order_router.put("/{order_id}", response_model=OrderResponse)
async def update_order_status(
    order_id: OrderId,
    request: OrderStatusUpdateRequest,
    order_service: OrderService = Depends(get_order_service),  # noqa: B008
) -> OrderResponse:
    """Move an order to the requested status."""
    order = await order_service.update_status(order_id, request.status)
    return OrderResponse.from_order(order)


@order_router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(
    order_id: OrderId,
    order_service: OrderService = Depends(get_order_service),  # noqa: B008
) -> Response:
    """Delete an order."""
    await order_service.delete_order(order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


router.include_router(order_router)
