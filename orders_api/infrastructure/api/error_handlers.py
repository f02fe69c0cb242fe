"""Centralized error handling for the API layer.

Maps domain exceptions to HTTP responses with a single error body shape:
``{"error": {"code", "message", "details"}}``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ...domain.exceptions import (
    ConfigurationException,
    DomainException,
    InvalidTransitionException,
    OrderAlreadyExistsException,
    OrderNotFoundException,
    SerializationException,
    StoreUnavailableException,
    TransactionFailedException,
)

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


class ErrorDetail(BaseModel):
    """Standard error detail model."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    details: dict[str, Any] | None = Field(None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Standard error response model."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail = Field(..., description="Error information")


# Mapping of domain exception types to HTTP status codes
EXCEPTION_STATUS_MAP: dict[type[DomainException], int] = {
    OrderNotFoundException: status.HTTP_404_NOT_FOUND,
    OrderAlreadyExistsException: status.HTTP_409_CONFLICT,
    InvalidTransitionException: status.HTTP_400_BAD_REQUEST,
    SerializationException: status.HTTP_500_INTERNAL_SERVER_ERROR,
    StoreUnavailableException: status.HTTP_503_SERVICE_UNAVAILABLE,
    TransactionFailedException: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationException: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def create_error_response(
    exception: Exception, status_code: int, details: dict[str, Any] | None = None
) -> JSONResponse:
    """Create a standardized error response.

    Args:
        exception: The exception that occurred
        status_code: HTTP status code
        details: Additional error details

    Returns:
        JSONResponse with error information
    """
    if isinstance(exception, DomainException):
        error_code = exception.error_code
        message = exception.message
    else:
        error_code = "INTERNAL_ERROR"
        message = str(exception) or "An internal error occurred"

    error_response = ErrorResponse(
        error=ErrorDetail(code=error_code, message=message, details=details)
    )
    return JSONResponse(status_code=status_code, content=error_response.model_dump())


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Handle domain-specific exceptions."""
    status_code = EXCEPTION_STATUS_MAP.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(
            f"Domain exception on {request.method} {request.url.path}: "
            f"{exc.message} (code: {exc.error_code})"
        )
    else:
        logger.warning(
            f"Domain exception on {request.method} {request.url.path}: "
            f"{exc.message} (code: {exc.error_code})"
        )

    return create_error_response(exc, status_code, exc.details or None)


async def validation_exception_handler(
    request: Request, exc: ValidationError | RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation exceptions.

    Args:
        request: The request that caused the exception
        exc: The validation exception

    Returns:
        JSONResponse with validation error details
    """
    errors = exc.errors()
    logger.warning(f"Validation error on {request.method} {request.url.path}: {len(errors)} errors")

    first_error = errors[0] if errors else {}
    field = ".".join(str(loc) for loc in first_error.get("loc", []))
    msg = first_error.get("msg", "Invalid input data")

    details = {
        "field": field,
        "error_type": first_error.get("type", "validation_error"),
        "errors": [
            {
                "field": ".".join(str(loc) for loc in e.get("loc", [])),
                "message": e.get("msg", ""),
                "type": e.get("type", ""),
            }
            for e in errors
        ],
    }

    error_response = ErrorResponse(
        error=ErrorDetail(
            code="VALIDATION_ERROR",
            message=f"Validation failed for field '{field}': {msg}",
            details=details,
        )
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle FastAPI HTTP exceptions with consistent format."""
    logger.info(
        f"HTTP exception on {request.method} {request.url.path}: {exc.status_code} - {exc.detail}"
    )

    error_response = ErrorResponse(
        error=ErrorDetail(code=f"HTTP_{exc.status_code}", message=str(exc.detail))
    )
    return JSONResponse(status_code=exc.status_code, content=error_response.model_dump())


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc,
    )

    error_response = ErrorResponse(
        error=ErrorDetail(code="INTERNAL_ERROR", message="An internal server error occurred")
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the FastAPI app."""
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
