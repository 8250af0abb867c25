"""Centralized error handling for the dashboard API endpoints."""

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.services.api_proxy import (
    InvalidUrlError,
    ProviderNotConfiguredError,
    ProxyError,
    SymbolNotFoundError,
    UpstreamApiError,
)


class ApiError:
    """Standard error codes for the dashboard API."""

    # Request errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_URL = "INVALID_URL"

    # Upstream errors
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    PROVIDER_NOT_CONFIGURED = "PROVIDER_NOT_CONFIGURED"
    SYMBOL_NOT_FOUND = "SYMBOL_NOT_FOUND"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse:
    """Standardized error response format."""

    def __init__(
        self,
        error_code: str,
        message: str,
        details: dict[str, Any] | list[str] | None = None,
        status_code: int = status.HTTP_400_BAD_REQUEST,
    ):
        """
        Initialize error response.

        Args:
            error_code: Standard error code from ApiError class
            message: Human-readable error message
            details: Additional error details (field-specific errors, etc.)
            status_code: HTTP status code
        """
        self.error_code = error_code
        self.message = message
        self.details = details
        self.status_code = status_code

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON response."""
        response = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            response["details"] = self.details
        return response

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=self.status_code,
            detail=self.to_dict(),
        )


def create_missing_field_error(field: str, message: str | None = None) -> ErrorResponse:
    """
    Create an error for a required query parameter that was not supplied.

    Args:
        field: Name of the missing parameter
        message: Optional message overriding "<Field> is required"

    Returns:
        ErrorResponse with the field name in details
    """
    return ErrorResponse(
        error_code=ApiError.MISSING_FIELD,
        message=message or f"{field.capitalize()} is required",
        details={field: "required"},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def create_validation_error_response(errors: list[dict[str, Any]]) -> ErrorResponse:
    """
    Create standardized validation error response from request validation errors.

    Args:
        errors: List of validation errors from FastAPI

    Returns:
        ErrorResponse with field-specific validation errors
    """
    field_errors = {}
    for error in errors:
        field_path = ".".join(str(loc) for loc in error["loc"])
        field_errors[field_path] = error["msg"]

    return ErrorResponse(
        error_code=ApiError.VALIDATION_ERROR,
        message="Validation failed for one or more fields",
        details=field_errors,
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def create_internal_error(message: str = "An unexpected error occurred") -> ErrorResponse:
    return ErrorResponse(
        error_code=ApiError.INTERNAL_ERROR,
        message=message,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI validation errors with standardized format."""
    error_response = create_validation_error_response(exc.errors())
    return JSONResponse(
        status_code=error_response.status_code,
        content=error_response.to_dict(),
    )


def handle_service_error(error: Exception) -> ErrorResponse:
    """
    Convert a service layer error into an error response.

    Proxy errors keep their status code; anything else becomes a generic
    internal error.

    Args:
        error: Exception from service layer

    Returns:
        ErrorResponse with appropriate error code and message
    """
    if not isinstance(error, ProxyError):
        return create_internal_error()

    if isinstance(error, InvalidUrlError):
        error_code = ApiError.INVALID_URL
    elif isinstance(error, ProviderNotConfiguredError):
        error_code = ApiError.PROVIDER_NOT_CONFIGURED
    elif isinstance(error, SymbolNotFoundError):
        error_code = ApiError.SYMBOL_NOT_FOUND
    elif isinstance(error, UpstreamApiError):
        error_code = ApiError.UPSTREAM_ERROR
    else:
        error_code = ApiError.INTERNAL_ERROR

    return ErrorResponse(
        error_code=error_code,
        message=error.message,
        status_code=error.status_code,
    )
