"""Tests for API error handling."""

from fastapi import status
from hypothesis import given
from hypothesis import strategies as st

from src.api.error_handlers import (
    ApiError,
    ErrorResponse,
    create_missing_field_error,
    create_validation_error_response,
    handle_service_error,
)
from src.services.api_proxy import (
    InvalidUrlError,
    ProviderNotConfiguredError,
    SymbolNotFoundError,
    UpstreamApiError,
)


class TestErrorResponse:
    def test_to_dict_omits_empty_details(self):
        response = ErrorResponse(ApiError.INTERNAL_ERROR, "boom")
        assert response.to_dict() == {"error": "INTERNAL_ERROR", "message": "boom"}

    def test_to_http_exception(self):
        exc = ErrorResponse(
            ApiError.INVALID_URL, "Invalid URL format", status_code=status.HTTP_400_BAD_REQUEST
        ).to_http_exception()
        assert exc.status_code == 400
        assert exc.detail == {"error": "INVALID_URL", "message": "Invalid URL format"}

    def test_missing_field(self):
        response = create_missing_field_error("symbol")
        assert response.message == "Symbol is required"
        assert response.details == {"symbol": "required"}

    def test_validation_errors_are_keyed_by_location(self):
        response = create_validation_error_response(
            [{"loc": ("query", "mode"), "msg": "Input should be 'card', 'table' or 'chart'"}]
        )
        assert response.error_code == ApiError.VALIDATION_ERROR
        assert response.details == {"query.mode": "Input should be 'card', 'table' or 'chart'"}


class TestHandleServiceError:
    def test_invalid_url(self):
        response = handle_service_error(InvalidUrlError("Invalid URL format"))
        assert response.error_code == ApiError.INVALID_URL
        assert response.status_code == 400

    def test_provider_not_configured(self):
        response = handle_service_error(ProviderNotConfiguredError("API key not configured"))
        assert response.error_code == ApiError.PROVIDER_NOT_CONFIGURED
        assert response.status_code == 500

    def test_symbol_not_found(self):
        response = handle_service_error(SymbolNotFoundError("Stock symbol not found"))
        assert response.error_code == ApiError.SYMBOL_NOT_FOUND
        assert response.status_code == 404

    @given(st.integers(min_value=400, max_value=599), st.text(min_size=1))
    def test_upstream_status_is_preserved(self, status_code, message):
        """For any upstream failure, the response SHALL carry its status and message."""
        response = handle_service_error(UpstreamApiError(message, status_code=status_code))
        assert response.error_code == ApiError.UPSTREAM_ERROR
        assert response.status_code == status_code
        assert response.message == message

    def test_unexpected_errors_are_generic(self):
        response = handle_service_error(RuntimeError("secret detail"))
        assert response.error_code == ApiError.INTERNAL_ERROR
        assert response.status_code == 500
        assert "secret" not in response.message
