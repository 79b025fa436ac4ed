"""
Test suite for exception handlers.

Run tests:
    pytest tests/core/exceptions/test_handlers.py -v
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from fastapi import status

from mocah.core.exceptions.handlers import (
    EXCEPTION_HANDLERS,
    authentication_exception_handler,
    client_error_exception_handler,
    database_exception_handler,
    exception_schema,
    general_exception_handler,
    quota_exceeded_exception_handler,
    rate_limit_exception_handler,
)
from mocah.core.exceptions.types import (
    AppException,
    AuthenticationException,
    BadRequestException,
    DatabaseException,
    ForbiddenException,
    QuotaExceededException,
    RateLimitExceededException,
)


class TestGeneralExceptionHandler:
    async def test_returns_json_response(self):
        exc = AppException("Test error", status_code=status.HTTP_400_BAD_REQUEST)

        with patch("mocah.core.exceptions.handlers.request_logger") as mock_logger:
            response = await general_exception_handler(MagicMock(), exc)

        mock_logger.error.assert_called_once()
        assert "GeneralException" in str(mock_logger.error.call_args[0][0])
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert b"An unexpected error occurred" in response.body
        assert b"Test error" in response.body

    async def test_defaults_to_500(self):
        with patch("mocah.core.exceptions.handlers.request_logger"):
            response = await general_exception_handler(
                MagicMock(), AppException("Internal error")
            )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR


class TestDatabaseExceptionHandler:
    async def test_returns_500(self):
        with patch("mocah.core.exceptions.handlers.request_logger") as mock_logger:
            response = await database_exception_handler(
                MagicMock(), DatabaseException("Connection lost")
            )

        mock_logger.error.assert_called_once()
        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert b"A database error occurred" in response.body
        assert b"Connection lost" in response.body


class TestAuthenticationExceptionHandler:
    async def test_returns_401(self):
        with patch("mocah.core.exceptions.handlers.request_logger") as mock_logger:
            response = await authentication_exception_handler(
                MagicMock(), AuthenticationException("Invalid internal API key.")
            )

        mock_logger.warning.assert_called_once()
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert json.loads(response.body) == {"detail": "Invalid internal API key."}


class TestClientErrorExceptionHandler:
    @pytest.mark.parametrize(
        "exc, expected_status",
        [
            (BadRequestException("bad"), status.HTTP_400_BAD_REQUEST),
            (ForbiddenException("nope"), status.HTTP_403_FORBIDDEN),
        ],
    )
    async def test_uses_exception_status(self, exc, expected_status):
        with patch("mocah.core.exceptions.handlers.request_logger"):
            response = await client_error_exception_handler(MagicMock(), exc)

        assert response.status_code == expected_status
        assert json.loads(response.body) == {"detail": str(exc)}


class TestQuotaExceededExceptionHandler:
    async def test_includes_quota_details(self):
        exc = QuotaExceededException(
            details={"period": "2025-01", "exceeded": ["textGenerations"]}
        )

        with patch("mocah.core.exceptions.handlers.request_logger"):
            response = await quota_exceeded_exception_handler(MagicMock(), exc)

        body = json.loads(response.body)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert body["quota"] == {"period": "2025-01", "exceeded": ["textGenerations"]}

    async def test_without_details(self):
        with patch("mocah.core.exceptions.handlers.request_logger"):
            response = await quota_exceeded_exception_handler(
                MagicMock(), QuotaExceededException()
            )

        assert "quota" not in json.loads(response.body)


class TestRateLimitExceptionHandler:
    async def test_sets_retry_after_header(self):
        exc = RateLimitExceededException("Too many images", retry_after=42)

        with patch("mocah.core.exceptions.handlers.request_logger"):
            response = await rate_limit_exception_handler(MagicMock(), exc)

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response.headers["Retry-After"] == "42"
        assert json.loads(response.body) == {"detail": "Too many images"}

    async def test_without_retry_after(self):
        with patch("mocah.core.exceptions.handlers.request_logger"):
            response = await rate_limit_exception_handler(
                MagicMock(), RateLimitExceededException()
            )

        assert "Retry-After" not in response.headers


class TestRegistration:
    def test_quota_handler_registered_before_forbidden(self):
        classes = [exc_class for exc_class, _ in EXCEPTION_HANDLERS]

        assert classes.index(QuotaExceededException) < classes.index(ForbiddenException)
        assert classes[-1] is AppException

    def test_exception_schema_documents_common_errors(self):
        assert status.HTTP_500_INTERNAL_SERVER_ERROR in exception_schema
        assert status.HTTP_401_UNAUTHORIZED in exception_schema
        assert status.HTTP_429_TOO_MANY_REQUESTS in exception_schema
