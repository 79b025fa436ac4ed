import secrets
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header

from mocah.core.config import request_logger, settings
from mocah.core.exceptions.types import AuthenticationException, BadRequestException


class InvalidInternalAPIKeyException(AuthenticationException):
    """Raised when internal API key is invalid or missing."""

    def __init__(self, message: str = "Invalid or missing internal API key.") -> None:
        super().__init__(message)


async def verify_internal_api_key(
    x_internal_api_key: Annotated[str | None, Header()] = None,
) -> str:
    """
    Verify the internal API key for internal endpoints.

    The web tier authenticates the end user and calls this service with the
    shared X-Internal-API-Key header.

    Args:
        x_internal_api_key: The API key from X-Internal-API-Key header.

    Returns:
        The validated API key.

    Raises:
        InvalidInternalAPIKeyException: If the key is missing or invalid.
    """
    if not x_internal_api_key:
        request_logger.warning("Internal API request missing X-Internal-API-Key header")
        raise InvalidInternalAPIKeyException("Missing X-Internal-API-Key header.")

    if not secrets.compare_digest(x_internal_api_key, settings.INTERNAL_API_SECRET):
        request_logger.warning("Internal API request with invalid API key")
        raise InvalidInternalAPIKeyException("Invalid internal API key.")

    return x_internal_api_key


@dataclass(frozen=True)
class CallerContext:
    """User and organization the web tier is acting on behalf of."""

    user_id: str
    organization_id: str


async def get_caller_context(
    _: Annotated[str, Depends(verify_internal_api_key)],
    x_user_id: Annotated[str | None, Header()] = None,
    x_organization_id: Annotated[str | None, Header()] = None,
) -> CallerContext:
    """
    Resolve the acting user and organization from forwarded headers.

    Raises:
        InvalidInternalAPIKeyException: If the internal API key is missing or invalid.
        BadRequestException: If either identity header is missing.
    """
    if not x_user_id or not x_organization_id:
        raise BadRequestException(
            "X-User-Id and X-Organization-Id headers are required."
        )
    return CallerContext(user_id=x_user_id, organization_id=x_organization_id)


# Type aliases for internal API authentication
InternalAPIKeyDep = Annotated[str, Depends(verify_internal_api_key)]
CallerContextDep = Annotated[CallerContext, Depends(get_caller_context)]

__all__ = [
    "verify_internal_api_key",
    "get_caller_context",
    "CallerContext",
    "InternalAPIKeyDep",
    "CallerContextDep",
    "InvalidInternalAPIKeyException",
]
