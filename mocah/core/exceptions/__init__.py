from mocah.core.exceptions.types import (
    AppException,
    AuthenticationException,
    BadRequestException,
    DatabaseException,
    ForbiddenException,
    QuotaExceededException,
    RateLimitExceededException,
)

__all__ = [
    "AppException",
    "AuthenticationException",
    "BadRequestException",
    "DatabaseException",
    "ForbiddenException",
    "QuotaExceededException",
    "RateLimitExceededException",
]
