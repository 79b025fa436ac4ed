from fastapi import Request, status
from fastapi.responses import JSONResponse

from mocah.core.config import request_logger
from mocah.core.exceptions.types import (
    AppException,
    AuthenticationException,
    BadRequestException,
    DatabaseException,
    ForbiddenException,
    QuotaExceededException,
    RateLimitExceededException,
)


async def general_exception_handler(request: Request, exc: AppException):
    """
    Handles general exceptions by returning a JSON response with the error message.

    Args:
        request: The request object.
        exc (AppException): The exception instance.

    Returns:
        JSONResponse: A response containing the error message and the exception's status code.
    """
    request_logger.error(f"GeneralException: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": f"An unexpected error occurred.\n{str(exc)}"},
    )


async def database_exception_handler(request: Request, exc: DatabaseException):
    """
    Handles database exceptions by returning a JSON response with the error message.

    Args:
        request: The request object.
        exc (DatabaseException): The database exception instance.

    Returns:
        JSONResponse: A response containing the error message and status code 500.
    """
    request_logger.error(f"DatabaseException: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": f"A database error occurred.\n{str(exc)}"},
    )


async def authentication_exception_handler(
    request: Request, exc: AuthenticationException
):
    """
    Handles authentication exceptions by returning a JSON response.

    Args:
        request: The request object.
        exc (AuthenticationException): The authentication exception instance.

    Returns:
        JSONResponse: A response containing the error message and status code 401.
    """
    request_logger.warning(f"AuthenticationException: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc)},
    )


async def client_error_exception_handler(request: Request, exc: AppException):
    """
    Handles 4xx exceptions (bad request, forbidden, not found).

    Args:
        request: The request object.
        exc (AppException): The exception instance.

    Returns:
        JSONResponse: A response carrying the exception's status code.
    """
    request_logger.warning(f"{type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc)},
    )


async def quota_exceeded_exception_handler(
    request: Request, exc: QuotaExceededException
):
    """
    Handles quota exhaustion by returning 403 with the quota details.

    Args:
        request: The request object.
        exc (QuotaExceededException): The quota exception instance.

    Returns:
        JSONResponse: A response with status code 403 and usage details.
    """
    request_logger.warning(f"QuotaExceededException: {exc}")
    content: dict = {"detail": str(exc)}
    if exc.details:
        content["quota"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def rate_limit_exception_handler(
    request: Request, exc: RateLimitExceededException
):
    """
    Handles rate limit exceeded exceptions by returning a JSON response.

    Args:
        request: The request object.
        exc (RateLimitExceededException): The rate limit exception instance.

    Returns:
        JSONResponse: A response with status code 429 and optional Retry-After header.
    """
    request_logger.warning(f"RateLimitExceededException: {exc}")
    headers = {}
    if exc.retry_after:
        headers["Retry-After"] = str(exc.retry_after)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc)},
        headers=headers,
    )


EXCEPTION_HANDLERS = [
    (QuotaExceededException, quota_exceeded_exception_handler),
    (RateLimitExceededException, rate_limit_exception_handler),
    (AuthenticationException, authentication_exception_handler),
    (BadRequestException, client_error_exception_handler),
    (ForbiddenException, client_error_exception_handler),
    (DatabaseException, database_exception_handler),
    (AppException, general_exception_handler),
]


exception_schema = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {
        "description": "Internal Server Error",
        "content": {
            "application/json": {
                "example": {"detail": "Some internal server error message"},
            }
        },
    },
    status.HTTP_401_UNAUTHORIZED: {
        "description": "Authentication Error",
        "content": {
            "application/json": {
                "example": {"detail": "Invalid or missing internal API key."},
            }
        },
    },
    status.HTTP_429_TOO_MANY_REQUESTS: {
        "description": "Rate Limit Exceeded",
        "content": {
            "application/json": {
                "example": {"detail": "Rate limit exceeded. Please try again later."},
            }
        },
    },
}


__all__ = [
    "EXCEPTION_HANDLERS",
    "general_exception_handler",
    "database_exception_handler",
    "authentication_exception_handler",
    "client_error_exception_handler",
    "quota_exceeded_exception_handler",
    "rate_limit_exception_handler",
    "exception_schema",
]
