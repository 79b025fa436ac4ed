"""
Shared dependencies for FastAPI endpoints.

"""

from mocah.core.dependencies.db import SessionDep, get_async_session
from mocah.core.dependencies.internal import (
    CallerContext,
    CallerContextDep,
    InternalAPIKeyDep,
    InvalidInternalAPIKeyException,
    get_caller_context,
    verify_internal_api_key,
)

__all__ = [
    "get_async_session",
    "SessionDep",
    # Dependency functions
    "verify_internal_api_key",
    "get_caller_context",
    # Type aliases
    "InternalAPIKeyDep",
    "CallerContextDep",
    "CallerContext",
    # Exceptions
    "InvalidInternalAPIKeyException",
]
