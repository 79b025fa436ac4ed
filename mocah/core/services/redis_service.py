"""
Redis service for the request-scoped caching layer.

This module owns the process-wide async Redis client and the ``fail_open``
decorator every cache operation goes through. A missing or broken store never
raises past this layer: callers see a cache miss (or a no-op) and a log line.
"""

from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, TypeVar

from redis.asyncio import Redis

from mocah.core.config import redis_logger, settings
from mocah.core.services.base import SingletonService

R = TypeVar("R")


class RedisService(SingletonService):
    """
    Singleton Redis service for async Redis operations.

    The client is built once from configuration (endpoint + credential) or
    injected directly, which is how tests substitute an in-memory fake.

    Attributes:
        _client: The async Redis client instance, or None when caching is off.

    Example:
        >>> await RedisService.init("rediss://cache.internal:6379/0", token="secret")
        >>> RedisService.is_available()
        True
        >>> await RedisService.aclose()
    """

    _client: Redis | None = None

    @classmethod
    async def init(
        cls,
        url: str | None = None,
        token: str | None = None,
        client: Redis | None = None,
    ) -> bool:
        """
        Initialize the Redis client.

        Any existing client is closed first. This method never raises: a
        missing endpoint or credential, or a failure while building the
        client, leaves the service unavailable and every cache operation
        degrades to a miss.

        Args:
            url: The Redis connection URL. If None, uses settings.REDIS_URL.
            token: The Redis password. If None, uses settings.REDIS_TOKEN.
            client: A pre-built client to use instead of constructing one.

        Returns:
            bool: True if a client is available after the call.
        """
        await cls.aclose()

        if client is not None:
            cls._client = client
            cls._initialized = True
            redis_logger.info("Redis client injected")
            return True

        url = settings.REDIS_URL if url is None else url
        token = settings.REDIS_TOKEN if token is None else token

        if not url or not token:
            redis_logger.warning(
                "Redis URL or token not configured; caching is disabled"
            )
            cls._initialized = True
            return False

        try:
            cls._client = Redis.from_url(
                url,
                password=token,
                decode_responses=True,
                socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
                socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
            )
            redis_logger.info("Redis client initialized")
        except Exception as e:
            cls._client = None
            redis_logger.error(f"Failed to initialize Redis client: {str(e)}")

        cls._initialized = True
        return cls._client is not None

    @classmethod
    async def aclose(cls) -> None:
        """
        Close the Redis client connection.

        Safe to call even if the client is not initialized.
        """
        if cls._client is not None:
            try:
                await cls._client.aclose()
                redis_logger.info("Redis client closed successfully")
            except Exception as e:
                redis_logger.warning(f"Error closing Redis client: {str(e)}")
            finally:
                cls._client = None

    @classmethod
    def is_available(cls) -> bool:
        """
        Check whether a client exists. Performs no network I/O.

        Returns:
            bool: True if client is initialized, False otherwise.
        """
        return cls._client is not None

    @classmethod
    def get_client(cls) -> Redis | None:
        return cls._client

    @classmethod
    async def ping(cls) -> bool:
        """
        Ping the Redis server to check connectivity.

        Returns:
            bool: True if ping succeeds, False otherwise.
        """
        if cls._client is None:
            redis_logger.warning("Redis ping attempted but client not initialized")
            return False

        try:
            result = await cls._client.ping()  # type: ignore[misc]
            redis_logger.debug("Redis ping successful")
            return bool(result)
        except Exception as e:
            redis_logger.error(f"Redis ping failed: {str(e)}")
            return False

    @classmethod
    def _reset(cls) -> None:
        super()._reset()
        cls._client = None


def fail_open(
    operation: str, default: Any = None
) -> Callable[[Callable[..., Awaitable[R]]], Callable[..., Awaitable[R]]]:
    """
    Wrap a store action so it degrades to ``default`` instead of raising.

    The wrapped coroutine receives the live client as its first argument and
    the key as its second; callers invoke it with the key only. Exactly one
    log line is written per failed call: a warning when no client exists (no
    I/O is attempted) or an error naming the operation and key when the
    action raises.

    Args:
        operation: Name used in log lines, e.g. ``"get"`` or ``"hincrby"``.
        default: Value returned on the degraded path.

    Example:
        >>> @fail_open("get")
        ... async def get_value(client: Redis, key: str) -> str | None:
        ...     return await client.get(key)
        >>> await get_value("brandkit:org_1")
    """

    def decorator(
        func: Callable[..., Awaitable[R]],
    ) -> Callable[..., Awaitable[R]]:
        @functools.wraps(func)
        async def wrapper(key: str, *args: Any, **kwargs: Any) -> R:
            client = RedisService.get_client()
            if client is None:
                redis_logger.warning(
                    f"Redis {operation}({key}) attempted but client not initialized"
                )
                return default

            try:
                return await func(client, key, *args, **kwargs)
            except Exception as e:
                redis_logger.error(f"Redis {operation}({key}) failed: {str(e)}")
                return default

        return wrapper

    return decorator
