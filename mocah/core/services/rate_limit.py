"""
Fixed-window rate limiting on top of the Redis windowed counter.

Rate limiting fails open: when Redis is unavailable or errors, requests are
allowed and a warning is logged. Exceeding a limit is the one condition in the
caching layer that deliberately raises.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from mocah.core.config import rate_limit_logger, settings
from mocah.core.enums import RateLimitWindow
from mocah.core.exceptions.types import RateLimitExceededException
from mocah.core.services.cache.keys import escape_key_component, rate_limit_key
from mocah.core.services.cache.store import increment_window


@dataclass
class RateLimitResult:
    """
    Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed.
        count: Requests counted in the current window, including this one.
        remaining: Number of remaining requests in the current window.
        limit: The maximum number of requests allowed.
        reset_at: When the rate limit window resets.
        retry_after: Seconds until the client can retry (only if not allowed).
    """

    allowed: bool
    count: int
    remaining: int
    limit: int
    reset_at: datetime
    retry_after: int | None = None


async def check_rate_limit(
    identifier: str, window: RateLimitWindow, limit: int
) -> RateLimitResult:
    """
    Count one request against ``identifier`` in ``window`` and compare to ``limit``.

    Args:
        identifier: Caller-chosen composite identity, e.g. ``image:{org}:{user}``.
        window: The fixed window to count in.
        limit: Maximum requests allowed in the window.

    Returns:
        RateLimitResult with the check outcome.
    """
    now = datetime.now(timezone.utc)
    key = rate_limit_key(identifier, window.value)

    counted = await increment_window(key, window.seconds)

    if counted is None:
        rate_limit_logger.warning(
            f"Redis unavailable during rate limit check for key: {key}, allowing request"
        )
        return RateLimitResult(
            allowed=True,
            count=0,
            remaining=limit,
            limit=limit,
            reset_at=now + timedelta(seconds=window.seconds),
        )

    count, ttl = counted
    if ttl < 0:
        ttl = window.seconds
    reset_at = now + timedelta(seconds=ttl)

    if count > limit:
        rate_limit_logger.warning(
            f"Rate limit exceeded for key: {key}, count: {count}, retry after: {ttl}s"
        )
        return RateLimitResult(
            allowed=False,
            count=count,
            remaining=0,
            limit=limit,
            reset_at=reset_at,
            retry_after=max(1, ttl),
        )

    remaining = limit - count
    rate_limit_logger.debug(
        f"Rate limit check passed for key: {key}, remaining: {remaining}"
    )
    return RateLimitResult(
        allowed=True,
        count=count,
        remaining=remaining,
        limit=limit,
        reset_at=reset_at,
    )


async def enforce_image_rate_limits(user_id: str, organization_id: str) -> None:
    """
    Enforce the per-minute and per-day image generation limits.

    Both windows are counted on every call; the minute window is reported
    first when both are exceeded.

    Raises:
        RateLimitExceededException: If either window's limit is exceeded.
    """
    identifier = (
        f"image:{escape_key_component(organization_id)}:{escape_key_component(user_id)}"
    )

    minute, day = await asyncio.gather(
        check_rate_limit(
            identifier, RateLimitWindow.MINUTE, settings.FAL_IMAGE_RATE_PER_MINUTE
        ),
        check_rate_limit(
            identifier, RateLimitWindow.DAY, settings.FAL_IMAGE_RATE_PER_DAY
        ),
    )

    if not minute.allowed:
        raise RateLimitExceededException(
            "Image generation rate limit exceeded (per minute)",
            retry_after=minute.retry_after,
        )
    if not day.allowed:
        raise RateLimitExceededException(
            "Image generation rate limit exceeded (per day)",
            retry_after=day.retry_after,
        )
