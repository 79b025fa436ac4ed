"""
Entity caches: get / set / invalidate triplets memoizing one derived fact.

Each cache degrades to a miss when Redis is unavailable or failing; see
``mocah.core.services.redis_service.fail_open``.
"""

from typing import Any, Callable, Generic, TypeVar

from mocah.core.config import cache_logger
from mocah.core.services.cache.keys import (
    brand_guide_preference_key,
    brand_kit_key,
    membership_key,
)
from mocah.core.services.cache.store import delete_key, get_json, set_json

T = TypeVar("T")

MEMBERSHIP_TTL_SECONDS = 2 * 60
BRAND_KIT_TTL_SECONDS = 10 * 60
BRAND_GUIDE_PREFERENCE_TTL_SECONDS = 30 * 60


class EntityCache(Generic[T]):
    """
    JSON-encoded cache entry for a single entity, addressed by its id parts.

    Attributes:
        name: Human readable name used in log lines.
        key_builder: Builds the Redis key from the id parts.
        ttl: Time-to-live in seconds applied on every write.
        value_type: Expected decoded type; anything else is treated as a miss.
    """

    def __init__(
        self,
        name: str,
        key_builder: Callable[..., str],
        ttl: int,
        value_type: type,
    ) -> None:
        self.name = name
        self.key_builder = key_builder
        self.ttl = ttl
        self.value_type = value_type

    async def get(self, *id_parts: str) -> T | None:
        key = self.key_builder(*id_parts)
        value: Any = await get_json(key)
        if value is None:
            cache_logger.debug(f"Cache MISS: {key}")
            return None
        if not isinstance(value, self.value_type):
            cache_logger.warning(
                f"Cache {self.name} entry {key} holds {type(value).__name__}, "
                f"expected {self.value_type.__name__}; treating as miss"
            )
            return None
        cache_logger.debug(f"Cache HIT: {key}")
        return value

    async def set(self, *id_parts: str, value: T) -> bool:
        key = self.key_builder(*id_parts)
        return await set_json(key, value, self.ttl)

    async def invalidate(self, *id_parts: str) -> bool:
        key = self.key_builder(*id_parts)
        deleted = await delete_key(key)
        if deleted:
            cache_logger.info(f"Cache INVALIDATE: {key}")
        return deleted


membership_cache: EntityCache[bool] = EntityCache(
    "membership", membership_key, MEMBERSHIP_TTL_SECONDS, bool
)
brand_kit_cache: EntityCache[dict[str, Any]] = EntityCache(
    "brand kit", brand_kit_key, BRAND_KIT_TTL_SECONDS, dict
)
brand_guide_preference_cache: EntityCache[bool] = EntityCache(
    "brand guide preference",
    brand_guide_preference_key,
    BRAND_GUIDE_PREFERENCE_TTL_SECONDS,
    bool,
)


# Membership
async def get_cached_membership(user_id: str, organization_id: str) -> bool | None:
    """Return the cached membership flag, or None if not cached."""
    return await membership_cache.get(user_id, organization_id)


async def cache_membership(
    user_id: str, organization_id: str, is_member: bool
) -> None:
    await membership_cache.set(user_id, organization_id, value=is_member)


async def invalidate_membership_cache(user_id: str, organization_id: str) -> None:
    await membership_cache.invalidate(user_id, organization_id)


# Brand kit
async def get_cached_brand_kit(organization_id: str) -> dict[str, Any] | None:
    """Return the cached brand kit document, or None if not cached."""
    return await brand_kit_cache.get(organization_id)


async def cache_brand_kit(organization_id: str, brand_kit: dict[str, Any]) -> None:
    await brand_kit_cache.set(organization_id, value=brand_kit)


async def invalidate_brand_kit_cache(organization_id: str) -> None:
    """Drop the cached brand kit; call whenever the brand kit is updated."""
    await brand_kit_cache.invalidate(organization_id)


# Brand guide preference
async def get_cached_brand_guide_preference(
    user_id: str, organization_id: str
) -> bool | None:
    """
    Return whether the brand guide should be included in generation prompts.

    True to include, False to exclude, None when no preference is cached.
    """
    return await brand_guide_preference_cache.get(user_id, organization_id)


async def cache_brand_guide_preference(
    user_id: str, organization_id: str, include_brand_guide: bool
) -> None:
    await brand_guide_preference_cache.set(
        user_id, organization_id, value=include_brand_guide
    )


async def invalidate_brand_guide_preference_cache(
    user_id: str, organization_id: str
) -> None:
    await brand_guide_preference_cache.invalidate(user_id, organization_id)
