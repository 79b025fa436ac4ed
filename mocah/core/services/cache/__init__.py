from mocah.core.services.cache.entities import (
    BRAND_GUIDE_PREFERENCE_TTL_SECONDS,
    BRAND_KIT_TTL_SECONDS,
    MEMBERSHIP_TTL_SECONDS,
    EntityCache,
    brand_guide_preference_cache,
    brand_kit_cache,
    cache_brand_guide_preference,
    cache_brand_kit,
    cache_membership,
    get_cached_brand_guide_preference,
    get_cached_brand_kit,
    get_cached_membership,
    invalidate_brand_guide_preference_cache,
    invalidate_brand_kit_cache,
    invalidate_membership_cache,
    membership_cache,
)
from mocah.core.services.cache.keys import (
    ORG_SCOPE,
    brand_guide_preference_key,
    escape_key_component,
    brand_kit_key,
    membership_key,
    quota_key,
    rate_limit_key,
)

__all__ = [
    # Keys
    "ORG_SCOPE",
    "escape_key_component",
    "membership_key",
    "brand_kit_key",
    "brand_guide_preference_key",
    "quota_key",
    "rate_limit_key",
    # Entity caches
    "EntityCache",
    "MEMBERSHIP_TTL_SECONDS",
    "BRAND_KIT_TTL_SECONDS",
    "BRAND_GUIDE_PREFERENCE_TTL_SECONDS",
    "membership_cache",
    "brand_kit_cache",
    "brand_guide_preference_cache",
    "get_cached_membership",
    "cache_membership",
    "invalidate_membership_cache",
    "get_cached_brand_kit",
    "cache_brand_kit",
    "invalidate_brand_kit_cache",
    "get_cached_brand_guide_preference",
    "cache_brand_guide_preference",
    "invalidate_brand_guide_preference_cache",
]
