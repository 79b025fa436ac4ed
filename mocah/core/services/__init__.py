from mocah.core.services.base import SingletonService
from mocah.core.services.quota_cache import (
    QUOTA_TTL_SECONDS,
    QuotaRecord,
    cache_quota,
    get_cached_quota,
    increment_quota_counters,
    invalidate_quota_cache,
)
from mocah.core.services.rate_limit import (
    RateLimitResult,
    check_rate_limit,
    enforce_image_rate_limits,
)
from mocah.core.services.redis_service import RedisService, fail_open
from mocah.core.services.rollout import (
    GenerationMetadata,
    RolloutFlags,
    get_rollout_flags,
    get_template_generation_version,
    log_generation_metrics,
    rollout_bucket,
    rollout_hash,
)

__all__ = [
    # Core services
    "SingletonService",
    "RedisService",
    "fail_open",
    # Quota cache
    "QUOTA_TTL_SECONDS",
    "QuotaRecord",
    "get_cached_quota",
    "cache_quota",
    "invalidate_quota_cache",
    "increment_quota_counters",
    # Rate limiting
    "RateLimitResult",
    "check_rate_limit",
    "enforce_image_rate_limits",
    # Rollout
    "RolloutFlags",
    "GenerationMetadata",
    "get_rollout_flags",
    "get_template_generation_version",
    "log_generation_metrics",
    "rollout_bucket",
    "rollout_hash",
]
