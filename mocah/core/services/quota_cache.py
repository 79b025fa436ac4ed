"""
Quota Cache Service for per-period usage counters.

Usage for an (organization, user-or-org, period) triple is stored as one Redis
hash. Counters are bumped with HINCRBY so parallel generations never lose
updates; limits only enter the hash through ``cache_quota`` after an
authoritative database read.
"""

from dataclasses import dataclass

from mocah.core.config import quota_logger
from mocah.core.services.cache.keys import quota_key
from mocah.core.services.cache.store import (
    delete_key,
    get_hash,
    increment_hash_fields,
    write_hash,
)

QUOTA_TTL_SECONDS = 5 * 60

# Hash field names, shared with the web tier
FIELD_TEXT_GENERATIONS = "textGenerations"
FIELD_IMAGE_GENERATIONS = "imageGenerations"
FIELD_TOTAL_TOKENS = "totalTokens"
FIELD_LIMIT_TEXT_GENERATIONS = "limitTextGenerations"
FIELD_LIMIT_IMAGE_GENERATIONS = "limitImageGenerations"
FIELD_LIMIT_TOKENS = "limitTokens"
FIELD_PERIOD_START = "periodStart"
FIELD_PERIOD_END = "periodEnd"


def _parse_counter(raw: str | None) -> int:
    try:
        return int(raw) if raw else 0
    except ValueError:
        return 0


def _parse_limit(raw: str | None) -> int | None:
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class QuotaRecord:
    """Usage counters and limits for one quota period.

    A ``None`` limit means the dimension is unlimited.

    Attributes:
        text_generations: Text generations used this period.
        image_generations: Image generations used this period.
        total_tokens: Tokens consumed this period.
        limit_text_generations: Max text generations, or ``None``.
        limit_image_generations: Max image generations, or ``None``.
        limit_tokens: Max tokens, or ``None``.
        period_start: ISO date the period starts on.
        period_end: ISO date the period ends on.
    """

    text_generations: int = 0
    image_generations: int = 0
    total_tokens: int = 0
    limit_text_generations: int | None = None
    limit_image_generations: int | None = None
    limit_tokens: int | None = None
    period_start: str = ""
    period_end: str = ""

    def to_hash(self) -> dict[str, str]:
        """Encode as Redis hash fields; unlimited limits become empty strings."""

        def _limit(value: int | None) -> str:
            return "" if value is None else str(value)

        return {
            FIELD_TEXT_GENERATIONS: str(self.text_generations),
            FIELD_IMAGE_GENERATIONS: str(self.image_generations),
            FIELD_TOTAL_TOKENS: str(self.total_tokens),
            FIELD_LIMIT_TEXT_GENERATIONS: _limit(self.limit_text_generations),
            FIELD_LIMIT_IMAGE_GENERATIONS: _limit(self.limit_image_generations),
            FIELD_LIMIT_TOKENS: _limit(self.limit_tokens),
            FIELD_PERIOD_START: self.period_start,
            FIELD_PERIOD_END: self.period_end,
        }

    @classmethod
    def from_hash(cls, data: dict[str, str]) -> "QuotaRecord":
        """Decode Redis hash fields. Missing or malformed values never raise."""
        return cls(
            text_generations=_parse_counter(data.get(FIELD_TEXT_GENERATIONS)),
            image_generations=_parse_counter(data.get(FIELD_IMAGE_GENERATIONS)),
            total_tokens=_parse_counter(data.get(FIELD_TOTAL_TOKENS)),
            limit_text_generations=_parse_limit(
                data.get(FIELD_LIMIT_TEXT_GENERATIONS)
            ),
            limit_image_generations=_parse_limit(
                data.get(FIELD_LIMIT_IMAGE_GENERATIONS)
            ),
            limit_tokens=_parse_limit(data.get(FIELD_LIMIT_TOKENS)),
            period_start=data.get(FIELD_PERIOD_START) or "",
            period_end=data.get(FIELD_PERIOD_END) or "",
        )

    @property
    def has_period(self) -> bool:
        """False when the hash was created by increments alone, without limits."""
        return bool(self.period_start and self.period_end)

    def exceeded(
        self,
        text_generations: int = 0,
        image_generations: int = 0,
        total_tokens: int = 0,
    ) -> list[str]:
        """Return the hash field names of every limit the requested usage would exceed."""
        checks = (
            (
                FIELD_TEXT_GENERATIONS,
                self.text_generations,
                text_generations,
                self.limit_text_generations,
            ),
            (
                FIELD_IMAGE_GENERATIONS,
                self.image_generations,
                image_generations,
                self.limit_image_generations,
            ),
            (FIELD_TOTAL_TOKENS, self.total_tokens, total_tokens, self.limit_tokens),
        )
        return [
            field
            for field, used, requested, limit in checks
            if limit is not None and used + requested > limit
        ]

    def allows(
        self,
        text_generations: int = 0,
        image_generations: int = 0,
        total_tokens: int = 0,
    ) -> bool:
        return not self.exceeded(text_generations, image_generations, total_tokens)


async def get_cached_quota(
    organization_id: str, user_id: str | None, period: str
) -> QuotaRecord | None:
    """Return the cached quota, or None when the hash is absent or empty."""
    data = await get_hash(quota_key(organization_id, user_id, period))
    if not data:
        return None
    return QuotaRecord.from_hash(data)


async def cache_quota(
    organization_id: str, user_id: str | None, period: str, record: QuotaRecord
) -> None:
    """Write every field of ``record`` and reset the key's TTL."""
    await write_hash(
        quota_key(organization_id, user_id, period),
        record.to_hash(),
        QUOTA_TTL_SECONDS,
    )


async def invalidate_quota_cache(
    organization_id: str, user_id: str | None, period: str
) -> None:
    key = quota_key(organization_id, user_id, period)
    if await delete_key(key):
        quota_logger.info(f"Quota cache invalidated: {key}")


async def increment_quota_counters(
    organization_id: str,
    user_id: str | None,
    period: str,
    *,
    text_generations: int | None = None,
    image_generations: int | None = None,
    total_tokens: int | None = None,
) -> None:
    """
    Atomically add usage to the cached counters and refresh the TTL.

    Only the counters passed are touched. A failed increment is logged and
    swallowed so metering never blocks the generation it measures.

    Raises:
        ValueError: If any delta is negative.
    """
    provided = {
        FIELD_TEXT_GENERATIONS: text_generations,
        FIELD_IMAGE_GENERATIONS: image_generations,
        FIELD_TOTAL_TOKENS: total_tokens,
    }
    increments = {field: delta for field, delta in provided.items() if delta is not None}
    negative = [field for field, delta in increments.items() if delta < 0]
    if negative:
        raise ValueError(f"Quota deltas must be non-negative: {', '.join(negative)}")

    if not increments:
        return

    key = quota_key(organization_id, user_id, period)
    if await increment_hash_fields(key, increments, QUOTA_TTL_SECONDS):
        quota_logger.debug(f"Quota counters incremented: {key} {increments}")
