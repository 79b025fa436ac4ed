"""
Usage service for per-period generation quotas.

Reads go cache -> database -> cache. Writes only touch the cached counters
(atomic HINCRBY); persisting usage is owned by the billing side.
"""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from mocah.core.config import quota_logger
from mocah.core.db.crud import usage_quota_db
from mocah.core.exceptions.types import QuotaExceededException
from mocah.core.services.quota_cache import (
    QuotaRecord,
    cache_quota,
    get_cached_quota,
    increment_quota_counters,
)


def current_period(now: datetime | None = None) -> str:
    """Return the billing period (``YYYY-MM``, UTC) containing ``now``."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m")


class UsageService:
    async def get_usage_quota(
        self,
        session: AsyncSession,
        organization_id: str,
        user_id: str | None,
        period: str,
    ) -> QuotaRecord | None:
        """
        Return usage and limits for the period, or None if no quota row exists.

        A cached hash that only holds counters (created by increments before
        any limits were cached) is refreshed from the database, which is
        authoritative.

        Raises:
            DatabaseException: If the database read fails.
        """
        cached = await get_cached_quota(organization_id, user_id, period)
        if cached is not None and cached.has_period:
            return cached

        row = await usage_quota_db.get_for_period(
            session, organization_id, user_id, period
        )
        if row is None:
            return cached

        record = QuotaRecord(
            text_generations=row.text_generations,
            image_generations=row.image_generations,
            total_tokens=row.total_tokens,
            limit_text_generations=row.limit_text_generations,
            limit_image_generations=row.limit_image_generations,
            limit_tokens=row.limit_tokens,
            period_start=row.period_start.isoformat(),
            period_end=row.period_end.isoformat(),
        )
        await cache_quota(organization_id, user_id, period, record)
        return record

    async def ensure_within_quota(
        self,
        session: AsyncSession,
        organization_id: str,
        user_id: str | None = None,
        *,
        text_generations: int = 0,
        image_generations: int = 0,
        total_tokens: int = 0,
        period: str | None = None,
    ) -> QuotaRecord | None:
        """
        Verify the requested usage fits the period's limits.

        Returns:
            The quota record checked, or None when no quota is configured.

        Raises:
            QuotaExceededException: If any limit would be exceeded.
        """
        period = period or current_period()
        record = await self.get_usage_quota(session, organization_id, user_id, period)
        if record is None:
            return None

        exceeded = record.exceeded(text_generations, image_generations, total_tokens)
        if exceeded:
            quota_logger.warning(
                "Usage quota exceeded",
                extra={
                    "context": {
                        "organization_id": organization_id,
                        "user_id": user_id,
                        "period": period,
                        "exceeded": ",".join(exceeded),
                    }
                },
            )
            raise QuotaExceededException(
                details={"period": period, "exceeded": exceeded}
            )
        return record

    async def record_generation_usage(
        self,
        organization_id: str,
        user_id: str | None = None,
        *,
        text_generations: int | None = None,
        image_generations: int | None = None,
        total_tokens: int | None = None,
        period: str | None = None,
    ) -> None:
        """Add a finished generation's usage to the cached counters."""
        await increment_quota_counters(
            organization_id,
            user_id,
            period or current_period(),
            text_generations=text_generations,
            image_generations=image_generations,
            total_tokens=total_tokens,
        )


usage_service = UsageService()
