"""
Unit tests for the quota cache.
"""

import asyncio
from unittest.mock import patch

import pytest

from mocah.core.services.quota_cache import (
    QUOTA_TTL_SECONDS,
    QuotaRecord,
    cache_quota,
    get_cached_quota,
    increment_quota_counters,
    invalidate_quota_cache,
)

JANUARY = QuotaRecord(
    text_generations=10,
    image_generations=2,
    total_tokens=500,
    limit_text_generations=75,
    limit_image_generations=20,
    limit_tokens=None,
    period_start="2025-01-01",
    period_end="2025-01-31",
)


class TestQuotaRecord:
    def test_to_hash_encodes_unlimited_as_empty(self):
        data = JANUARY.to_hash()

        assert data["textGenerations"] == "10"
        assert data["limitTextGenerations"] == "75"
        assert data["limitTokens"] == ""
        assert data["periodStart"] == "2025-01-01"

    def test_from_hash_round_trip(self):
        assert QuotaRecord.from_hash(JANUARY.to_hash()) == JANUARY

    def test_from_hash_is_lenient(self):
        record = QuotaRecord.from_hash(
            {"textGenerations": "abc", "limitTokens": "n/a", "imageGenerations": "4"}
        )

        assert record.text_generations == 0
        assert record.image_generations == 4
        assert record.total_tokens == 0
        assert record.limit_tokens is None
        assert record.has_period is False

    def test_exceeded(self):
        assert JANUARY.exceeded(text_generations=65) == []
        assert JANUARY.exceeded(text_generations=66) == ["textGenerations"]
        assert JANUARY.exceeded(image_generations=19, total_tokens=10**9) == [
            "imageGenerations"
        ]

    def test_allows(self):
        assert JANUARY.allows(text_generations=1) is True
        assert JANUARY.allows(image_generations=100) is False


class TestCacheQuota:
    async def test_write_then_read(self, fake_redis):
        await cache_quota("o1", None, "2025-01", JANUARY)

        assert await get_cached_quota("o1", None, "2025-01") == JANUARY
        assert await fake_redis.ttl("quota:o1:org:2025-01") == QUOTA_TTL_SECONDS

    async def test_user_and_org_scopes_are_separate(self, fake_redis):
        await cache_quota("o1", "u1", "2025-01", JANUARY)

        assert await get_cached_quota("o1", None, "2025-01") is None
        assert await get_cached_quota("o1", "u1", "2025-01") == JANUARY

    async def test_missing_is_none(self, fake_redis):
        assert await get_cached_quota("o1", None, "2025-01") is None

    async def test_expires(self, fake_redis, clock):
        await cache_quota("o1", None, "2025-01", JANUARY)
        clock.advance(QUOTA_TTL_SECONDS + 1)

        assert await get_cached_quota("o1", None, "2025-01") is None

    async def test_invalidate(self, fake_redis):
        await cache_quota("o1", None, "2025-01", JANUARY)

        await invalidate_quota_cache("o1", None, "2025-01")

        assert await get_cached_quota("o1", None, "2025-01") is None

    async def test_unavailable(self):
        await cache_quota("o1", None, "2025-01", JANUARY)

        assert await get_cached_quota("o1", None, "2025-01") is None


class TestIncrementQuotaCounters:
    async def test_increment_leaves_other_fields(self, fake_redis):
        await cache_quota("o1", None, "2025-01", JANUARY)

        await increment_quota_counters("o1", None, "2025-01", text_generations=1)

        record = await get_cached_quota("o1", None, "2025-01")
        assert record == QuotaRecord(
            text_generations=11,
            image_generations=2,
            total_tokens=500,
            limit_text_generations=75,
            limit_image_generations=20,
            limit_tokens=None,
            period_start="2025-01-01",
            period_end="2025-01-31",
        )

    async def test_image_increment_does_not_clobber_text(self, fake_redis):
        await cache_quota("o1", None, "2025-01", JANUARY)

        await increment_quota_counters("o1", None, "2025-01", image_generations=3)

        record = await get_cached_quota("o1", None, "2025-01")
        assert record.text_generations == 10
        assert record.image_generations == 5

    async def test_concurrent_increments_are_not_lost(self, fake_redis, redis_store):
        await asyncio.gather(
            *(
                increment_quota_counters("o1", None, "2025-01", text_generations=1)
                for _ in range(50)
            )
        )

        assert redis_store.hget("quota:o1:org:2025-01", "textGenerations") == "50"

    async def test_creates_counters_only_hash(self, fake_redis):
        await increment_quota_counters(
            "o1", "u1", "2025-01", text_generations=1, total_tokens=250
        )

        record = await get_cached_quota("o1", "u1", "2025-01")
        assert record.text_generations == 1
        assert record.total_tokens == 250
        assert record.limit_text_generations is None
        assert record.has_period is False

    async def test_refreshes_ttl(self, fake_redis, clock):
        await cache_quota("o1", None, "2025-01", JANUARY)
        clock.advance(QUOTA_TTL_SECONDS - 10)

        await increment_quota_counters("o1", None, "2025-01", total_tokens=100)

        assert await fake_redis.ttl("quota:o1:org:2025-01") == QUOTA_TTL_SECONDS

    async def test_negative_delta_rejected(self, fake_redis, redis_store):
        await cache_quota("o1", None, "2025-01", JANUARY)

        with pytest.raises(ValueError, match="non-negative"):
            await increment_quota_counters(
                "o1", None, "2025-01", text_generations=1, image_generations=-1
            )

        assert redis_store.hget("quota:o1:org:2025-01", "textGenerations") == "10"

    async def test_no_deltas_is_a_no_op(self, fake_redis, redis_store):
        await increment_quota_counters("o1", None, "2025-01")

        assert redis_store.exists("quota:o1:org:2025-01") == 0

    async def test_user_named_org_is_kept_apart_from_organization(
        self, fake_redis, redis_store
    ):
        await increment_quota_counters("o1", "org", "2025-01", text_generations=1)

        assert await get_cached_quota("o1", None, "2025-01") is None
        assert (await get_cached_quota("o1", "org", "2025-01")).text_generations == 1
        assert redis_store.exists("quota:o1:%6Frg:2025-01") == 1

    async def test_ids_with_separator(self, fake_redis):
        await increment_quota_counters("o:1", "u1", "2025-01", text_generations=2)

        assert await get_cached_quota("o", "1:u1", "2025-01") is None
        assert (await get_cached_quota("o:1", "u1", "2025-01")).text_generations == 2

    async def test_outage_is_logged_once(self, failing_redis):
        with patch("mocah.core.services.redis_service.redis_logger") as mock_logger:
            await increment_quota_counters("o1", None, "2025-01", text_generations=1)

        mock_logger.error.assert_called_once()
