"""
Unit tests for the fail-open Redis primitives.
"""

import pytest

from mocah.core.services.cache.store import (
    delete_key,
    get_hash,
    get_json,
    increment_hash_fields,
    increment_window,
    set_json,
    write_hash,
)


class TestJsonPrimitives:
    async def test_set_then_get(self, fake_redis, redis_store):
        assert await set_json("brandkit:o1", {"primaryColor": "#000"}, 600) is True

        assert await get_json("brandkit:o1") == {"primaryColor": "#000"}
        assert redis_store.get("brandkit:o1") == '{"primaryColor": "#000"}'

    async def test_get_missing(self, fake_redis):
        assert await get_json("brandkit:o1") is None

    async def test_get_undecodable_value_is_a_miss(self, fake_redis):
        await fake_redis.set("brandkit:o1", "{not json")

        assert await get_json("brandkit:o1") is None

    async def test_delete(self, fake_redis):
        await set_json("brandkit:o1", {}, 600)

        assert await delete_key("brandkit:o1") is True
        assert await get_json("brandkit:o1") is None

    async def test_outage_degrades(self, failing_redis):
        assert await get_json("brandkit:o1") is None
        assert await set_json("brandkit:o1", {}, 600) is False
        assert await delete_key("brandkit:o1") is False


class TestHashPrimitives:
    async def test_write_hash_sets_fields_and_ttl(self, fake_redis):
        assert await write_hash("quota:o1:org:2025-01", {"a": "1", "b": ""}, 300)

        assert await get_hash("quota:o1:org:2025-01") == {"a": "1", "b": ""}
        assert await fake_redis.ttl("quota:o1:org:2025-01") == 300

    async def test_get_hash_absent_is_none(self, fake_redis):
        assert await get_hash("quota:o1:org:2025-01") is None

    async def test_increment_hash_fields(self, fake_redis):
        await increment_hash_fields("quota:o1:org:2025-01", {"a": 2, "b": 3}, 300)
        await increment_hash_fields("quota:o1:org:2025-01", {"a": 1}, 300)

        assert await get_hash("quota:o1:org:2025-01") == {"a": "3", "b": "3"}

    async def test_increment_hash_fields_nothing_to_do(self, fake_redis, redis_store):
        assert await increment_hash_fields("quota:o1:org:2025-01", {}, 300) is True
        assert redis_store.exists("quota:o1:org:2025-01") == 0


class TestIncrementWindow:
    async def test_first_increment_sets_expiry(self, fake_redis):
        assert await increment_window("ratelimit:x:1m", 60) == (1, 60)

    async def test_later_increments_do_not_extend_window(self, fake_redis, clock):
        await increment_window("ratelimit:x:1m", 60)
        clock.advance(45)

        assert await increment_window("ratelimit:x:1m", 60) == (2, 15)

    async def test_window_restarts_after_expiry(self, fake_redis, clock):
        await increment_window("ratelimit:x:1m", 60)
        await increment_window("ratelimit:x:1m", 60)
        clock.advance(61)

        assert await increment_window("ratelimit:x:1m", 60) == (1, 60)

    async def test_unavailable(self):
        assert await increment_window("ratelimit:x:1m", 60) is None

    @pytest.mark.parametrize("window", [60, 86400])
    async def test_outage(self, failing_redis, window):
        assert await increment_window("ratelimit:x:1d", window) is None
