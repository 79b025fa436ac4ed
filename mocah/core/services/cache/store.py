"""
Fail-open Redis primitives shared by the entity, quota and rate-limit caches.

Each primitive issues at most one round-trip (multi-command writes go through a
single MULTI/EXEC pipeline) so a failure is reported once per call.
"""

import json
from typing import Any, Mapping

from redis.asyncio import Redis

from mocah.core.services.redis_service import fail_open


@fail_open("get")
async def get_json(client: Redis, key: str) -> Any | None:
    """Return the JSON-decoded value at ``key``, or None on a miss."""
    raw = await client.get(key)
    if raw is None:
        return None
    return json.loads(raw)


@fail_open("set", default=False)
async def set_json(client: Redis, key: str, value: Any, ttl: int) -> bool:
    """Store ``value`` JSON-encoded under ``key`` with a TTL in seconds."""
    await client.set(key, json.dumps(value), ex=ttl)
    return True


@fail_open("delete", default=False)
async def delete_key(client: Redis, key: str) -> bool:
    await client.delete(key)
    return True


@fail_open("hgetall")
async def get_hash(client: Redis, key: str) -> dict[str, str] | None:
    """Return all fields of the hash at ``key``; an absent or empty hash is a miss."""
    data = await client.hgetall(key)  # type: ignore[misc]
    return dict(data) if data else None


@fail_open("hset", default=False)
async def write_hash(
    client: Redis, key: str, mapping: Mapping[str, str], ttl: int
) -> bool:
    """Write every field of ``mapping`` and (re)set the key's TTL atomically."""
    async with client.pipeline(transaction=True) as pipe:
        pipe.hset(key, mapping=dict(mapping))
        pipe.expire(key, ttl)
        await pipe.execute()
    return True


@fail_open("hincrby", default=False)
async def increment_hash_fields(
    client: Redis, key: str, increments: Mapping[str, int], ttl: int
) -> bool:
    """
    Atomically add each delta to its hash field, then refresh the TTL.

    HINCRBY initializes an absent field to 0 before applying the delta, so
    concurrent callers never lose updates and the hash need not exist yet.
    """
    if not increments:
        return True
    async with client.pipeline(transaction=True) as pipe:
        for field, delta in increments.items():
            pipe.hincrby(key, field, delta)
        pipe.expire(key, ttl)
        await pipe.execute()
    return True


@fail_open("incr")
async def increment_window(
    client: Redis, key: str, window_seconds: int
) -> tuple[int, int] | None:
    """
    Increment a fixed-window counter.

    The expiry is set only by the first increment of a window (EXPIRE NX), so
    later increments never extend it.

    Returns:
        (count, ttl_seconds) after the increment, or None on the degraded path.
    """
    async with client.pipeline(transaction=True) as pipe:
        pipe.incr(key)
        pipe.expire(key, window_seconds, nx=True)
        pipe.ttl(key)
        count, _, ttl = await pipe.execute()
    return int(count), int(ttl)
