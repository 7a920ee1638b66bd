"""Redis-backed quote store. A quote lives exactly QUOTE_TTL_SECONDS."""

from typing import Protocol

import redis.asyncio as aioredis

from src.pm_common.redis_client import get_redis

_KEY_PREFIX = "quote:"


class QuoteCacheProtocol(Protocol):
    async def put(self, quote_id: str, payload: str, ttl_seconds: int) -> None: ...

    async def get(self, quote_id: str) -> str | None: ...


class RedisQuoteCache:
    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def put(self, quote_id: str, payload: str, ttl_seconds: int) -> None:
        await self._redis.set(f"{_KEY_PREFIX}{quote_id}", payload, ex=ttl_seconds)

    async def get(self, quote_id: str) -> str | None:
        value = await self._redis.get(f"{_KEY_PREFIX}{quote_id}")
        return str(value) if value is not None else None


async def get_quote_cache() -> QuoteCacheProtocol:
    """FastAPI dependency."""
    return RedisQuoteCache(await get_redis())
