"""Shared redis.asyncio client backing the quote store.

Quotes are the only data held in Redis. Wallets, positions and outcome ledgers
live in PostgreSQL, so a Redis outage only invalidates outstanding quotes.
"""

import logging

import redis.asyncio as aioredis

from config.settings import settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Return the process-wide client, creating it on first use."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            health_check_interval=settings.REDIS_HEALTH_CHECK_SECONDS,
        )
    return _client


async def check_redis() -> None:
    """PING once at startup so a wrong REDIS_URL fails before serving quotes."""
    client = await get_redis()
    await client.ping()
    logger.info("quote store reachable")


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is None:
        return
    await _client.aclose()
    _client = None
