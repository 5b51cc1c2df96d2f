from __future__ import annotations

import logging
from typing import Optional

from redis.asyncio import Redis

from fieldreports.core.config import settings

logger = logging.getLogger("fieldreports.redis")

_client: Optional[Redis] = None


def get_redis() -> Redis:
    """Return a singleton async Redis client.

    The connection is lazy: nothing is sent until the first command, so an
    unreachable server shows up as an error on the first lookup.
    """
    global _client
    if _client is None:
        _client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _client


async def ping_redis() -> bool:
    try:
        return bool(await get_redis().ping())
    except Exception as exc:
        logger.warning("Redis unavailable: %s", exc)
        return False


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
