"""Redis client creation helpers used by application startup."""

from __future__ import annotations

from redis.asyncio import Redis

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def create_redis_client(redis_url: str = DEFAULT_REDIS_URL) -> Redis:
    return Redis.from_url(redis_url, decode_responses=True)


async def ping(redis_client: Redis) -> bool:
    response = await redis_client.ping()
    return bool(response)
