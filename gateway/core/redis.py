"""Redis client lifecycle management."""

import redis.asyncio as redis

from gateway.core.config import settings

redis_client: redis.Redis | None = None  # type: ignore[type-arg]


async def init_redis() -> redis.Redis:  # type: ignore[type-arg]
    """Initialize the Redis connection."""
    global redis_client  # noqa: PLW0603
    redis_client = redis.from_url(
        settings.redis.url,
        decode_responses=True,
        socket_connect_timeout=settings.redis.connect_timeout,
    )
    await redis_client.ping()
    return redis_client


async def close_redis() -> None:
    """Close the Redis connection."""
    global redis_client  # noqa: PLW0603
    if redis_client:
        await redis_client.aclose()
        redis_client = None


def get_redis() -> redis.Redis | None:  # type: ignore[type-arg]
    """Get the active Redis client, or None when the settings store is offline."""
    return redis_client
