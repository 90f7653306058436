"""Per-user tool credentials backed by Redis."""

from collections.abc import Mapping

import redis.asyncio as redis
import structlog

logger = structlog.get_logger()

USER_SETTINGS_PREFIX = "user_settings:"


class UserSettingsService:
    """Read and write the ``api_keys`` map of a user.

    Keys are stored as a Redis hash ``user_settings:{user_id}``. Server-level
    fallback keys fill in whatever the user has not configured.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None,  # type: ignore[type-arg]
        fallback_keys: Mapping[str, str] | None = None,
    ) -> None:
        self._redis = redis_client
        self._fallback = dict(fallback_keys or {})

    async def get_api_keys(self, user_id: str | None) -> dict[str, str]:
        """Merged credentials for a user; the user's own values win."""
        keys = dict(self._fallback)
        if not user_id or self._redis is None:
            return keys
        try:
            stored = await self._redis.hgetall(f"{USER_SETTINGS_PREFIX}{user_id}")
        except redis.RedisError:
            logger.warning("User settings unavailable", user_id=user_id, exc_info=True)
            return keys
        keys.update({name: value for name, value in stored.items() if value})
        return keys

    async def set_api_keys(self, user_id: str, api_keys: Mapping[str, str]) -> None:
        """Store or overwrite credentials for a user."""
        if self._redis is None:
            raise RuntimeError("Redis client not initialized")
        if api_keys:
            await self._redis.hset(
                f"{USER_SETTINGS_PREFIX}{user_id}", mapping=dict(api_keys)
            )

    async def delete_api_keys(self, user_id: str, *names: str) -> None:
        """Remove selected credentials, or all of them when none are named."""
        if self._redis is None:
            raise RuntimeError("Redis client not initialized")
        key = f"{USER_SETTINGS_PREFIX}{user_id}"
        if names:
            await self._redis.hdel(key, *names)
        else:
            await self._redis.delete(key)
