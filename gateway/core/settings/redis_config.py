"""Settings store (Redis) configuration."""

from pydantic import BaseModel


class RedisConfig(BaseModel, frozen=True):
    """Connection to the store holding per-user tool credentials."""

    url: str
    connect_timeout: float = 2.0
