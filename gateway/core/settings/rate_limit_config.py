"""Inbound rate limit configuration."""

from pydantic import BaseModel


class RateLimitConfig(BaseModel, frozen=True):
    """Per-client limits enforced by slowapi."""

    chat: str
    storage_uri: str
