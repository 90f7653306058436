"""Upstream HTTP client configuration."""

import httpx
from pydantic import BaseModel


class HttpConfig(BaseModel, frozen=True):
    """Timeouts applied to every upstream call."""

    connect_timeout: float
    read_timeout: float
    tool_timeout: float

    @property
    def timeout(self) -> httpx.Timeout:
        """Timeout for provider calls (long reads while tokens stream)."""
        return httpx.Timeout(self.read_timeout, connect=self.connect_timeout)

    @property
    def tool_call_timeout(self) -> httpx.Timeout:
        """Timeout for a single tool's upstream call."""
        return httpx.Timeout(self.tool_timeout, connect=self.connect_timeout)
