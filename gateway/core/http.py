"""Shared upstream HTTP client lifecycle management."""

import httpx

from gateway.core.config import settings

http_client: httpx.AsyncClient | None = None


def init_http_client() -> httpx.AsyncClient:
    """Create the pooled client used for provider and tool calls."""
    global http_client  # noqa: PLW0603
    http_client = httpx.AsyncClient(
        timeout=settings.http.timeout,
        follow_redirects=True,
    )
    return http_client


async def close_http_client() -> None:
    """Close the pooled client and its connections."""
    global http_client  # noqa: PLW0603
    if http_client:
        await http_client.aclose()
        http_client = None


def get_http_client() -> httpx.AsyncClient:
    """Get the active HTTP client, creating it lazily outside the lifespan."""
    if http_client is None:
        return init_http_client()
    return http_client
