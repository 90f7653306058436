"""Web search tool using Firecrawl."""

import json

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import tool

from gateway.tools.context import ensure_ok, get_tool_context

FIRECRAWL_BASE_URL = "https://api.firecrawl.dev/v1"
MAX_RESULTS = 10
MAX_CONTENT_CHARS = 2000


@tool
async def web_search(query: str, config: RunnableConfig, limit: int = 5) -> str:
    """Search the web for current information.

    Use this tool when you need up-to-date information from the internet,
    such as news, documentation or facts to research. Returns ranked results
    with title, link, description and an excerpt of the page content.
    """
    context = get_tool_context(config)
    api_key = context.require_key("firecrawl_api_key", "Firecrawl API key")

    response = await context.http_client.post(
        f"{FIRECRAWL_BASE_URL}/search",
        json={
            "query": query,
            "limit": max(1, min(limit, MAX_RESULTS)),
            "scrapeOptions": {"formats": ["markdown"]},
        },
        headers={"Authorization": f"Bearer {api_key}"},
        timeout=context.timeout,
    )
    ensure_ok(response, "Firecrawl search")

    results = response.json().get("data") or []
    return json.dumps(
        {
            "query": query,
            "results_count": len(results),
            "results": [
                {
                    "rank": rank,
                    "title": item.get("title") or "No title",
                    "url": item.get("url"),
                    "description": item.get("description") or "",
                    "content": (item.get("markdown") or "")[:MAX_CONTENT_CHARS],
                }
                for rank, item in enumerate(results, start=1)
            ],
        },
        ensure_ascii=False,
    )
