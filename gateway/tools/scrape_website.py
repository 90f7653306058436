"""Website scraping tool using Firecrawl."""

import json

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import tool

from gateway.tools.context import ensure_ok, get_tool_context
from gateway.tools.web_search import FIRECRAWL_BASE_URL

MAX_MARKDOWN_CHARS = 8000
MAX_LINKS = 50


@tool
async def scrape_website(url: str, config: RunnableConfig) -> str:
    """Fetch a web page and return its main content as markdown plus its links.

    Use this tool to read, analyze or clone a specific website when the
    user gives a URL.
    """
    context = get_tool_context(config)
    api_key = context.require_key("firecrawl_api_key", "Firecrawl API key")

    response = await context.http_client.post(
        f"{FIRECRAWL_BASE_URL}/scrape",
        json={"url": url, "formats": ["markdown", "links"], "onlyMainContent": True},
        headers={"Authorization": f"Bearer {api_key}"},
        timeout=context.timeout,
    )
    ensure_ok(response, "Firecrawl scrape")

    data = response.json().get("data") or {}
    metadata = data.get("metadata") or {}
    markdown = data.get("markdown") or ""
    links = data.get("links") or []
    return json.dumps(
        {
            "url": metadata.get("sourceURL") or url,
            "title": metadata.get("title") or "",
            "markdown": markdown[:MAX_MARKDOWN_CHARS],
            "truncated": len(markdown) > MAX_MARKDOWN_CHARS,
            "links": links[:MAX_LINKS],
        },
        ensure_ascii=False,
    )
