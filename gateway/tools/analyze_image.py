"""Image analysis tool backed by the built-in vision-capable provider."""

import json

from langchain_core.runnables import RunnableConfig
from langchain_core.tools import tool

from gateway.core.exceptions import ToolExecutionError
from gateway.providers.registry import LOVABLE
from gateway.tools.context import ensure_ok, get_tool_context


@tool
async def analyze_image(
    image_url: str,
    config: RunnableConfig,
    prompt: str = "Describe this image in detail.",
) -> str:
    """Analyze an image from a URL (or data URI) and answer a question about it."""
    context = get_tool_context(config)
    if not context.gateway.is_configured:
        raise ToolExecutionError("Image analysis is not configured on this server")

    response = await context.http_client.post(
        LOVABLE.endpoint,
        json={
            "model": context.gateway.default_model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": image_url}},
                    ],
                }
            ],
        },
        headers={
            "Authorization": f"Bearer {context.gateway.api_key.get_secret_value()}",
            "Content-Type": "application/json",
        },
        timeout=context.timeout,
    )
    ensure_ok(response, "Image analysis")

    choices = response.json().get("choices") or []
    analysis = ((choices[0].get("message") or {}).get("content") if choices else "") or ""
    return json.dumps({"image_url": image_url, "analysis": analysis}, ensure_ascii=False)
