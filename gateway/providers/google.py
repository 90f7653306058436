"""Adapter for the Google Generative Language (Gemini) API."""

from collections.abc import Sequence
from typing import Any

from gateway.providers.base import (
    ProviderDescriptor,
    StreamDelta,
    ToolRound,
    UpstreamRequest,
    apply_auth,
    error_message,
)
from gateway.schemas.chat_schema import ChatMessage
from gateway.schemas.tool_schema import ToolDefinition


class GoogleAdapter:
    """Gemini ``streamGenerateContent`` builder.

    Streaming is selected by the endpoint (``alt=sse``) rather than a body
    flag, the key travels as a query parameter and the system prompt as
    ``system_instruction``. Tools are not forwarded to this vendor.
    """

    def __init__(self, descriptor: ProviderDescriptor) -> None:
        self.descriptor = descriptor

    def build_request(
        self,
        messages: Sequence[ChatMessage],
        model: str | None,
        system_prompt: str,
        api_key: str,
        tools: Sequence[ToolDefinition] | None = None,
        tool_round: ToolRound | None = None,
    ) -> UpstreamRequest:
        model_id = model or self.descriptor.default_model
        endpoint = f"{self.descriptor.endpoint}/{model_id}:streamGenerateContent?alt=sse"
        url, headers = apply_auth(self.descriptor, api_key, endpoint)

        body = {
            "system_instruction": {"parts": [{"text": system_prompt}]},
            "contents": [
                {
                    "role": "model" if m.role == "assistant" else "user",
                    "parts": [{"text": m.content}],
                }
                for m in messages
            ],
        }
        return UpstreamRequest(url=url, headers=headers, body=body)

    def extract_delta(self, event: dict[str, Any]) -> StreamDelta:
        if event.get("error"):
            return StreamDelta(error=error_message(event["error"]))

        candidates = event.get("candidates") or []
        if not candidates:
            return StreamDelta()
        parts = (candidates[0].get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)
        return StreamDelta(text=text or None)
