"""Adapter for the Cohere v1 chat API."""

from collections.abc import Sequence
from typing import Any

from gateway.providers.base import (
    ProviderDescriptor,
    StreamDelta,
    ToolRound,
    UpstreamRequest,
    apply_auth,
)
from gateway.schemas.chat_schema import ChatMessage
from gateway.schemas.tool_schema import ToolDefinition


class CohereAdapter:
    """Cohere chat builder.

    The last message is sent as ``message`` and the earlier ones as
    ``chat_history``; the system prompt becomes the ``preamble``. The stream
    is newline-delimited JSON, not SSE.
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
        history = list(messages)
        last = history.pop() if history else None
        body = {
            "model": model or self.descriptor.default_model,
            "preamble": system_prompt,
            "message": last.content if last else "",
            "chat_history": [
                {"role": "USER" if m.role == "user" else "CHATBOT", "message": m.content}
                for m in history
            ],
            "stream": True,
        }
        url, headers = apply_auth(self.descriptor, api_key, self.descriptor.endpoint)
        return UpstreamRequest(url=url, headers=headers, body=body)

    def extract_delta(self, event: dict[str, Any]) -> StreamDelta:
        match event.get("event_type"):
            case "text-generation":
                return StreamDelta(text=event.get("text") or None)
            case "stream-end":
                if event.get("finish_reason") == "ERROR":
                    return StreamDelta(done=True, error="Upstream stream error")
                return StreamDelta(done=True)
        return StreamDelta()
