"""Adapter for vendors speaking the OpenAI chat/completions dialect.

Used for the built-in gateway, OpenAI, Groq, Mistral, Together, OpenRouter
and Perplexity: the system prompt is a leading ``system`` message, the
credential is a bearer token, and the stream carries
``choices[0].delta.content`` plus ``choices[0].delta.tool_calls`` fragments.
"""

from collections.abc import Sequence
from typing import Any

from gateway.providers.base import (
    ProviderDescriptor,
    StreamDelta,
    ToolCallFragment,
    ToolRound,
    UpstreamRequest,
    apply_auth,
    error_message,
)
from gateway.schemas.chat_schema import ChatMessage
from gateway.schemas.tool_schema import ToolDefinition


class OpenAICompatibleAdapter:
    """OpenAI-style request builder and delta extractor."""

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
        payload_messages: list[dict[str, Any]] = [
            {"role": "system", "content": system_prompt},
            *(m.model_dump() for m in messages),
        ]
        if tool_round is not None:
            payload_messages.extend(self._tool_round_messages(tool_round))

        body: dict[str, Any] = {
            "model": model or self.descriptor.default_model,
            "messages": payload_messages,
            "stream": True,
        }
        # the follow-up call after a tool round is answer-only
        if tools and self.descriptor.supports_tools and tool_round is None:
            body["tools"] = [
                {"type": "function", "function": tool.model_dump()} for tool in tools
            ]
            body["tool_choice"] = "auto"

        url, headers = apply_auth(self.descriptor, api_key, self.descriptor.endpoint)
        return UpstreamRequest(url=url, headers=headers, body=body)

    def extract_delta(self, event: dict[str, Any]) -> StreamDelta:
        if event.get("error"):
            return StreamDelta(error=error_message(event["error"]))

        choices = event.get("choices") or []
        if not choices:
            return StreamDelta()
        delta = choices[0].get("delta") or {}

        fragments: list[ToolCallFragment] = []
        for position, call in enumerate(delta.get("tool_calls") or []):
            function = call.get("function") or {}
            fragments.append(
                ToolCallFragment(
                    index=call.get("index", position),
                    id=call.get("id"),
                    name=function.get("name"),
                    arguments=function.get("arguments") or "",
                )
            )
        return StreamDelta(text=delta.get("content") or None, tool_calls=fragments)

    @staticmethod
    def _tool_round_messages(tool_round: ToolRound) -> list[dict[str, Any]]:
        assistant: dict[str, Any] = {
            "role": "assistant",
            "content": tool_round.assistant_text or None,
            "tool_calls": [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {"name": call.name, "arguments": call.arguments or "{}"},
                }
                for call in tool_round.calls
            ],
        }
        results = [
            {
                "role": "tool",
                "tool_call_id": result.tool_call_id,
                "content": result.content,
            }
            for result in tool_round.results
        ]
        return [assistant, *results]
