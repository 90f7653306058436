"""Adapter for the Anthropic Messages API."""

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

ANTHROPIC_VERSION = "2023-06-01"
MAX_TOKENS = 4096


class AnthropicAdapter:
    """Messages API request builder and event-envelope delta extractor.

    The system prompt goes into the top-level ``system`` field and only
    ``user``/``assistant`` roles are allowed in ``messages``. Streamed text
    arrives as ``content_block_delta`` events; tool calls open with a
    ``content_block_start`` of type ``tool_use`` followed by
    ``input_json_delta`` pieces for the same block index.
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
        payload_messages: list[dict[str, Any]] = [
            {
                "role": "assistant" if m.role == "assistant" else "user",
                "content": m.content,
            }
            for m in messages
        ]
        if tool_round is not None:
            payload_messages.extend(self._tool_round_messages(tool_round))

        body: dict[str, Any] = {
            "model": model or self.descriptor.default_model,
            "max_tokens": MAX_TOKENS,
            "system": system_prompt,
            "messages": payload_messages,
            "stream": True,
        }
        if tools and self.descriptor.supports_tools:
            body["tools"] = [
                {
                    "name": tool.name,
                    "description": tool.description,
                    "input_schema": tool.parameters,
                }
                for tool in tools
            ]
            # tool_use blocks need their tools declared; forbid another round
            if tool_round is not None:
                body["tool_choice"] = {"type": "none"}

        url, headers = apply_auth(self.descriptor, api_key, self.descriptor.endpoint)
        return UpstreamRequest(url=url, headers=headers, body=body)

    def extract_delta(self, event: dict[str, Any]) -> StreamDelta:
        event_type = event.get("type")

        if event_type == "content_block_delta":
            delta = event.get("delta") or {}
            if delta.get("type") == "text_delta":
                return StreamDelta(text=delta.get("text") or None)
            if delta.get("type") == "input_json_delta":
                return StreamDelta(
                    tool_calls=[
                        ToolCallFragment(
                            index=event.get("index", 0),
                            arguments=delta.get("partial_json") or "",
                        )
                    ]
                )

        elif event_type == "content_block_start":
            block = event.get("content_block") or {}
            if block.get("type") == "tool_use":
                return StreamDelta(
                    tool_calls=[
                        ToolCallFragment(
                            index=event.get("index", 0),
                            id=block.get("id"),
                            name=block.get("name"),
                        )
                    ]
                )

        elif event_type == "message_stop":
            return StreamDelta(done=True)

        elif event_type == "error":
            return StreamDelta(error=error_message(event.get("error")))

        return StreamDelta()

    @staticmethod
    def _tool_round_messages(tool_round: ToolRound) -> list[dict[str, Any]]:
        assistant_blocks: list[dict[str, Any]] = []
        if tool_round.assistant_text:
            assistant_blocks.append({"type": "text", "text": tool_round.assistant_text})
        for call in tool_round.calls:
            try:
                arguments = call.parsed_arguments()
            except ValueError:
                arguments = {}
            assistant_blocks.append(
                {"type": "tool_use", "id": call.id, "name": call.name, "input": arguments}
            )

        result_blocks = [
            {
                "type": "tool_result",
                "tool_use_id": result.tool_call_id,
                "content": result.content,
            }
            for result in tool_round.results
        ]
        return [
            {"role": "assistant", "content": assistant_blocks},
            {"role": "user", "content": result_blocks},
        ]

