"""Provider adapter contract and the request-scoped types it exchanges.

Every upstream vendor is reached through a ``ProviderAdapter``: it turns the
normalized ``(messages, model, system prompt, tools)`` tuple into one HTTP
request and pulls the incremental text (and tool-call fragments) out of each
decoded stream event. Adapters hold no per-request state.
"""

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

import httpx

from gateway.schemas.chat_schema import ChatMessage
from gateway.schemas.tool_schema import ToolDefinition

AuthStyle = Literal["bearer", "x-api-key", "query"]
Framing = Literal["sse", "ndjson"]


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static description of one upstream vendor."""

    id: str
    label: str
    endpoint: str
    default_model: str
    auth_style: AuthStyle
    supports_tools: bool = False
    requires_api_key: bool = True
    framing: Framing = "sse"
    extra_headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class UpstreamRequest:
    """A fully built provider request."""

    url: str
    headers: dict[str, str]
    body: dict[str, Any]


@dataclass
class ToolCall:
    """A function call requested by the model."""

    id: str
    name: str
    arguments: str = ""

    def parsed_arguments(self) -> dict[str, Any]:
        """Decode the JSON argument string; empty means no arguments."""
        if not self.arguments.strip():
            return {}
        value = json.loads(self.arguments)
        if not isinstance(value, dict):
            raise ValueError("Tool arguments must be a JSON object")
        return value


@dataclass
class ToolResult:
    """Outcome of one tool call, always a JSON string."""

    tool_call_id: str
    name: str
    content: str


@dataclass
class ToolRound:
    """The single tool round-trip fed back into the second provider call."""

    assistant_text: str
    calls: list[ToolCall]
    results: list[ToolResult]


@dataclass
class ToolCallFragment:
    """Partial tool call as streamed by a vendor, keyed by position."""

    index: int
    id: str | None = None
    name: str | None = None
    arguments: str = ""


@dataclass
class StreamDelta:
    """What an adapter extracts from one upstream stream event."""

    text: str | None = None
    tool_calls: list[ToolCallFragment] = field(default_factory=list)
    done: bool = False
    error: str | None = None


class ToolCallAccumulator:
    """Reassembles streamed tool-call fragments into complete calls."""

    def __init__(self) -> None:
        self._calls: dict[int, ToolCall] = {}

    def add(self, fragment: ToolCallFragment) -> None:
        call = self._calls.get(fragment.index)
        if call is None:
            call = ToolCall(
                id=fragment.id or f"call_{fragment.index}",
                name=fragment.name or "",
            )
            self._calls[fragment.index] = call
        else:
            if fragment.id:
                call.id = fragment.id
            if fragment.name and not call.name:
                call.name = fragment.name
        call.arguments += fragment.arguments

    def calls(self) -> list[ToolCall]:
        """Complete calls in stream order; nameless fragments are dropped."""
        return [
            call for _, call in sorted(self._calls.items()) if call.name
        ]

    def __bool__(self) -> bool:
        return bool(self.calls())


class ProviderAdapter(Protocol):
    """Request/response translation layer for one upstream vendor."""

    descriptor: ProviderDescriptor

    def build_request(
        self,
        messages: Sequence[ChatMessage],
        model: str | None,
        system_prompt: str,
        api_key: str,
        tools: Sequence[ToolDefinition] | None = None,
        tool_round: ToolRound | None = None,
    ) -> UpstreamRequest: ...

    def extract_delta(self, event: dict[str, Any]) -> StreamDelta: ...


def apply_auth(
    descriptor: ProviderDescriptor, api_key: str, url: str
) -> tuple[str, dict[str, str]]:
    """Attach credentials in the vendor's style; returns (url, headers)."""
    headers = {"Content-Type": "application/json", **descriptor.extra_headers}
    match descriptor.auth_style:
        case "bearer":
            headers["Authorization"] = f"Bearer {api_key}"
        case "x-api-key":
            headers["x-api-key"] = api_key
        case "query":
            url = str(httpx.URL(url).copy_merge_params({"key": api_key}))
    return url, headers


def error_message(error: Any) -> str:
    """Readable text for a vendor error payload, either an object or a string."""
    if isinstance(error, dict):
        message = error.get("message") or error.get("status")
    else:
        message = error
    return str(message) if message else "Upstream stream error"
