"""Builders for canned upstream traffic."""

import json
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx

Handler = Callable[[httpx.Request], httpx.Response]


def sse(*events: dict[str, Any], done: bool = True) -> bytes:
    """Encode events as an SSE body, optionally terminated by [DONE]."""
    lines = [f"data: {json.dumps(event)}\n\n" for event in events]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


def ndjson(*events: dict[str, Any]) -> bytes:
    return "".join(f"{json.dumps(event)}\n" for event in events).encode()


def chunked(*chunks: bytes, error: Exception | None = None) -> AsyncIterator[bytes]:
    """Async body that yields the given chunks, then optionally fails."""

    async def body() -> AsyncIterator[bytes]:
        for chunk in chunks:
            yield chunk
        if error is not None:
            raise error

    return body()


def text_chunk(text: str) -> dict[str, Any]:
    """OpenAI-style content delta."""
    return {"choices": [{"delta": {"content": text}}]}


def tool_call_chunk(
    index: int,
    arguments: str,
    call_id: str | None = None,
    name: str | None = None,
) -> dict[str, Any]:
    """OpenAI-style tool call fragment."""
    call: dict[str, Any] = {"index": index, "function": {"arguments": arguments}}
    if call_id:
        call["id"] = call_id
        call["type"] = "function"
    if name:
        call["function"]["name"] = name
    return {"choices": [{"delta": {"tool_calls": [call]}}]}


def parse_sse(body: str) -> list[Any]:
    """Decode an outbound SSE body into payloads ([DONE] kept as a string)."""
    payloads: list[Any] = []
    for block in body.split("\n\n"):
        if not block.startswith("data: "):
            continue
        data = block[len("data: ") :]
        payloads.append(data if data == "[DONE]" else json.loads(data))
    return payloads


def streamed_text(body: str) -> str:
    """Concatenate every content delta of an outbound SSE body."""
    return "".join(
        p["choices"][0]["delta"]["content"]
        for p in parse_sse(body)
        if isinstance(p, dict) and "choices" in p
    )


class UpstreamStub:
    """Answers requests from a queue of canned responses and records them."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._queue: list[httpx.Response | Exception | Handler] = []

    def add(self, *responses: httpx.Response | Exception | Handler) -> "UpstreamStub":
        self._queue.extend(responses)
        return self

    def stream(self, body: bytes | AsyncIterator[bytes], status_code: int = 200) -> "UpstreamStub":
        content = chunked(body) if isinstance(body, bytes) else body
        return self.add(
            httpx.Response(
                status_code,
                headers={"content-type": "text/event-stream"},
                content=content,
            )
        )

    def json(self, data: Any, status_code: int = 200) -> "UpstreamStub":
        return self.add(httpx.Response(status_code, json=data))

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))

    def body(self, index: int) -> dict[str, Any]:
        """JSON body of the index-th recorded request."""
        return json.loads(self.requests[index].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._queue:
            raise AssertionError(f"Unexpected upstream request: {request.url}")
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, httpx.Response):
            return item
        return item(request)
