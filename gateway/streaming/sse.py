"""Upstream stream decoding and the uniform outbound SSE encoding.

Upstream bytes arrive in arbitrary chunks. ``SSELineDecoder`` reassembles
them into lines with an explicit buffer and read index, turns ``data:``
lines into JSON events and reports the ``[DONE]`` terminator. ``relay``
drives the decoder over an async byte stream and hands each event to the
vendor adapter, so the buffering logic is shared by every provider.

Whatever the vendor, the caller only ever sees::

    data: {"choices":[{"delta":{"content":"..."}}]}

followed by ``data: [DONE]``.
"""

import codecs
import json
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator
from typing import Any, Final

import structlog

from gateway.providers.base import Framing, ProviderAdapter, StreamDelta

logger = structlog.get_logger()

DONE: Final = "[DONE]"
DATA_PREFIX: Final = "data: "
DONE_LINE: Final = f"{DATA_PREFIX}{DONE}\n\n"

StreamEvent = dict[str, Any] | str


class SSELineDecoder:
    """Incremental line reader for ``text/event-stream`` (or NDJSON) bodies.

    ``feed`` never blocks: complete lines are consumed, the unterminated tail
    stays in the buffer until the next chunk. A ``data:`` line whose JSON
    does not parse is pushed back once and retried after more bytes arrive;
    if it still fails it is dropped so later events are not stalled.
    """

    def __init__(self, framing: Framing = "sse") -> None:
        self._framing = framing
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._pos = 0
        self._stalled = False
        self._done = False

    @property
    def done(self) -> bool:
        """True once the terminal marker has been seen."""
        return self._done

    def feed(self, chunk: bytes | str) -> list[StreamEvent]:
        """Consume one chunk and return the events it completed."""
        if self._done:
            return []
        text = self._decoder.decode(chunk) if isinstance(chunk, bytes) else chunk
        if not text:
            return []
        self._buffer = self._buffer[self._pos :] + text
        self._pos = 0
        return self._drain(final=False)

    def flush(self) -> list[StreamEvent]:
        """Process whatever is left once the upstream stream has ended."""
        if self._done:
            return []
        tail = self._decoder.decode(b"", final=True)
        if tail:
            self._buffer = self._buffer[self._pos :] + tail
            self._pos = 0
        return self._drain(final=True)

    def _drain(self, final: bool) -> list[StreamEvent]:
        events: list[StreamEvent] = []
        while self._pos < len(self._buffer):
            newline = self._buffer.find("\n", self._pos)
            if newline == -1:
                if not final:
                    break
                line, next_pos = self._buffer[self._pos :], len(self._buffer)
            else:
                line, next_pos = self._buffer[self._pos : newline], newline + 1
            line = line.removesuffix("\r")

            payload = self._payload(line)
            if payload is None:
                self._advance(next_pos)
                continue
            if payload == DONE:
                self._advance(next_pos)
                self._done = True
                events.append(DONE)
                break

            try:
                event = json.loads(payload)
            except json.JSONDecodeError:
                if not self._stalled and not final:
                    # wait for more bytes before giving up on this line
                    self._stalled = True
                    break
                logger.warning("Dropping undecodable stream line", line=line[:200])
                self._advance(next_pos)
                continue

            self._advance(next_pos)
            if isinstance(event, dict):
                events.append(event)
        return events

    def _advance(self, next_pos: int) -> None:
        self._pos = next_pos
        self._stalled = False

    def _payload(self, line: str) -> str | None:
        if not line.strip():
            return None
        if self._framing == "ndjson":
            return line.strip()
        if line.startswith(":") or not line.startswith(DATA_PREFIX):
            return None
        return line[len(DATA_PREFIX) :].strip()


def _extract(
    adapter: ProviderAdapter, events: Iterable[StreamEvent]
) -> Iterator[StreamDelta | None]:
    """Adapter deltas one event at a time; ``None`` marks the terminator."""
    for event in events:
        if not isinstance(event, dict):
            yield None
            return
        delta = adapter.extract_delta(event)
        yield delta
        if delta.done or delta.error:
            return


async def relay(
    chunks: AsyncIterable[bytes], adapter: ProviderAdapter
) -> AsyncIterator[StreamDelta]:
    """Yield adapter deltas as upstream chunks arrive, until the stream ends.

    Deltas are handed on one by one, so text decoded before an adapter
    failure still reaches the caller.
    """
    decoder = SSELineDecoder(adapter.descriptor.framing)
    async for chunk in chunks:
        for delta in _extract(adapter, decoder.feed(chunk)):
            if delta is None:
                return
            yield delta
            if delta.done or delta.error:
                return
    for delta in _extract(adapter, decoder.flush()):
        if delta is None:
            return
        yield delta


def format_delta(text: str) -> str:
    """Encode one text delta in the uniform OpenAI-style envelope."""
    payload = {"choices": [{"delta": {"content": text}}]}
    return f"{DATA_PREFIX}{json.dumps(payload, ensure_ascii=False)}\n\n"


def format_error(message: str) -> str:
    """Encode an in-stream error notice."""
    return f"{DATA_PREFIX}{json.dumps({'error': message}, ensure_ascii=False)}\n\n"


def format_failure(message: str) -> str:
    """Error notice followed by a readable delta for content-only clients."""
    return format_error(message) + format_delta(f"\n\n[Error: {message}]")
