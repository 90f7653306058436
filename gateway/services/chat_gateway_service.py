"""Chat orchestration: provider selection, streaming relay and the tool round."""

import asyncio
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass, field

import httpx
import structlog

from gateway.core.exceptions import (
    ApiKeyRequiredError,
    AppException,
    ConfigurationError,
    UpstreamError,
    ValidationError,
    classify_upstream_status,
)
from gateway.core.settings import GatewayConfig, HttpConfig, ToolsConfig
from gateway.providers.base import (
    ProviderAdapter,
    ToolCall,
    ToolCallAccumulator,
    ToolResult,
    ToolRound,
    UpstreamRequest,
)
from gateway.providers.registry import get_adapter
from gateway.schemas.chat_schema import ChatRequest
from gateway.schemas.tool_schema import ToolDefinition
from gateway.services.tool_executor import ToolExecutor
from gateway.services.user_settings_service import UserSettingsService
from gateway.streaming.sse import DONE_LINE, format_delta, format_failure, relay
from gateway.tools.context import ToolContext
from gateway.tools.registry import resolve_tools

logger = structlog.get_logger()

SYSTEM_PROMPT_TEMPLATE = (
    "You are {agent_name}, a powerful AI agent in the Agentic Max platform. "
    "You help users with various tasks including:\n"
    "- Web development and code generation\n"
    "- API integrations and automation\n"
    "- Website cloning and analysis\n"
    "- App building and testing\n"
    "- Deep research and strategic thinking\n\n"
    "Be helpful, concise, and proactive. When discussing technical topics, "
    "provide working code examples.\n"
    "Format your responses with markdown for better readability."
)

ExecutorFactory = Callable[[ToolContext], ToolExecutor]


def build_system_prompt(agent_name: str | None) -> str:
    """System prompt for the named agent."""
    return SYSTEM_PROMPT_TEMPLATE.format(agent_name=agent_name or "an AI assistant")


@dataclass(frozen=True)
class _Turn:
    """Everything needed to issue both calls of one chat turn."""

    request: ChatRequest
    adapter: ProviderAdapter
    api_key: str
    model: str | None
    system_prompt: str
    tools: list[ToolDefinition]


@dataclass
class _Relayed:
    """What one relayed upstream response produced besides streamed text."""

    text: list[str] = field(default_factory=list)
    deltas: int = 0
    tool_calls: ToolCallAccumulator = field(default_factory=ToolCallAccumulator)
    failed: bool = False


class ChatGatewayService:
    """Streams one chat turn from the selected provider.

    ``open_stream`` performs every check that can still become an HTTP error
    (validation, credentials, the first upstream status) and only then
    returns the SSE line iterator. Once iteration starts the response is
    committed: later failures are reported in-stream and the stream always
    ends with ``data: [DONE]``.

    Tool use is bounded to a single round. Tool calls in the first response
    run concurrently and their results go back in one follow-up call whose
    answer is streamed. Tool calls requested by the follow-up are ignored.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        user_settings: UserSettingsService,
        gateway: GatewayConfig,
        http: HttpConfig,
        tools_config: ToolsConfig,
        executor_factory: ExecutorFactory = ToolExecutor,
    ) -> None:
        self._client = http_client
        self._user_settings = user_settings
        self._gateway = gateway
        self._http = http
        self._tools_config = tools_config
        self._executor_factory = executor_factory

    async def open_stream(self, request: ChatRequest) -> AsyncIterator[str]:
        """Validate, open the first upstream call and return the SSE lines.

        Raises:
            ValidationError: No messages, or a missing caller key.
            ConfigurationError: The built-in provider has no server key.
            AppException: The provider refused the first call.
        """
        turn = self._prepare(request)
        logger.info(
            "Chat request",
            provider=turn.adapter.descriptor.id,
            model=turn.model or turn.adapter.descriptor.default_model,
            agent=request.agent_name or request.agent_id,
            messages=len(request.messages),
            tools=[t.name for t in turn.tools],
        )
        upstream = turn.adapter.build_request(
            request.messages,
            turn.model,
            turn.system_prompt,
            turn.api_key,
            tools=turn.tools or None,
        )
        response = await self._open_upstream(turn.adapter, upstream)
        return self._stream_turn(turn, response)

    def _prepare(self, request: ChatRequest) -> _Turn:
        if not request.messages:
            raise ValidationError("Messages are required")

        adapter = get_adapter(request.provider)
        descriptor = adapter.descriptor
        model = request.model
        if descriptor.requires_api_key:
            api_key = request.caller_api_key
            if not api_key:
                raise ApiKeyRequiredError(descriptor.label)
        else:
            if not self._gateway.is_configured:
                raise ConfigurationError("LOVABLE_API_KEY is not configured")
            api_key = self._gateway.api_key.get_secret_value()
            model = model or self._gateway.default_model

        tools: list[ToolDefinition] = []
        if descriptor.supports_tools:
            tools = resolve_tools(request.agent_tools)
        elif request.agent_tools:
            logger.info(
                "Provider does not support tools, ignoring capabilities",
                provider=descriptor.id,
                capabilities=request.agent_tools,
            )
        return _Turn(
            request=request,
            adapter=adapter,
            api_key=api_key,
            model=model,
            system_prompt=build_system_prompt(request.agent_name),
            tools=tools,
        )

    async def _open_upstream(
        self, adapter: ProviderAdapter, upstream: UpstreamRequest
    ) -> httpx.Response:
        """Send a streaming request; non-2xx statuses become typed errors."""
        provider = adapter.descriptor.id
        http_request = self._client.build_request(
            "POST",
            upstream.url,
            headers=upstream.headers,
            json=upstream.body,
            timeout=self._http.timeout,
        )
        try:
            response = await self._client.send(http_request, stream=True)
        except httpx.HTTPError as e:
            logger.error("Provider unreachable", provider=provider, error=repr(e))
            raise UpstreamError(str(e) or type(e).__name__) from e

        if response.is_success:
            return response

        try:
            detail = (await response.aread()).decode(errors="replace")
        except httpx.HTTPError:
            detail = response.reason_phrase
        finally:
            await response.aclose()
        logger.error(
            "Provider error",
            provider=provider,
            status_code=response.status_code,
            detail=detail[:500],
        )
        raise classify_upstream_status(response.status_code, detail)

    async def _stream_turn(
        self, turn: _Turn, response: httpx.Response
    ) -> AsyncIterator[str]:
        provider = turn.adapter.descriptor.id
        relayed = _Relayed()
        try:
            async for line in self._relay(turn.adapter, response, relayed):
                yield line

            calls = relayed.tool_calls.calls()
            if calls and not relayed.failed:
                async for line in self._tool_round(
                    turn, "".join(relayed.text), calls
                ):
                    yield line
        except (asyncio.CancelledError, GeneratorExit):
            logger.info("Client disconnected", provider=provider)
            raise

        logger.info(
            "Chat stream finished",
            provider=provider,
            deltas=relayed.deltas,
            tool_calls=len(relayed.tool_calls.calls()),
            failed=relayed.failed,
        )
        yield DONE_LINE

    async def _relay(
        self, adapter: ProviderAdapter, response: httpx.Response, relayed: _Relayed
    ) -> AsyncIterator[str]:
        """Forward text deltas of one response and collect its tool calls."""
        try:
            async for delta in relay(response.aiter_bytes(), adapter):
                if delta.text:
                    relayed.deltas += 1
                    relayed.text.append(delta.text)
                    yield format_delta(delta.text)
                for fragment in delta.tool_calls:
                    relayed.tool_calls.add(fragment)
                if delta.error:
                    logger.warning(
                        "Provider stream error",
                        provider=adapter.descriptor.id,
                        error=delta.error,
                    )
                    relayed.failed = True
                    yield format_failure(delta.error)
        except httpx.HTTPError as e:
            logger.error(
                "Provider stream interrupted",
                provider=adapter.descriptor.id,
                error=repr(e),
            )
            relayed.failed = True
            yield format_failure(f"Stream interrupted: {str(e) or type(e).__name__}")
        except Exception:
            logger.exception(
                "Unreadable provider stream", provider=adapter.descriptor.id
            )
            relayed.failed = True
            yield format_failure("Unexpected response from the AI provider")
        finally:
            await response.aclose()

    async def _tool_round(
        self, turn: _Turn, assistant_text: str, calls: list[ToolCall]
    ) -> AsyncIterator[str]:
        logger.info(
            "Executing tool calls",
            provider=turn.adapter.descriptor.id,
            tools=[c.name for c in calls],
        )
        executor = self._executor_factory(
            ToolContext(
                http_client=self._client,
                timeout=self._http.tool_call_timeout,
                tools=self._tools_config,
                gateway=self._gateway,
                api_keys=await self._user_settings.get_api_keys(turn.request.user_id),
            )
        )
        results = await executor.execute_many(calls)

        upstream = turn.adapter.build_request(
            turn.request.messages,
            turn.model,
            turn.system_prompt,
            turn.api_key,
            tools=turn.tools or None,
            tool_round=ToolRound(
                assistant_text=assistant_text, calls=calls, results=results
            ),
        )
        try:
            response = await self._open_upstream(turn.adapter, upstream)
        except AppException as e:
            logger.warning(
                "Final answer call failed, returning tool results",
                provider=turn.adapter.descriptor.id,
                error=e.message,
            )
            yield format_delta(tool_results_answer(results))
            return

        relayed = _Relayed()
        async for line in self._relay(turn.adapter, response, relayed):
            yield line
        if relayed.tool_calls:
            logger.info(
                "Ignoring tool calls after the tool round",
                provider=turn.adapter.descriptor.id,
                tools=[c.name for c in relayed.tool_calls.calls()],
            )


def tool_results_answer(results: list[ToolResult]) -> str:
    """Raw tool output, used when the model cannot summarize it."""
    return "\n\n".join(result.content for result in results)
