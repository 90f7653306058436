"""Chat API router: one streamed chat turn per request."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from gateway.core.config import settings
from gateway.core.rate_limit import limiter
from gateway.dependencies import get_chat_gateway_service
from gateway.schemas.chat_schema import ChatRequest
from gateway.schemas.response_schema import ErrorResponse
from gateway.services.chat_gateway_service import ChatGatewayService

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse, "description": "Invalid request or missing API key"},
    401: {"model": ErrorResponse, "description": "Provider rejected the API key"},
    402: {"model": ErrorResponse, "description": "Provider usage limit reached"},
    429: {"model": ErrorResponse, "description": "Rate limit exceeded"},
    500: {"model": ErrorResponse, "description": "Provider or server error"},
}

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])
legacy_router = APIRouter(tags=["chat"])

ChatGatewayServiceDep = Annotated[
    ChatGatewayService, Depends(get_chat_gateway_service)
]


async def _stream(
    body: ChatRequest, chat_service: ChatGatewayService
) -> StreamingResponse:
    lines = await chat_service.open_stream(body)
    return StreamingResponse(
        lines, media_type="text/event-stream", headers=SSE_HEADERS
    )


@router.post("", response_class=StreamingResponse, responses=ERROR_RESPONSES)
@limiter.limit(settings.rate_limit.chat)
async def chat(
    request: Request,
    body: ChatRequest,
    chat_service: ChatGatewayServiceDep,
) -> StreamingResponse:
    """Stream the assistant's answer as Server-Sent Events.

    Each event is ``data: {"choices":[{"delta":{"content":"..."}}]}``; the
    stream ends with ``data: [DONE]``. Errors detected before the first
    byte are returned as JSON ``{"error", "code"}`` with a matching status.

    A failure after streaming began is sent as ``data: {"error": "..."}``
    followed by a content delta ``[Error: ...]``, so clients that only read
    ``choices[0].delta.content`` still show it.
    """
    return await _stream(body, chat_service)


@legacy_router.post(
    "/chat",
    response_class=StreamingResponse,
    responses=ERROR_RESPONSES,
    include_in_schema=False,
)
@limiter.limit(settings.rate_limit.chat)
async def chat_legacy(
    request: Request,
    body: ChatRequest,
    chat_service: ChatGatewayServiceDep,
) -> StreamingResponse:
    """Unversioned alias of ``POST /api/v1/chat``."""
    return await _stream(body, chat_service)
