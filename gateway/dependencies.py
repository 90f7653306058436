"""Global dependencies for the application."""

import httpx
from fastapi import Depends

from gateway.core.config import settings
from gateway.core.http import get_http_client
from gateway.core.redis import get_redis
from gateway.services.chat_gateway_service import ChatGatewayService
from gateway.services.user_settings_service import UserSettingsService


def get_user_settings_service() -> UserSettingsService:
    """Get UserSettingsService backed by the active Redis client."""
    return UserSettingsService(get_redis(), settings.tools.fallback_keys())


def get_chat_gateway_service(
    http_client: httpx.AsyncClient = Depends(get_http_client),
    user_settings: UserSettingsService = Depends(get_user_settings_service),
) -> ChatGatewayService:
    """Get ChatGatewayService with the shared client and settings store."""
    return ChatGatewayService(
        http_client=http_client,
        user_settings=user_settings,
        gateway=settings.gateway,
        http=settings.http,
        tools_config=settings.tools,
    )
