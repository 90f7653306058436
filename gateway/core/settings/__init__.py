"""Domain-specific configuration models."""

from gateway.core.settings.app_config import AppConfig
from gateway.core.settings.gateway_config import GatewayConfig
from gateway.core.settings.http_config import HttpConfig
from gateway.core.settings.rate_limit_config import RateLimitConfig
from gateway.core.settings.redis_config import RedisConfig
from gateway.core.settings.server_config import ServerConfig
from gateway.core.settings.tools_config import ToolsConfig

__all__ = [
    "AppConfig",
    "GatewayConfig",
    "HttpConfig",
    "RateLimitConfig",
    "RedisConfig",
    "ServerConfig",
    "ToolsConfig",
]
