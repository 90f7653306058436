"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from gateway.core.settings import (
    AppConfig,
    GatewayConfig,
    HttpConfig,
    RateLimitConfig,
    RedisConfig,
    ServerConfig,
    ToolsConfig,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.gateway.api_key).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Built-in provider
    lovable_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="API key of the built-in AI gateway",
    )
    lovable_default_model: str = Field(
        default="google/gemini-2.5-flash",
        description="Model used by the built-in provider when none is requested",
    )

    # App
    app_name: str = Field(
        default="agentic-chat-gateway",
        description="Application name",
    )
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    debug: bool = Field(
        default=True,
        description="Debug mode",
    )
    cors_origins: str = Field(
        default="",
        description="Comma-separated allowed origins outside development",
    )

    # Upstream HTTP
    http_connect_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Connect timeout for upstream calls in seconds",
    )
    http_read_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Read timeout for provider streams in seconds",
    )
    tool_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for a single tool upstream call in seconds",
    )

    # Tools
    firecrawl_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Server-level Firecrawl key used when the user has none",
    )
    google_maps_api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Server-level Google Maps key used when the user has none",
    )
    code_execution_enabled: bool = Field(
        default=False,
        description="Allow the execute_code tool to run snippets in a subprocess",
    )
    code_execution_timeout: int = Field(
        default=10,
        ge=1,
        le=60,
        description="Wall-clock limit for one snippet in seconds",
    )
    code_execution_max_output: int = Field(
        default=10000,
        ge=100,
        le=100000,
        description="Maximum characters of captured output per stream",
    )
    code_execution_memory_mb: int = Field(
        default=256,
        ge=32,
        le=4096,
        description="Address space limit of the snippet process in MB",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=8004,
        ge=1,
        le=65535,
        description="Server port",
    )
    log_level: Literal["critical", "error", "warning", "info", "debug"] = Field(
        default="info",
        description="uvicorn log level",
    )

    # Rate limit
    chat_rate_limit: str = Field(
        default="30/minute",
        description="Chat endpoint rate limit per client address",
    )
    rate_limit_storage_uri: str = Field(
        default="memory://",
        description="slowapi counter storage (memory:// or a redis:// URL)",
    )

    # Redis
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (user settings store)",
    )
    redis_connect_timeout: float = Field(
        default=2.0,
        gt=0,
        description="Seconds to wait for Redis before running without user settings",
    )

    # --- Domain properties ---

    @cached_property
    def gateway(self) -> GatewayConfig:
        """Built-in provider configuration."""
        return GatewayConfig(
            api_key=self.lovable_api_key,
            default_model=self.lovable_default_model,
        )

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            env=self.app_env,
            debug=self.debug,
            cors_origins=tuple(
                o.strip() for o in self.cors_origins.split(",") if o.strip()
            ),
        )

    @cached_property
    def http(self) -> HttpConfig:
        """Upstream HTTP configuration."""
        return HttpConfig(
            connect_timeout=self.http_connect_timeout,
            read_timeout=self.http_read_timeout,
            tool_timeout=self.tool_timeout,
        )

    @cached_property
    def tools(self) -> ToolsConfig:
        """Tool execution configuration."""
        return ToolsConfig(
            firecrawl_api_key=self.firecrawl_api_key,
            google_maps_api_key=self.google_maps_api_key,
            code_execution_enabled=self.code_execution_enabled,
            code_execution_timeout=self.code_execution_timeout,
            code_execution_max_output=self.code_execution_max_output,
            code_execution_memory_mb=self.code_execution_memory_mb,
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.host,
            port=self.port,
            log_level=self.log_level,
        )

    @cached_property
    def rate_limit(self) -> RateLimitConfig:
        """Inbound rate limit configuration."""
        return RateLimitConfig(
            chat=self.chat_rate_limit,
            storage_uri=self.rate_limit_storage_uri,
        )

    @cached_property
    def redis(self) -> RedisConfig:
        """Redis connection configuration."""
        return RedisConfig(
            url=self.redis_url,
            connect_timeout=self.redis_connect_timeout,
        )

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def allowed_origins(self) -> list[str]:
        """CORS origins (delegates to app config)."""
        return self.app.allowed_origins

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app.is_development


# Global settings instance
settings = Settings()
