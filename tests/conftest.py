"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator

import fakeredis.aioredis
import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr

from gateway.core.rate_limit import limiter
from gateway.core.settings import GatewayConfig, HttpConfig, ToolsConfig
from gateway.services.chat_gateway_service import ChatGatewayService
from gateway.services.user_settings_service import UserSettingsService
from gateway.tools.context import ToolContext
from tests.helpers import UpstreamStub

# --- Test Redis (fakeredis) ---


@pytest.fixture
def fake_redis() -> fakeredis.aioredis.FakeRedis:
    """Create a fresh fake Redis client."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture(autouse=True)
def patch_redis(
    fake_redis: fakeredis.aioredis.FakeRedis, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Patch the global redis_client used by get_redis()."""
    monkeypatch.setattr("gateway.core.redis.redis_client", fake_redis)


@pytest.fixture(autouse=True)
def reset_rate_limits() -> None:
    """Start every test with empty slowapi counters."""
    limiter.reset()


# --- Config ---


@pytest.fixture
def gateway_config() -> GatewayConfig:
    """Built-in provider with a server key."""
    return GatewayConfig(
        api_key=SecretStr("lovable-test-key"),
        default_model="google/gemini-2.5-flash",
    )


@pytest.fixture
def http_config() -> HttpConfig:
    return HttpConfig(connect_timeout=5.0, read_timeout=30.0, tool_timeout=10.0)


@pytest.fixture
def tools_config() -> ToolsConfig:
    """Tools without server fallback keys and with code execution off."""
    return ToolsConfig(
        firecrawl_api_key=SecretStr(""),
        google_maps_api_key=SecretStr(""),
        code_execution_enabled=False,
        code_execution_timeout=5,
        code_execution_max_output=1000,
        code_execution_memory_mb=256,
    )


# --- Upstream stubs ---


@pytest.fixture
def upstream() -> UpstreamStub:
    """Scripted upstream; queue responses with ``upstream.add(...)``."""
    return UpstreamStub()


@pytest.fixture
async def stub_client(upstream: UpstreamStub) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client whose requests are answered by the upstream stub."""
    async with upstream.client() as client:
        yield client


@pytest.fixture
def tool_context(
    stub_client: httpx.AsyncClient,
    gateway_config: GatewayConfig,
    http_config: HttpConfig,
    tools_config: ToolsConfig,
) -> ToolContext:
    """Tool context with every credential a tool may ask for."""
    return ToolContext(
        http_client=stub_client,
        timeout=http_config.tool_call_timeout,
        tools=tools_config,
        gateway=gateway_config,
        api_keys={
            "firecrawl_api_key": "fc-test",
            "google_maps_api_key": "maps-test",
            "smtp_host": "smtp.test.local",
            "smtp_port": "587",
            "smtp_user": "bot@test.local",
            "smtp_pass": "secret",
        },
    )


@pytest.fixture
def user_settings(fake_redis: fakeredis.aioredis.FakeRedis) -> UserSettingsService:
    return UserSettingsService(fake_redis)


@pytest.fixture
def chat_service(
    stub_client: httpx.AsyncClient,
    user_settings: UserSettingsService,
    gateway_config: GatewayConfig,
    http_config: HttpConfig,
    tools_config: ToolsConfig,
) -> ChatGatewayService:
    """Chat service wired to the upstream stub."""
    return ChatGatewayService(
        http_client=stub_client,
        user_settings=user_settings,
        gateway=gateway_config,
        http=http_config,
        tools_config=tools_config,
    )


# --- App client ---


@pytest.fixture
async def async_client(
    chat_service: ChatGatewayService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client whose chat service talks to the stub."""
    from gateway.dependencies import get_chat_gateway_service
    from gateway.main import app

    app.dependency_overrides[get_chat_gateway_service] = lambda: chat_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
