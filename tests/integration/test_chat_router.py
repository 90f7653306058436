"""Integration tests for the chat and catalogue routers."""

import json

import fakeredis.aioredis
import httpx
from httpx import AsyncClient

from tests.helpers import UpstreamStub, parse_sse, sse, streamed_text, text_chunk, tool_call_chunk

USER_MESSAGE = {"role": "user", "content": "Hello"}


class TestChatEndpoint:
    """POST /api/v1/chat behaviour."""

    async def test_default_provider_streams_without_api_key(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        """The built-in provider needs no caller key."""
        upstream.stream(sse(text_chunk("Hi"), text_chunk("!")))

        response = await async_client.post(
            "/api/v1/chat",
            json={"messages": [USER_MESSAGE], "agentName": "Atlas", "agentTools": ["AI Chat"]},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-accel-buffering"] == "no"
        assert streamed_text(response.text) == "Hi!"
        assert response.text.endswith("data: [DONE]\n\n")
        assert "tools" not in upstream.body(0)

    async def test_missing_caller_key(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        """A keyed provider without apiKey is rejected before any upstream call."""
        response = await async_client.post(
            "/api/v1/chat", json={"messages": [USER_MESSAGE], "provider": "openai"}
        )

        assert response.status_code == 400
        assert response.json() == {
            "error": "OpenAI API key is required",
            "code": "API_KEY_REQUIRED",
        }
        assert upstream.requests == []

    async def test_missing_messages(self, async_client: AsyncClient) -> None:
        response = await async_client.post("/api/v1/chat", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Messages are required"

    async def test_malformed_body(self, async_client: AsyncClient) -> None:
        response = await async_client.post(
            "/api/v1/chat", json={"messages": [{"role": "robot", "content": "x"}]}
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    async def test_upstream_rate_limit(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        upstream.add(httpx.Response(429, json={"error": "slow down"}))

        response = await async_client.post("/api/v1/chat", json={"messages": [USER_MESSAGE]})

        assert response.status_code == 429
        assert response.json()["error"] == "Rate limit exceeded. Please try again later."

    async def test_upstream_forbidden_surfaces_as_401(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        upstream.add(httpx.Response(403, text="forbidden"))

        response = await async_client.post(
            "/api/v1/chat",
            json={"messages": [USER_MESSAGE], "provider": "mistral", "apiKey": "bad"},
        )

        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_API_KEY"

    async def test_upstream_quota(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        upstream.add(httpx.Response(402, text="payment required"))

        response = await async_client.post("/api/v1/chat", json={"messages": [USER_MESSAGE]})

        assert response.status_code == 402
        assert response.json()["error"] == "Usage limit reached. Please add credits."

    async def test_upstream_server_error(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        upstream.add(httpx.Response(503, text="model overloaded"))

        response = await async_client.post("/api/v1/chat", json={"messages": [USER_MESSAGE]})

        assert response.status_code == 500
        assert response.json()["error"] == "AI service error: model overloaded"

    async def test_google_maps_tool_round(
        self,
        async_client: AsyncClient,
        upstream: UpstreamStub,
        fake_redis: fakeredis.aioredis.FakeRedis,
    ) -> None:
        """A maps tool call is executed and its result fed back to the model."""
        await fake_redis.hset("user_settings:u1", mapping={"google_maps_api_key": "maps-key"})
        upstream.stream(
            sse(tool_call_chunk(0, '{"address": "Eiffel Tower"}', call_id="call_1", name="geocode_address"))
        )
        upstream.json(
            {
                "status": "OK",
                "results": [
                    {
                        "formatted_address": "Champ de Mars, Paris",
                        "geometry": {"location": {"lat": 48.8584, "lng": 2.2945}},
                    }
                ],
            }
        )
        upstream.stream(sse(text_chunk("It is in Paris.")))

        response = await async_client.post(
            "/api/v1/chat",
            json={
                "messages": [{"role": "user", "content": "Where is the Eiffel Tower?"}],
                "agentTools": ["Google Maps"],
                "userId": "u1",
            },
        )

        assert response.status_code == 200
        maps_request = upstream.requests[1]
        assert maps_request.url.params["address"] == "Eiffel Tower"
        assert maps_request.url.params["key"] == "maps-key"
        tool_message = upstream.body(2)["messages"][-1]
        assert tool_message["role"] == "tool"
        assert json.loads(tool_message["content"])["location"]["lat"] == 48.8584
        assert streamed_text(response.text) == "It is in Paris."

    async def test_tool_network_error_still_answers(
        self, async_client: AsyncClient, upstream: UpstreamStub
    ) -> None:
        """A failing tool becomes an error result; the model still answers."""
        upstream.stream(
            sse(tool_call_chunk(0, '{"domain": "example.com"}', call_id="c1", name="dns_lookup"))
        )
        upstream.add(httpx.ConnectError("network unreachable"))
        upstream.stream(sse(text_chunk("I could not reach the DNS service.")))

        response = await async_client.post(
            "/api/v1/chat",
            json={"messages": [USER_MESSAGE], "agentTools": ["DNS Manager"]},
        )

        assert response.status_code == 200
        tool_message = upstream.body(2)["messages"][-1]
        assert json.loads(tool_message["content"]) == {"error": "network unreachable"}
        assert streamed_text(response.text) == "I could not reach the DNS service."
        assert parse_sse(response.text)[-1] == "[DONE]"

    async def test_legacy_path(self, async_client: AsyncClient, upstream: UpstreamStub) -> None:
        upstream.stream(sse(text_chunk("ok")))

        response = await async_client.post("/chat", json={"messages": [USER_MESSAGE]})

        assert response.status_code == 200
        assert streamed_text(response.text) == "ok"


class TestCatalogEndpoints:
    """Provider and tool listings."""

    async def test_providers(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/v1/providers")

        assert response.status_code == 200
        providers = {p["id"]: p for p in response.json()["data"]}
        assert len(providers) == 10
        assert providers["lovable"]["requires_api_key"] is False
        assert providers["google"]["auth_style"] == "query"
        assert providers["perplexity"]["supports_tools"] is False

    async def test_tools(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/api/v1/tools")

        assert response.status_code == 200
        data = response.json()["data"]
        assert {t["name"] for t in data["tools"]} >= {"web_search", "geocode_address"}
        deep_research = next(c for c in data["capabilities"] if c["capability"] == "Deep Research")
        assert deep_research["tools"] == ["web_search", "scrape_website"]


class TestHealthEndpoints:
    """Public endpoints."""

    async def test_health(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/health")

        assert response.status_code == 200
        assert response.json()["data"] == {"status": "healthy"}

    async def test_root(self, async_client: AsyncClient) -> None:
        response = await async_client.get("/")

        assert response.status_code == 200
        assert response.json()["data"]["docs"] == "/docs"
