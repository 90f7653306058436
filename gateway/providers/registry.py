"""Provider catalogue.

The table is built once at import time and exposed read-only; request
handling only ever looks adapters up, it never mutates the mapping.
"""

from collections.abc import Mapping
from types import MappingProxyType

import structlog

from gateway.providers.anthropic import ANTHROPIC_VERSION, AnthropicAdapter
from gateway.providers.base import ProviderAdapter, ProviderDescriptor
from gateway.providers.cohere import CohereAdapter
from gateway.providers.google import GoogleAdapter
from gateway.providers.openai_compatible import OpenAICompatibleAdapter

logger = structlog.get_logger()

DEFAULT_PROVIDER = "lovable"

LOVABLE = ProviderDescriptor(
    id="lovable",
    label="Lovable AI",
    endpoint="https://ai.gateway.lovable.dev/v1/chat/completions",
    default_model="google/gemini-2.5-flash",
    auth_style="bearer",
    supports_tools=True,
    requires_api_key=False,
)
OPENAI = ProviderDescriptor(
    id="openai",
    label="OpenAI",
    endpoint="https://api.openai.com/v1/chat/completions",
    default_model="gpt-4o-mini",
    auth_style="bearer",
    supports_tools=True,
)
ANTHROPIC = ProviderDescriptor(
    id="anthropic",
    label="Anthropic",
    endpoint="https://api.anthropic.com/v1/messages",
    default_model="claude-3-5-haiku-20241022",
    auth_style="x-api-key",
    supports_tools=True,
    extra_headers=MappingProxyType({"anthropic-version": ANTHROPIC_VERSION}),
)
GOOGLE = ProviderDescriptor(
    id="google",
    label="Google AI",
    endpoint="https://generativelanguage.googleapis.com/v1beta/models",
    default_model="gemini-2.0-flash",
    auth_style="query",
)
MISTRAL = ProviderDescriptor(
    id="mistral",
    label="Mistral",
    endpoint="https://api.mistral.ai/v1/chat/completions",
    default_model="mistral-small-latest",
    auth_style="bearer",
    supports_tools=True,
)
GROQ = ProviderDescriptor(
    id="groq",
    label="Groq",
    endpoint="https://api.groq.com/openai/v1/chat/completions",
    default_model="llama-3.3-70b-versatile",
    auth_style="bearer",
    supports_tools=True,
)
TOGETHER = ProviderDescriptor(
    id="together",
    label="Together AI",
    endpoint="https://api.together.xyz/v1/chat/completions",
    default_model="meta-llama/Meta-Llama-3.1-70B-Instruct-Turbo",
    auth_style="bearer",
    supports_tools=True,
)
OPENROUTER = ProviderDescriptor(
    id="openrouter",
    label="OpenRouter",
    endpoint="https://openrouter.ai/api/v1/chat/completions",
    default_model="openai/gpt-4o",
    auth_style="bearer",
    supports_tools=True,
    extra_headers=MappingProxyType({"HTTP-Referer": "https://agentic-max.lovable.app"}),
)
PERPLEXITY = ProviderDescriptor(
    id="perplexity",
    label="Perplexity",
    endpoint="https://api.perplexity.ai/chat/completions",
    default_model="sonar",
    auth_style="bearer",
)
COHERE = ProviderDescriptor(
    id="cohere",
    label="Cohere",
    endpoint="https://api.cohere.ai/v1/chat",
    default_model="command-r",
    auth_style="bearer",
    framing="ndjson",
)


def _build_registry() -> Mapping[str, ProviderAdapter]:
    adapters: list[ProviderAdapter] = [
        OpenAICompatibleAdapter(LOVABLE),
        OpenAICompatibleAdapter(OPENAI),
        AnthropicAdapter(ANTHROPIC),
        GoogleAdapter(GOOGLE),
        OpenAICompatibleAdapter(MISTRAL),
        OpenAICompatibleAdapter(GROQ),
        OpenAICompatibleAdapter(TOGETHER),
        OpenAICompatibleAdapter(OPENROUTER),
        OpenAICompatibleAdapter(PERPLEXITY),
        CohereAdapter(COHERE),
    ]
    return MappingProxyType({a.descriptor.id: a for a in adapters})


PROVIDERS: Mapping[str, ProviderAdapter] = _build_registry()

PROVIDER_ENDPOINTS: Mapping[str, str] = MappingProxyType(
    {pid: adapter.descriptor.endpoint for pid, adapter in PROVIDERS.items()}
)


def get_adapter(provider_id: str | None) -> ProviderAdapter:
    """Look up an adapter; unknown or missing ids use the built-in provider."""
    key = (provider_id or DEFAULT_PROVIDER).strip().lower()
    adapter = PROVIDERS.get(key)
    if adapter is None:
        logger.warning(
            "Unknown provider, using default",
            provider=provider_id,
            default=DEFAULT_PROVIDER,
        )
        return PROVIDERS[DEFAULT_PROVIDER]
    return adapter
