"""Upstream AI provider adapters."""

from gateway.providers.base import ProviderAdapter, ProviderDescriptor
from gateway.providers.registry import (
    DEFAULT_PROVIDER,
    PROVIDER_ENDPOINTS,
    PROVIDERS,
    get_adapter,
)

__all__ = [
    "DEFAULT_PROVIDER",
    "PROVIDERS",
    "PROVIDER_ENDPOINTS",
    "ProviderAdapter",
    "ProviderDescriptor",
    "get_adapter",
]
