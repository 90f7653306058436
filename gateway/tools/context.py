"""Per-request context handed to tools through the runnable config."""

from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx
from langchain_core.runnables import RunnableConfig

from gateway.core.exceptions import ToolExecutionError
from gateway.core.settings import GatewayConfig, ToolsConfig

CONTEXT_KEY = "tool_context"


@dataclass(frozen=True)
class ToolContext:
    """Shared client, credentials and limits for one chat turn."""

    http_client: httpx.AsyncClient
    timeout: httpx.Timeout
    tools: ToolsConfig
    gateway: GatewayConfig
    api_keys: Mapping[str, str] = field(default_factory=dict)

    def require_key(self, name: str, label: str) -> str:
        """Return a credential or fail with a message the model can relay."""
        value = self.api_keys.get(name)
        if not value:
            raise ToolExecutionError(
                f"{label} is not configured. Please add it in settings."
            )
        return value

    def as_config(self) -> RunnableConfig:
        """Wrap the context for ``BaseTool.ainvoke``."""
        return {"configurable": {CONTEXT_KEY: self}}


def get_tool_context(config: RunnableConfig) -> ToolContext:
    """Extract the context injected by the executor."""
    context = (config.get("configurable") or {}).get(CONTEXT_KEY)
    if not isinstance(context, ToolContext):
        raise ToolExecutionError("Tool context is not available")
    return context


def ensure_ok(response: httpx.Response, service: str) -> None:
    """Turn a non-2xx upstream response into a readable tool error."""
    if response.is_success:
        return
    detail = response.text.strip()[:300] or response.reason_phrase
    raise ToolExecutionError(f"{service} error ({response.status_code}): {detail}")
