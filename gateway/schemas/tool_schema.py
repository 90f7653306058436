"""Tool catalogue schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ToolDefinition(BaseModel):
    """Invocable tool as advertised to a provider."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: dict[str, Any] = Field(default_factory=dict)


class CapabilityInfo(BaseModel):
    """Human-facing capability label and the tools it grants."""

    capability: str
    tools: list[str]


class ToolCatalog(BaseModel):
    """Read-only view of the tool registry."""

    tools: list[ToolDefinition]
    capabilities: list[CapabilityInfo]
