"""Tool catalogue and capability resolution.

Agents declare human-facing capabilities ("Deep Research", "Google Maps");
the table below maps each label to the canonical tools it grants.
"""

from collections.abc import Iterable, Mapping
from functools import cache
from types import MappingProxyType

from langchain_core.tools import BaseTool
from langchain_core.utils.function_calling import convert_to_openai_tool

from gateway.schemas.tool_schema import CapabilityInfo, ToolCatalog, ToolDefinition
from gateway.tools.analyze_image import analyze_image
from gateway.tools.dns_lookup import dns_lookup
from gateway.tools.execute_code import execute_code
from gateway.tools.maps import geocode_address, get_directions
from gateway.tools.scrape_website import scrape_website
from gateway.tools.send_email import send_email
from gateway.tools.web_search import web_search

TOOLS: Mapping[str, BaseTool] = MappingProxyType(
    {
        t.name: t
        for t in (
            web_search,
            scrape_website,
            geocode_address,
            get_directions,
            send_email,
            dns_lookup,
            execute_code,
            analyze_image,
        )
    }
)

CAPABILITY_TOOLS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "AI Chat": (),
        "Deep Research": ("web_search", "scrape_website"),
        "Web Search": ("web_search",),
        "Web Clone": ("scrape_website",),
        "Google Maps": ("geocode_address", "get_directions"),
        "Maps": ("geocode_address", "get_directions"),
        "Email": ("send_email",),
        "Email Manager": ("send_email",),
        "DNS": ("dns_lookup",),
        "DNS Manager": ("dns_lookup",),
        "Code Execution": ("execute_code",),
        "Terminal": ("execute_code",),
        "Image Analysis": ("analyze_image",),
        "Vision": ("analyze_image",),
    }
)

_CAPABILITY_INDEX = {
    label.strip().lower(): names for label, names in CAPABILITY_TOOLS.items()
}


@cache
def tool_definition(name: str) -> ToolDefinition:
    """Provider-neutral schema of one catalogue tool."""
    function = convert_to_openai_tool(TOOLS[name])["function"]
    return ToolDefinition(
        name=function["name"],
        description=function.get("description", ""),
        parameters=function.get("parameters", {"type": "object", "properties": {}}),
    )


def resolve_tools(capabilities: Iterable[str]) -> list[ToolDefinition]:
    """Map capability labels to tool schemas, deduplicated in first-seen order.

    Unknown labels and labels without tools (e.g. "AI Chat") contribute
    nothing, so the result may be empty.
    """
    resolved: dict[str, ToolDefinition] = {}
    for label in capabilities:
        for name in _CAPABILITY_INDEX.get(label.strip().lower(), ()):
            if name not in resolved:
                resolved[name] = tool_definition(name)
    return list(resolved.values())


def tool_catalog() -> ToolCatalog:
    """Read-only view of tools and capability labels."""
    return ToolCatalog(
        tools=[tool_definition(name) for name in TOOLS],
        capabilities=[
            CapabilityInfo(capability=label, tools=list(names))
            for label, names in CAPABILITY_TOOLS.items()
        ],
    )
