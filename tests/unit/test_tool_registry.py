"""Unit tests for the tool catalogue and capability resolution."""

from gateway.tools.registry import (
    CAPABILITY_TOOLS,
    TOOLS,
    resolve_tools,
    tool_catalog,
    tool_definition,
)


class TestToolCatalogue:
    """Catalogue content tests."""

    def test_tool_names(self) -> None:
        assert set(TOOLS) == {
            "web_search",
            "scrape_website",
            "geocode_address",
            "get_directions",
            "send_email",
            "dns_lookup",
            "execute_code",
            "analyze_image",
        }

    def test_capabilities_only_reference_known_tools(self) -> None:
        for names in CAPABILITY_TOOLS.values():
            assert set(names) <= set(TOOLS)

    def test_definition_excludes_injected_config(self) -> None:
        definition = tool_definition("web_search")

        assert definition.name == "web_search"
        assert definition.description
        assert "query" in definition.parameters["properties"]
        assert "config" not in definition.parameters["properties"]
        assert definition.parameters["required"] == ["query"]

    def test_get_directions_mode_enum(self) -> None:
        mode = tool_definition("get_directions").parameters["properties"]["mode"]
        assert set(mode["enum"]) == {"driving", "walking", "bicycling", "transit"}

    def test_catalog(self) -> None:
        catalog = tool_catalog()

        assert len(catalog.tools) == len(TOOLS)
        assert {c.capability for c in catalog.capabilities} == set(CAPABILITY_TOOLS)


class TestResolveTools:
    """Capability label resolution tests."""

    def test_plain_chat_has_no_tools(self) -> None:
        assert resolve_tools(["AI Chat"]) == []

    def test_empty_and_unknown(self) -> None:
        assert resolve_tools([]) == []
        assert resolve_tools(["Time Travel"]) == []

    def test_deduplicates_in_first_seen_order(self) -> None:
        tools = resolve_tools(["Web Search", "Deep Research", "Web Search"])
        assert [t.name for t in tools] == ["web_search", "scrape_website"]

    def test_google_maps(self) -> None:
        tools = resolve_tools(["AI Chat", "Google Maps"])
        assert [t.name for t in tools] == ["geocode_address", "get_directions"]

    def test_labels_are_case_insensitive(self) -> None:
        assert [t.name for t in resolve_tools(["  dns manager "])] == ["dns_lookup"]
