"""Tests for capability declarations."""

import pytest

from mcp_stdio_server.features.resources import Resource
from mcp_stdio_server.protocol.capabilities import (
    LoggingCapability,
    PromptCapability,
    ResourceCapability,
    ToolCapability,
    capabilities_to_protocol,
    capability_from_dict,
    default_capabilities,
    merge_capabilities,
)
from tests.conftest import call, make_echo_tool


class TestCapabilityFormat:
    """Tests for per-capability protocol format."""

    def test_resource_capability(self):
        """Should report listChanged and subscribe."""
        cap = ResourceCapability(list_changed=True)

        assert cap.to_protocol_format() == {"listChanged": True, "subscribe": False}

    def test_tool_and_prompt_capability(self):
        """Should report listChanged only."""
        assert ToolCapability().to_protocol_format() == {"listChanged": False}
        assert PromptCapability(list_changed=True).to_protocol_format() == {"listChanged": True}

    def test_logging_capability_is_empty(self):
        """Should advertise logging as an empty object."""
        assert LoggingCapability().to_protocol_format() == {}


class TestMergeCapabilities:
    """Tests for merging capability lists."""

    def test_override_replaces_same_kind_in_place(self):
        """Should replace entries of the same kind keeping their position."""
        base = default_capabilities()
        merged = merge_capabilities(base, [ToolCapability(list_changed=False)])

        assert [type(c) for c in merged] == [ResourceCapability, ToolCapability, PromptCapability]
        assert merged[1] == ToolCapability(list_changed=False)

    def test_new_kinds_are_appended(self):
        """Should append kinds missing from the base."""
        merged = merge_capabilities(default_capabilities(), [LoggingCapability()])

        assert merged[-1] == LoggingCapability()
        assert len(merged) == 4

    def test_inputs_unchanged(self):
        """Should not modify either input list."""
        base = default_capabilities()
        override = [ResourceCapability()]

        merge_capabilities(base, override)

        assert base == default_capabilities()
        assert override == [ResourceCapability()]


class TestCapabilitiesToProtocol:
    """Tests for the initialize capabilities map."""

    def test_lists_resources(self, server):
        """Should list resource summaries under resources."""
        server.register(Resource(uri="test://a", name="A", data_provider=lambda: 1))

        result = capabilities_to_protocol(default_capabilities(), server)

        assert result["resources"]["resources"] == [
            {"uri": "test://a", "name": "A", "mimeType": "application/json", "description": ""}
        ]

    def test_never_lists_tools(self, server):
        """Should not include tool definitions under tools."""
        server.register(make_echo_tool())

        result = capabilities_to_protocol(default_capabilities(), server)

        assert result["tools"] == {"listChanged": True}

    def test_initialize_advertises_without_tools(self, server):
        """Should keep tools out of the initialize capabilities."""
        server.register(make_echo_tool()).register(make_echo_tool("other"))

        response = call(server, "initialize", {"protocolVersion": "2024-11-05"})

        assert response["result"]["capabilities"]["tools"] == {"listChanged": True}

    def test_only_declared_capabilities(self, server):
        """Should include only the capabilities passed in."""
        result = capabilities_to_protocol([LoggingCapability()], server)

        assert result == {"logging": {}}


class TestCapabilityFromDict:
    """Tests for building capabilities from configuration."""

    def test_builds_capability(self):
        """Should pass options to the capability type."""
        cap = capability_from_dict("resources", {"list_changed": True, "subscribe": True})

        assert cap == ResourceCapability(list_changed=True, subscribe=True)

    def test_none_options(self):
        """Should accept an empty entry."""
        assert capability_from_dict("tools", None) == ToolCapability()

    def test_levels_become_tuple(self):
        """Should store logging levels as a tuple."""
        cap = capability_from_dict("logging", {"levels": ["error"]})

        assert cap.levels == ("error",)

    def test_unknown_kind(self):
        """Should reject unknown capability kinds."""
        with pytest.raises(ValueError, match="Unknown capability"):
            capability_from_dict("sampling", {})

    def test_unknown_option(self):
        """Should reject unknown options."""
        with pytest.raises(ValueError, match="Invalid options"):
            capability_from_dict("tools", {"subscribe": True})
