"""Tests for prompt template substitution."""

import pytest

from mcp_stdio_server.protocol.templates import (
    render_template,
    resolve_conditionals,
    substitute_placeholders,
)

GREETING = "Hello {name}{?greeting? and {greeting}}!"


class TestPlaceholders:
    """Tests for {name} substitution."""

    def test_substitutes_known_placeholders(self):
        """Should replace placeholders with argument values."""
        assert substitute_placeholders("Hi {a}, {b}", {"a": "x", "b": "y"}) == "Hi x, y"

    def test_leaves_unknown_placeholders(self):
        """Should leave placeholders without an argument intact."""
        assert substitute_placeholders("Hi {who}", {}) == "Hi {who}"

    def test_converts_values_to_strings(self):
        """Should render non-string values with str()."""
        assert substitute_placeholders("{n} items", {"n": 3}) == "3 items"

    def test_substituted_values_are_not_rescanned(self):
        """Should not expand placeholders that appear in argument values."""
        assert render_template("{a}", {"a": "{b}", "b": "no"}) == "{b}"


class TestConditionals:
    """Tests for {?name?body} blocks."""

    def test_drops_block_when_argument_absent(self):
        """Should remove the whole block when the argument is not supplied."""
        assert render_template(GREETING, {"name": "Ann"}) == "Hello Ann!"

    def test_keeps_block_when_argument_present(self):
        """Should keep and render the body when the argument is supplied."""
        result = render_template(GREETING, {"name": "Ann", "greeting": "welcome"})

        assert result == "Hello Ann and welcome!"

    def test_keeps_block_for_empty_value(self):
        """Should treat a supplied empty string as present."""
        assert render_template("a{?x?-{x}-}b", {"x": ""}) == "a--b"

    def test_body_may_contain_balanced_braces(self):
        """Should match the closing brace of the block, not of inner braces."""
        template = "{?code?fn() {return {v};}}."

        assert render_template(template, {"code": 1, "v": 2}) == "fn() {return 2;}."

    def test_nested_conditionals(self):
        """Should resolve conditionals nested inside kept bodies."""
        template = "[{?a?A{?b?B}}]"

        assert render_template(template, {"a": 1}) == "[A]"
        assert render_template(template, {"a": 1, "b": 1}) == "[AB]"
        assert render_template(template, {"b": 1}) == "[]"

    def test_several_blocks(self):
        """Should handle multiple blocks in one template."""
        template = "{?a?<{a}>}{?b?<{b}>}"

        assert render_template(template, {"b": "2"}) == "<2>"

    def test_resolve_does_not_substitute(self):
        """Should leave placeholders for the substitution pass."""
        assert resolve_conditionals("{?a?{a}}", {"a": "x"}) == "{a}"


class TestMalformedTemplates:
    """Tests for malformed conditional blocks."""

    @pytest.mark.parametrize(
        "template",
        [
            "before {?name",
            "before {?name?body",
            "before {?name?{unbalanced}",
        ],
    )
    def test_unterminated_block_is_literal(self, template):
        """Should keep an unterminated block verbatim."""
        assert render_template(template, {"name": "x"}) == template

    def test_text_before_malformed_block_is_rendered(self):
        """Should still substitute placeholders outside the malformed block."""
        assert render_template("{who} {?x?oops", {"who": "me"}) == "me {?x?oops"

    def test_plain_text_unchanged(self):
        """Should return templates without markup unchanged."""
        assert render_template("no markup here", {"a": 1}) == "no markup here"
