"""
Unit Tests for Theme Merging
============================

Tests for style-set parsing, merge precedence and style validation.
"""

import pytest

from mailsmith.core.errors import ValidationError
from mailsmith.core.theme.merger import (
    ThemeMerger,
    component_tag,
    parse_style_set,
    resolve_head,
    to_kebab_case,
)
from mailsmith.core.theme.theme import create_theme
from mailsmith.models.schemas import FontSpec, InlineStyle, StyleProps


class TestStyleSetParsing:
    """Test normalisation of style-set inputs."""

    def test_parse_attribute_string(self):
        """Test raw attribute strings are tokenised in order."""
        parsed = parse_style_set('color="#333" font-size="16px"')
        assert parsed == {"color": "#333", "font-size": "16px"}
        assert list(parsed) == ["color", "font-size"]

    def test_parse_mapping(self):
        """Test camelCase mappings become kebab-case attributes."""
        parsed = parse_style_set({"fontFamily": "Arial", "lineHeight": 1.5, "color": None})
        assert parsed == {"font-family": "Arial", "line-height": "1.5"}

    def test_string_and_mapping_normalise_identically(self):
        """Test both representations produce the same canonical form."""
        assert parse_style_set('font-size="16px"') == parse_style_set({"fontSize": "16px"})

    def test_malformed_segment_is_kept(self):
        """Test malformed text is kept for later reporting."""
        parsed = parse_style_set('font-family Arial color="#000"')
        assert parsed == {"font-family Arial": None, "color": "#000"}

    def test_empty_inputs(self):
        """Test empty style-sets parse to nothing."""
        assert parse_style_set(None) == {}
        assert parse_style_set("") == {}
        assert parse_style_set({}) == {}

    @pytest.mark.parametrize(
        "name,expected",
        [("fontFamily", "font-family"), ("background_color", "background-color"), ("color", "color")],
    )
    def test_to_kebab_case(self, name, expected):
        """Test property name conversion."""
        assert to_kebab_case(name) == expected


class TestThemeMerger:
    """Test merge precedence."""

    @pytest.fixture
    def merger(self):
        """Create a merger with the built-in defaults."""
        return ThemeMerger()

    def test_props_override_theme(self, merger):
        """Test call-site styles win over the theme."""
        theme = create_theme({"styles": {"components": {"text": {"color": "#333"}}}})
        head = merger.resolve(theme=theme, styles={"components": {"text": {"color": "#000"}}})
        assert head.components["text"] == {"color": "#000"}

    def test_keys_merge_per_component(self, merger):
        """Test keys from both layers are kept, last write wins."""
        theme = create_theme({"styles": {"components": {"text": 'color="#333" font-size="14px"'}}})
        head = merger.resolve(theme=theme, styles={"components": {"text": {"fontSize": "18px"}}})
        assert head.components["text"] == {"color": "#333", "font-size": "18px"}

    def test_custom_lists_concatenate(self, merger):
        """Test custom CSS lists are concatenated theme first."""
        theme = create_theme({"styles": {"custom": ["a"]}})
        head = merger.resolve(theme=theme, styles={"custom": ["b"]})
        assert head.custom == ["a", "b"]

    def test_inline_custom_styles_are_kept(self, merger):
        """Test inline custom styles pass through unchanged."""
        head = merger.resolve(styles={"custom": [{"inline": True, "css": "p { margin: 0; }"}]})
        assert head.custom == [InlineStyle(css="p { margin: 0; }")]

    def test_fonts_and_breakpoint_prop_wins(self, merger):
        """Test fonts and breakpoint are replaced wholesale by props."""
        theme = create_theme(
            {"fonts": [{"name": "Roboto", "href": "https://a"}], "breakpoint": "480px"}
        )
        head = merger.resolve(theme=theme, fonts=[{"name": "Inter", "href": "https://b"}], breakpoint="320px")
        assert head.fonts == [FontSpec(name="Inter", href="https://b")]
        assert head.breakpoint == "320px"

    def test_theme_values_used_without_props(self, merger):
        """Test theme fonts and breakpoint apply when props are absent."""
        theme = create_theme({"fonts": [{"name": "Roboto", "href": "https://a"}], "breakpoint": "480px"})
        head = merger.resolve(theme=theme)
        assert head.fonts[0].name == "Roboto"
        assert head.breakpoint == "480px"

    def test_empty_theme_behaves_like_no_theme(self, merger):
        """Test an empty theme adds nothing."""
        assert merger.resolve(theme=create_theme({})) == merger.resolve()

    def test_theme_is_not_mutated(self, merger):
        """Test resolving leaves the shared theme untouched."""
        theme = create_theme({"styles": {"components": {"text": {"color": "#333"}}, "custom": ["a"]}})
        before = theme.model_dump()
        merger.resolve(theme=theme, styles={"components": {"text": {"color": "#000"}}, "custom": ["b"]})
        assert theme.model_dump() == before

    def test_defaults_layer_has_lowest_precedence(self):
        """Test built-in defaults are overridden by the theme."""
        merger = ThemeMerger(StyleProps(global_={"color": "#111"}, custom=["base"]))
        head = merger.resolve(theme=create_theme({"styles": {"global": {"color": "#222"}}}))
        assert head.global_styles == {"color": "#222"}
        assert head.custom == ["base"]

    def test_global_styles_resolved(self, merger):
        """Test the global layer is resolved to attributes."""
        head = merger.resolve(styles={"global": {"fontFamily": "Arial"}})
        assert head.global_styles == {"font-family": "Arial"}
        assert head.has_attributes


class TestStyleValidation:
    """Test validation of the merged layers."""

    def test_malformed_global_style_message(self):
        """Test the exact message for a malformed global entry."""
        with pytest.raises(ValidationError) as exc_info:
            resolve_head(styles={"global": "font-family Arial"})

        assert str(exc_info.value) == (
            'Invalid property format in Head global styles: "font-family Arial" '
            '(Expected format: attribute="value" ...)'
        )

    def test_malformed_component_style_names_component(self):
        """Test component scope appears in the message."""
        with pytest.raises(ValidationError) as exc_info:
            resolve_head(styles={"components": {"text": "color #333"}})

        assert "Head text styles" in str(exc_info.value)

    def test_prop_override_masks_malformed_theme_value(self):
        """Test validation runs after the merge."""
        theme = create_theme({"styles": {"components": {"button": "padding 10px"}}})
        with pytest.raises(ValidationError):
            resolve_head(theme=theme)

        theme = create_theme({"styles": {"components": {"button": 'color="#fff"'}}})
        head = resolve_head(theme=theme, styles={"components": {"button": {"color": "#000"}}})
        assert head.components["button"] == {"color": "#000"}

    def test_unknown_component_raises(self):
        """Test unknown component names are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            resolve_head(styles={"components": {"carousel": {"color": "#000"}}})

        assert "carousel" in str(exc_info.value)

    def test_component_tag_lookup(self):
        """Test component names map to MJML tags."""
        assert component_tag("container") == "mj-wrapper"
        assert component_tag("social-element") == "mj-social-element"
