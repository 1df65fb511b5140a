"""
Theme Merger
============

Compose built-in defaults, an optional theme and call-site props into one
resolved head configuration.

Precedence is always call-site props over theme over defaults. Style-sets are
merged key by key, fonts and breakpoint are replaced wholesale and custom CSS
lists are concatenated in order.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from mailsmith.config.logging import get_logger
from mailsmith.core.defaults import DEFAULT_STYLE_PROPS
from mailsmith.core.errors import ValidationError
from mailsmith.models.schemas import (
    CustomStyle,
    FontSpec,
    ResolvedHead,
    StyleProps,
    StyleSet,
    ThemeOptions,
)

logger = get_logger(__name__)

# Component names accepted in ``styles.components`` and their MJML tags
COMPONENT_TAGS: Dict[str, str] = {
    "body": "mj-body",
    "button": "mj-button",
    "column": "mj-column",
    "container": "mj-wrapper",
    "divider": "mj-divider",
    "group": "mj-group",
    "image": "mj-image",
    "section": "mj-section",
    "social": "mj-social",
    "social-element": "mj-social-element",
    "spacer": "mj-spacer",
    "table": "mj-table",
    "text": "mj-text",
}

ATTRIBUTE_NAME = re.compile(r"^[a-z][a-z0-9-]*$")
ATTRIBUTE_TOKEN = re.compile(r'([a-z][a-z0-9-]*)="([^"]*)"(?=\s|$)')
NEXT_TOKEN = re.compile(r'(?<=\s)[a-z][a-z0-9-]*="[^"]*"(?=\s|$)')

FORMAT_HINT = '(Expected format: attribute="value" ...)'

# Parsed layer: attribute -> value, malformed segments are kept with a None value
ParsedStyles = Dict[str, Optional[str]]


def to_kebab_case(name: str) -> str:
    """Convert a camelCase or snake_case property name to an MJML attribute name."""
    name = name.strip().replace("_", "-")
    return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "-", name).lower()


def parse_style_set(style_set: Optional[StyleSet]) -> ParsedStyles:
    """
    Normalise a style-set into an ordered attribute mapping.

    Raw strings are tokenised into ``attribute="value"`` pairs. Any text that
    does not form such a pair is kept verbatim as a key with a ``None`` value so
    it can be reported after the merge.
    """
    parsed: ParsedStyles = {}
    if not style_set:
        return parsed

    if isinstance(style_set, str):
        text = style_set.strip()
        position = 0
        while position < len(text):
            if text[position].isspace():
                position += 1
                continue
            token = ATTRIBUTE_TOKEN.match(text, position)
            if token:
                parsed[token.group(1)] = token.group(2)
                position = token.end()
                continue
            following = NEXT_TOKEN.search(text, position + 1)
            end = following.start() if following else len(text)
            parsed[text[position:end].strip()] = None
            position = end
        return parsed

    for key, value in style_set.items():
        if value is None:
            continue
        parsed[to_kebab_case(str(key))] = str(value)
    return parsed


def format_error(scope: str, offending: str) -> str:
    return f'Invalid property format in Head {scope} styles: "{offending}" {FORMAT_HINT}'


def validate_styles(scope: str, styles: ParsedStyles) -> Dict[str, str]:
    """
    Validate a merged style layer.

    Every entry must serialise to ``attribute="value"``.

    Raises:
        ValidationError: Naming the scope and the first offending entry
    """
    resolved: Dict[str, str] = {}
    for attribute, value in styles.items():
        if value is None:
            raise ValidationError(format_error(scope, attribute))
        if not ATTRIBUTE_NAME.match(attribute) or '"' in value:
            raise ValidationError(format_error(scope, f'{attribute}="{value}"'))
        resolved[attribute] = value
    return resolved


class ThemeMerger:
    """Merge style layers for the Head component."""

    def __init__(self, defaults: StyleProps = DEFAULT_STYLE_PROPS) -> None:
        self.defaults = defaults
        self.logger: Any = logger.bind(component="theme_merger")

    def resolve(
        self,
        theme: Union[ThemeOptions, Mapping[str, Any], None] = None,
        fonts: Optional[Sequence[Union[FontSpec, Mapping[str, str]]]] = None,
        breakpoint: Optional[str] = None,
        styles: Union[StyleProps, Mapping[str, Any], None] = None,
    ) -> ResolvedHead:
        """
        Resolve the head configuration.

        Args:
            theme: Shared theme, never mutated
            fonts: Call-site fonts, replacing the theme fonts when given
            breakpoint: Call-site breakpoint, replacing the theme breakpoint when given
            styles: Call-site style overrides

        Returns:
            Resolved head configuration

        Raises:
            ValidationError: If a merged style entry is malformed or a component is unknown
        """
        theme_options = self._coerce_theme(theme)
        prop_styles = self._coerce_styles(styles)
        layers = [self.defaults, theme_options.styles or StyleProps(), prop_styles]

        resolved_fonts = self._first_defined(fonts, theme_options.fonts) or []
        resolved_breakpoint = self._first_defined(breakpoint, theme_options.breakpoint)

        global_styles = validate_styles("global", self._merge(layer.global_ for layer in layers))

        component_names: List[str] = []
        for layer in layers:
            for name in layer.components or {}:
                if name not in component_names:
                    component_names.append(name)

        components: Dict[str, Dict[str, str]] = {}
        for name in component_names:
            if name not in COMPONENT_TAGS:
                raise ValidationError(
                    f'Invalid component "{name}" in Head styles '
                    f"(Expected one of: {', '.join(sorted(COMPONENT_TAGS))})"
                )
            merged = self._merge((layer.components or {}).get(name) for layer in layers)
            resolved = validate_styles(name, merged)
            if resolved:
                components[name] = resolved

        custom: List[CustomStyle] = []
        for layer in layers:
            custom.extend(layer.custom or [])

        self.logger.debug(
            "Resolved head styles",
            fonts=len(resolved_fonts),
            components=list(components),
            custom=len(custom),
        )

        return ResolvedHead(
            fonts=[FontSpec.model_validate(font) for font in resolved_fonts],
            breakpoint=resolved_breakpoint,
            global_styles=global_styles,
            components=components,
            custom=custom,
        )

    def _merge(self, style_sets: Iterable[Optional[StyleSet]]) -> ParsedStyles:
        merged: ParsedStyles = {}
        for style_set in style_sets:
            merged.update(parse_style_set(style_set))
        return merged

    @staticmethod
    def _first_defined(prop_value: Any, theme_value: Any) -> Any:
        return prop_value if prop_value is not None else theme_value

    @staticmethod
    def _coerce_theme(theme: Union[ThemeOptions, Mapping[str, Any], None]) -> ThemeOptions:
        if theme is None:
            return ThemeOptions()
        if isinstance(theme, ThemeOptions):
            return theme
        return ThemeOptions.model_validate(theme)

    @staticmethod
    def _coerce_styles(styles: Union[StyleProps, Mapping[str, Any], None]) -> StyleProps:
        if styles is None:
            return StyleProps()
        if isinstance(styles, StyleProps):
            return styles
        return StyleProps.model_validate(styles)


def resolve_head(
    theme: Union[ThemeOptions, Mapping[str, Any], None] = None,
    fonts: Optional[Sequence[Union[FontSpec, Mapping[str, str]]]] = None,
    breakpoint: Optional[str] = None,
    styles: Union[StyleProps, Mapping[str, Any], None] = None,
) -> ResolvedHead:
    """Resolve head configuration with the built-in defaults."""
    return ThemeMerger().resolve(theme=theme, fonts=fonts, breakpoint=breakpoint, styles=styles)


def component_tag(name: str) -> str:
    """MJML tag for a style component name."""
    return COMPONENT_TAGS[name]
