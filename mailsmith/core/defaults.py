"""
Defaults
========

Built-in option values used when the caller omits them.
"""

from typing import Any, Dict

from mailsmith.models.schemas import (
    MinifyConfig,
    PlainTextOptions,
    PlainTextSelector,
    RenderOptions,
    StyleProps,
)

DEFAULT_RENDER_OPTIONS = RenderOptions(plain_text=True, beautify=True, minify=True)

DEFAULT_MJML_OPTIONS: Dict[str, Any] = {
    "validation_level": "strict",
    "minify": False,
    "beautify": False,
}

DEFAULT_MINIFY_OPTIONS = MinifyConfig()

# Lowest precedence layer of the head style merge
DEFAULT_STYLE_PROPS = StyleProps(global_={}, components={}, custom=[])

DEFAULT_PLAIN_TEXT_OPTIONS = PlainTextOptions(
    wordwrap=80,
    preserve_newlines=True,
    selectors=[
        PlainTextSelector(selector="img", format="skip"),
        PlainTextSelector(selector="mj-image", format="skip"),
        PlainTextSelector(selector="mj-social-element", format="skip"),
        PlainTextSelector(selector="mj-button", format="skip"),
        PlainTextSelector(selector="mj-divider", format="skip"),
        PlainTextSelector(selector="mj-spacer", format="skip"),
        PlainTextSelector(selector="mj-title", format="skip"),
        PlainTextSelector(selector="mj-preview", format="skip"),
        PlainTextSelector(selector="mj-style", format="skip"),
        PlainTextSelector(selector="mj-font", format="skip"),
        PlainTextSelector(
            selector="mj-table",
            format="dataTable",
            uppercase_header_cells=False,
            trim_empty_lines=True,
        ),
    ],
)
