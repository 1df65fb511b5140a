"""
Theme API
=========

Create reusable theme configurations for email templates.
"""

import json
from pathlib import Path
from typing import Any, Mapping, Union

import yaml  # type: ignore[import-untyped]

from mailsmith.config.logging import get_logger
from mailsmith.core.errors import ValidationError
from mailsmith.models.schemas import ThemeOptions

logger = get_logger(__name__)


def create_theme(options: Union[ThemeOptions, Mapping[str, Any]]) -> ThemeOptions:
    """
    Create a reusable theme configuration.

    No style validation happens here. The Head component validates the styles
    after merging them with its own props.

    Example::

        theme = create_theme({
            "fonts": [{"name": "Roboto", "href": "https://fonts.googleapis.com/css2?family=Roboto"}],
            "breakpoint": "480px",
            "styles": {
                "global": {"fontFamily": "Roboto, sans-serif"},
                "components": {"text": 'color="#333333" font-size="16px"'},
                "custom": [".custom-class { color: red; }", {"inline": True, "css": "p { margin: 0; }"}],
            },
        })
    """
    if isinstance(options, ThemeOptions):
        return ThemeOptions(fonts=options.fonts, breakpoint=options.breakpoint, styles=options.styles)
    return ThemeOptions.model_validate(dict(options))


def load_theme(path: Union[str, Path]) -> ThemeOptions:
    """
    Load a theme from a JSON or YAML file.

    Args:
        path: Theme file, ``.json`` or ``.yaml``/``.yml``

    Returns:
        Theme configuration

    Raises:
        ValidationError: If the file cannot be parsed into theme options
    """
    theme_path = Path(path)
    try:
        content = theme_path.read_text(encoding="utf-8")
        if theme_path.suffix.lower() == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValidationError(f"Theme file could not be read: {theme_path}", e)

    if not isinstance(data, dict):
        raise ValidationError(f"Theme file must contain a mapping: {theme_path}")

    try:
        theme = create_theme(data)
    except ValueError as e:
        raise ValidationError(f"Theme file has invalid options: {theme_path}", e)

    logger.info("Loaded theme", path=str(theme_path))
    return theme
