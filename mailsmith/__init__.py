"""
mailsmith
=========

Render email components (Jinja2 templates built from MJML components) into
validated MJML, email-safe HTML and a plain text rendition, with
component-scoped error diagnostics.

This package provides:
- A render pipeline with extraction, conversion, post-processing and plain text
- Theme creation and head style merging
- Translation of MJML validator output into readable messages
- A development preview in the browser or console
"""

from mailsmith.core.errors import (
    ErrorKind,
    MailsmithError,
    PreviewError,
    RenderError,
    ValidationError,
)
from mailsmith.core.preview import preview_email
from mailsmith.core.rendering.component_renderer import render_component
from mailsmith.core.rendering.converter import convert_mjml_to_html
from mailsmith.core.rendering.extractor import extract_mjml_markup
from mailsmith.core.rendering.pipeline import EmailRenderPipeline, render_email
from mailsmith.core.theme.theme import create_theme, load_theme
from mailsmith.models.schemas import (
    EmailComponent,
    MinifyConfig,
    RenderOptions,
    RenderResult,
    ThemeOptions,
)

__version__ = "1.0.0"
__author__ = "mailsmith Team"

__all__ = [
    "EmailComponent",
    "EmailRenderPipeline",
    "ErrorKind",
    "MailsmithError",
    "MinifyConfig",
    "PreviewError",
    "RenderError",
    "RenderOptions",
    "RenderResult",
    "ThemeOptions",
    "ValidationError",
    "convert_mjml_to_html",
    "create_theme",
    "extract_mjml_markup",
    "load_theme",
    "preview_email",
    "render_component",
    "render_email",
]
