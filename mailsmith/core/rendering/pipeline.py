"""
Email Render Pipeline
=====================

Orchestrates the full rendering flow for one email component:

    render component -> extract MJML -> convert -> post-process
                     \\-> plain text (when requested)

The HTML branch and the plain text branch are awaited together. Any stage
failure aborts the whole call, no partial result is ever returned.
"""

import asyncio
import time
from typing import Any, Mapping, Optional

from mailsmith.config.logging import get_logger
from mailsmith.config.settings import Settings, get_settings
from mailsmith.core.defaults import DEFAULT_PLAIN_TEXT_OPTIONS, DEFAULT_RENDER_OPTIONS
from mailsmith.core.errors import ErrorKind, MailsmithError, RenderError
from mailsmith.core.rendering.component_renderer import (
    BaseComponentRenderer,
    Jinja2ComponentRenderer,
)
from mailsmith.core.rendering.converter import BaseMJMLConverter, convert_mjml_to_html
from mailsmith.core.rendering.extractor import extract_mjml_markup
from mailsmith.core.rendering.plain_text import render_plain_text
from mailsmith.core.rendering.post_processor import post_process_html
from mailsmith.models.schemas import EmailComponent, RenderMeta, RenderOptions, RenderResult
from mailsmith.utils.error_reporting import log_error

logger = get_logger(__name__)

FALLBACK_COMPONENT_NAME = "the email template"


class EmailRenderPipeline:
    """Render email components into HTML and plain text."""

    def __init__(
        self,
        renderer: Optional[BaseComponentRenderer] = None,
        converter: Optional[BaseMJMLConverter] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.renderer = renderer or Jinja2ComponentRenderer()
        self.converter = converter
        self.logger: Any = logger.bind(component="render_pipeline")
        self.plain_text_options = DEFAULT_PLAIN_TEXT_OPTIONS.model_copy(
            update={"wordwrap": self.settings.plain_text_wordwrap}
        )

    def render_raw(self, component: EmailComponent, props: Mapping[str, Any]) -> str:
        """Render the component to its raw markup string."""
        return self.renderer(component, props)

    async def render(
        self,
        component: EmailComponent,
        props: Optional[Mapping[str, Any]] = None,
        options: Optional[RenderOptions] = None,
    ) -> RenderResult:
        """
        Render an email component.

        Args:
            component: Component descriptor
            props: Component properties
            options: Render options, defaults to ``DEFAULT_RENDER_OPTIONS``

        Returns:
            Render result with HTML, plain text and metadata

        Raises:
            ValidationError: The template or its styles were rejected
            RenderError: Rendering, conversion or a transform failed
        """
        options = options or DEFAULT_RENDER_OPTIONS
        start_time = time.perf_counter()

        self.logger.info(
            "Starting email render",
            template=component.name,
            plain_text=options.plain_text,
            beautify=options.beautify,
            minify=options.minify is not False,
        )

        try:
            raw = self.render_raw(component, props or {})
            outcomes = await asyncio.gather(
                self._render_html(raw, options),
                self._render_plain_text(raw, options),
                return_exceptions=True,
            )
            # Both branches are awaited to completion; the HTML branch's error wins
            for outcome in outcomes:
                if isinstance(outcome, BaseException):
                    raise outcome
            html, plain_text = outcomes
        except Exception as e:
            raise self._handle_failure(e, component)

        meta = RenderMeta(
            render_time_ms=(time.perf_counter() - start_time) * 1000,
            size_bytes=len(html.encode("utf-8")),
        )

        self.logger.info(
            "Email render completed",
            template=component.name,
            render_time_ms=round(meta.render_time_ms, 2),
            size_bytes=meta.size_bytes,
        )

        return RenderResult(html=html, plain_text=plain_text, meta=meta)

    async def _render_html(self, raw: str, options: RenderOptions) -> str:
        markup = extract_mjml_markup(raw)
        converted = await convert_mjml_to_html(markup, self.converter)
        return await post_process_html(converted.html, options)

    async def _render_plain_text(self, raw: str, options: RenderOptions) -> str:
        if not options.plain_text:
            return ""
        return render_plain_text(raw, self.plain_text_options)

    def _handle_failure(self, error: Exception, component: EmailComponent) -> MailsmithError:
        """Attribute the failure to the component and log it."""
        component_name = component.name or FALLBACK_COMPONENT_NAME

        if isinstance(error, MailsmithError):
            failure = error
        else:
            failure = RenderError("Email template rendering failed", error, kind=ErrorKind.GENERIC)

        if failure.component_name is None:
            failure.component_name = component_name

        log_error(failure, component_name, "Email rendering failed")
        return failure


async def render_email(
    component: EmailComponent,
    props: Optional[Mapping[str, Any]] = None,
    options: Optional[RenderOptions] = None,
    *,
    renderer: Optional[BaseComponentRenderer] = None,
    converter: Optional[BaseMJMLConverter] = None,
) -> RenderResult:
    """
    Render an email component to HTML and plain text.

    Args:
        component: Component descriptor
        props: Component properties
        options: Render options
        renderer: Component renderer override
        converter: MJML converter override

    Returns:
        Render result
    """
    pipeline = EmailRenderPipeline(renderer=renderer, converter=converter)
    return await pipeline.render(component, props, options)
