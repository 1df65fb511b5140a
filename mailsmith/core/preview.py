"""
Email Preview
=============

Development helper that renders an email and shows it in the browser or
dumps it to the console.

Preview files are written to the configured preview directory with a fixed
prefix. Earlier preview files are removed on a best-effort basis before a new
one is written, concurrent previews may race on that cleanup.
"""

import time
import webbrowser
from pathlib import Path
from typing import Any, Literal, Mapping, Optional

from mailsmith.config.logging import get_logger
from mailsmith.config.settings import Settings, get_settings
from mailsmith.core.errors import PreviewError
from mailsmith.core.rendering.pipeline import render_email
from mailsmith.models.schemas import EmailComponent, RenderOptions, RenderResult
from mailsmith.utils.error_reporting import handle_error

logger = get_logger(__name__)

PreviewMode = Literal["browser", "console"]


def cleanup_preview_files(settings: Settings) -> int:
    """Remove earlier preview files, returning how many were deleted."""
    removed = 0
    try:
        candidates = list(settings.preview_dir.glob(f"{settings.preview_file_prefix}*"))
    except OSError as e:
        logger.warning("Could not list preview files", directory=str(settings.preview_dir), error=str(e))
        return removed

    for path in candidates:
        try:
            path.unlink()
            removed += 1
        except OSError as e:
            logger.debug("Could not remove preview file", path=str(path), error=str(e))

    return removed


def write_preview_file(html: str, settings: Settings) -> Path:
    """Write the HTML to a new timestamped preview file."""
    timestamp_ms = int(time.time() * 1000)
    path = settings.preview_dir / f"{settings.preview_file_prefix}{timestamp_ms}.html"
    path.write_text(html, encoding="utf-8")
    return path


def open_in_browser(path: Path) -> None:
    """Open a preview file in the default browser."""
    if not webbrowser.open(path.resolve().as_uri()):
        raise PreviewError(f"Could not open a browser for {path}")


def log_to_console(component: EmailComponent, result: RenderResult) -> None:
    """Dump the rendered email and its statistics to the log."""
    log = logger.bind(template=component.name)
    log.info("Email preview HTML", html=result.html)
    log.info("Email preview plain text", plain_text=result.plain_text)
    log.info(
        "Email preview stats",
        render_time_ms=round(result.meta.render_time_ms, 2),
        size_bytes=result.meta.size_bytes,
        size_kb=round(result.meta.size_bytes / 1024, 2),
    )


async def preview_email(
    component: EmailComponent,
    props: Optional[Mapping[str, Any]] = None,
    mode: PreviewMode = "browser",
    options: Optional[RenderOptions] = None,
) -> Optional[Path]:
    """
    Render an email and preview it.

    Args:
        component: Component descriptor
        props: Component properties
        mode: ``browser`` opens a preview file, ``console`` logs the output
        options: Render options

    Returns:
        Path of the preview file in browser mode, otherwise None

    Raises:
        PreviewError: Preview is only available in development
        MailsmithError: Rendering or preview failed (presentation form)
    """
    settings = get_settings()

    if settings.environment != "development":
        raise PreviewError(
            f"Email preview is only available in development (current: {settings.environment})"
        )

    try:
        removed = cleanup_preview_files(settings)
        if removed:
            logger.debug("Removed previous preview files", count=removed)

        result = await render_email(component, props, options)

        if mode == "console":
            log_to_console(component, result)
            return None

        path = write_preview_file(result.html, settings)
        open_in_browser(path)
        logger.info("Email preview opened", template=component.name, path=str(path))
        return path
    except Exception as e:
        handle_error(e, "Email preview failed", component.name, debug=settings.debug)
