"""
Unit Tests for Email Preview
============================

Tests for the development preview in browser and console mode.
"""

from unittest.mock import AsyncMock, patch

import pytest

from mailsmith.core.errors import MailsmithError, PreviewError, RenderError
from mailsmith.core.preview import cleanup_preview_files, preview_email, write_preview_file
from mailsmith.models.schemas import RenderMeta, RenderResult

from tests.utils.mocks import make_component

RESULT = RenderResult(
    html="<html><body>Preview</body></html>",
    plain_text="Preview",
    meta=RenderMeta(render_time_ms=1.5, size_bytes=33),
)


@pytest.fixture
def development(test_settings):
    """Switch the test settings to development."""
    test_settings.environment = "development"
    return test_settings


class TestPreviewFiles:
    """Test preview file handling."""

    def test_write_preview_file(self, test_settings):
        """Test the file name uses the prefix and a timestamp."""
        path = write_preview_file("<html></html>", test_settings)
        assert path.parent == test_settings.preview_dir
        assert path.name.startswith("email-preview-")
        assert path.suffix == ".html"
        assert path.read_text(encoding="utf-8") == "<html></html>"

    def test_cleanup_removes_only_prefixed_files(self, test_settings):
        """Test cleanup leaves unrelated files alone."""
        (test_settings.preview_dir / "email-preview-1.html").write_text("old")
        (test_settings.preview_dir / "email-preview-2.html").write_text("old")
        (test_settings.preview_dir / "keep.html").write_text("keep")

        assert cleanup_preview_files(test_settings) == 2
        assert [p.name for p in test_settings.preview_dir.iterdir()] == ["keep.html"]


class TestPreviewEmail:
    """Test the preview entry point."""

    @pytest.mark.asyncio
    async def test_requires_development(self):
        """Test preview is refused outside development."""
        with pytest.raises(PreviewError) as exc_info:
            await preview_email(make_component())
        assert "development" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_browser_mode(self, development):
        """Test the HTML is written and opened."""
        stale = development.preview_dir / "email-preview-0.html"
        stale.write_text("stale")

        with patch("mailsmith.core.preview.render_email", AsyncMock(return_value=RESULT)), patch(
            "mailsmith.core.preview.webbrowser.open", return_value=True
        ) as mock_open:
            path = await preview_email(make_component(), {"text": "Hi"})

        assert not stale.exists()
        assert path.read_text(encoding="utf-8") == RESULT.html
        mock_open.assert_called_once_with(path.resolve().as_uri())

    @pytest.mark.asyncio
    async def test_console_mode(self, development):
        """Test console mode logs instead of writing files."""
        with patch("mailsmith.core.preview.render_email", AsyncMock(return_value=RESULT)), patch(
            "mailsmith.core.preview.logger"
        ) as mock_logger:
            path = await preview_email(make_component(), mode="console")

        assert path is None
        assert list(development.preview_dir.iterdir()) == []
        messages = [call.args[0] for call in mock_logger.bind.return_value.info.call_args_list]
        assert messages == ["Email preview HTML", "Email preview plain text", "Email preview stats"]

    @pytest.mark.asyncio
    async def test_render_failure_debug(self, development):
        """Test failures keep their cause in debug mode."""
        failure = RenderError("MJML conversion failed")
        with patch("mailsmith.core.preview.render_email", AsyncMock(side_effect=failure)):
            with pytest.raises(MailsmithError) as exc_info:
                await preview_email(make_component())

        assert str(exc_info.value) == "Email preview failed"
        assert exc_info.value.cause is failure

    @pytest.mark.asyncio
    async def test_render_failure_flattened(self, development):
        """Test failures are flattened outside debug mode."""
        development.debug = False
        failure = RenderError("MJML conversion failed")
        with patch("mailsmith.core.preview.render_email", AsyncMock(side_effect=failure)):
            with pytest.raises(MailsmithError) as exc_info:
                await preview_email(make_component())

        assert str(exc_info.value) == "RenderError: MJML conversion failed"
        assert exc_info.value.cause is None

    @pytest.mark.asyncio
    async def test_browser_unavailable(self, development):
        """Test a browser that cannot be opened is reported."""
        with patch("mailsmith.core.preview.render_email", AsyncMock(return_value=RESULT)), patch(
            "mailsmith.core.preview.webbrowser.open", return_value=False
        ):
            with pytest.raises(MailsmithError) as exc_info:
                await preview_email(make_component())

        assert isinstance(exc_info.value.cause, PreviewError)
