"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides test settings, fixture components and render options.
"""

from pathlib import Path
from typing import Generator, List
from unittest.mock import patch

import pytest
from pydantic_settings import SettingsConfigDict

from mailsmith.config.settings import Settings
from mailsmith.models.schemas import EmailComponent, RenderOptions

FIXTURES_DIR = Path(__file__).parent / "fixtures"
TEMPLATES_DIR = FIXTURES_DIR / "templates"
THEMES_DIR = FIXTURES_DIR / "themes"


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    environment: str = "testing"
    debug: bool = True
    log_level: str = "DEBUG"
    template_dirs: List[Path] = [TEMPLATES_DIR]

    model_config = SettingsConfigDict(env_file=".env.test")


@pytest.fixture
def test_settings(tmp_path: Path) -> TestSettings:
    """Test settings fixture with an isolated preview directory."""
    return TestSettings(preview_dir=tmp_path)


@pytest.fixture(autouse=True)
def override_settings(test_settings: TestSettings) -> Generator[TestSettings, None, None]:
    """Override application settings for testing."""
    with patch("mailsmith.config.settings.settings", test_settings):
        yield test_settings


@pytest.fixture
def base_component() -> EmailComponent:
    """Component rendering a heading and a text prop."""
    return EmailComponent(name="BaseEmail", template_name="base.mjml.j2")


@pytest.fixture
def invalid_mjml_component() -> EmailComponent:
    """Component placing mj-text directly inside mj-body."""
    return EmailComponent(name="InvalidMJML", template_name="invalid_mjml.mjml.j2")


@pytest.fixture
def empty_component() -> EmailComponent:
    """Component producing no MJML markup."""
    return EmailComponent(name="Empty", template_name="empty.j2")


@pytest.fixture
def themed_component() -> EmailComponent:
    """Component using the Head component with theme and style props."""
    return EmailComponent(name="ThemedEmail", template_name="head_theme.mjml.j2")


@pytest.fixture
def inline_text_component() -> EmailComponent:
    """Two-column component with inline markup in its text."""
    return EmailComponent(name="InlineText", template_name="inline_text.mjml.j2")


@pytest.fixture
def plain_options() -> RenderOptions:
    """Render options without post-processing."""
    return RenderOptions(plain_text=True, beautify=False, minify=False)


@pytest.fixture
def sample_theme_dict() -> dict:
    """Theme options as a plain mapping."""
    return {
        "fonts": [{"name": "Roboto", "href": "https://fonts.googleapis.com/css2?family=Roboto"}],
        "breakpoint": "480px",
        "styles": {
            "global": {"fontFamily": "Roboto, sans-serif"},
            "components": {"text": {"color": "#333333", "fontSize": "16px"}},
            "custom": [".theme { color: red; }"],
        },
    }
