"""
Unit Tests for Configuration
============================

Tests for settings validation and logging configuration.
"""

from pathlib import Path

import pytest
import structlog

from mailsmith.config.logging import (
    QUIET_LOGGERS,
    add_app_context,
    build_processors,
    get_logging_config,
)
from mailsmith.config.settings import Settings, get_settings


class TestSettingsValidation:
    """Test settings parsing and validation."""

    def test_defaults(self):
        """Test default values."""
        settings = Settings(_env_file=None)
        assert settings.mjml_source_name == "email.mjml"
        assert settings.validation_level == "strict"
        assert settings.plain_text_wordwrap == 80
        assert settings.preview_file_prefix == "email-preview-"

    def test_invalid_environment(self):
        """Test unknown environments are rejected."""
        with pytest.raises(ValueError):
            Settings(_env_file=None, environment="staging")

    def test_log_level_normalised(self):
        """Test log levels are upper-cased."""
        assert Settings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_validation_level(self):
        """Test validation levels are checked."""
        assert Settings(_env_file=None, validation_level="SOFT").validation_level == "soft"
        with pytest.raises(ValueError):
            Settings(_env_file=None, validation_level="lenient")

    def test_template_dirs_from_comma_string(self):
        """Test template directories parse from a comma-separated string."""
        settings = Settings(_env_file=None, template_dirs="emails, shared")
        assert settings.template_dirs == [Path("emails"), Path("shared")]

    def test_template_dirs_from_json_string(self):
        """Test template directories parse from a JSON list."""
        settings = Settings(_env_file=None, template_dirs='["a", "b"]')
        assert settings.template_dirs == [Path("a"), Path("b")]

    def test_env_prefix(self, monkeypatch):
        """Test settings read prefixed environment variables."""
        monkeypatch.setenv("MAILSMITH_DEBUG", "true")
        assert Settings(_env_file=None).debug is True

    def test_get_settings_returns_test_settings(self, test_settings):
        """Test the global accessor returns the active settings."""
        assert get_settings() is test_settings


class TestLoggingConfig:
    """Test logging configuration."""

    def test_console_formatter_per_environment(self, test_settings):
        """Test JSON output is used in production only."""
        assert get_logging_config(test_settings)["handlers"]["console"]["formatter"] == "plain"

        test_settings.environment = "production"
        assert get_logging_config(test_settings)["handlers"]["console"]["formatter"] == "json"

    def test_quiet_loggers(self, test_settings):
        """Test third-party loggers are limited to warnings."""
        loggers = get_logging_config(test_settings)["loggers"]
        for name in QUIET_LOGGERS:
            assert loggers[name]["level"] == "WARNING"
        assert loggers["mailsmith"]["level"] == "DEBUG"

    def test_processors_per_environment(self, test_settings):
        """Test the final renderer depends on the environment."""
        assert isinstance(build_processors(test_settings)[-1], structlog.dev.ConsoleRenderer)

        test_settings.environment = "production"
        processors = build_processors(test_settings)
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        assert add_app_context in processors

    def test_add_app_context(self):
        """Test app name and environment are added to events."""
        event = add_app_context(None, "info", {"event": "rendered"})
        assert event["app"] == "mailsmith"
        assert event["environment"] == "testing"
