"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

import json
import tempfile
from pathlib import Path
from typing import List, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="mailsmith", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(
        default=False, description="Present errors with their full cause chain"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    # Template Configuration
    template_dirs: List[Path] = Field(
        default_factory=list, description="Extra directories searched for component templates"
    )

    # Conversion Configuration
    mjml_source_name: str = Field(
        default="email.mjml", description="Source label used in MJML diagnostics"
    )
    validation_level: str = Field(
        default="strict", description="MJML validation level: strict, soft, skip"
    )

    # Plain Text Configuration
    plain_text_wordwrap: int = Field(default=80, gt=0, description="Plain text line width")

    # Preview Configuration
    preview_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory used for preview files",
    )
    preview_file_prefix: str = Field(
        default="email-preview-", description="Filename prefix of preview files"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("validation_level")
    @classmethod
    def validate_validation_level(cls, v: str) -> str:
        """Validate MJML validation level."""
        allowed = {"strict", "soft", "skip"}
        if v.lower() not in allowed:
            raise ValueError(f"Validation level must be one of: {allowed}")
        return v.lower()

    @field_validator("template_dirs", mode="before")
    @classmethod
    def parse_template_dirs(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse template directories from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string: ["a", "b"]
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            # Handle comma-separated string: "a,b"
            return [path.strip() for path in v.split(",") if path.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="MAILSMITH_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
