"""
Unit Tests for Error Types
==========================

Tests for the error taxonomy, cause chaining and error kinds.
"""

import pytest

from mailsmith.core.errors import (
    ErrorKind,
    MailsmithError,
    PreviewError,
    RenderError,
    ValidationError,
)
from mailsmith.models.schemas import ValidationErrorDetail


class TestMailsmithError:
    """Test the base error."""

    def test_error_creation(self):
        """Test creating a base error."""
        error = MailsmithError("Test error")
        assert isinstance(error, Exception)
        assert error.name == "MailsmithError"
        assert error.message == "Test error"
        assert str(error) == "Test error"
        assert error.cause is None
        assert error.kind == ErrorKind.GENERIC
        assert error.component_name is None

    def test_cause_is_chained(self):
        """Test the cause is kept on the error and as __cause__."""
        cause = ValueError("Original error")
        error = MailsmithError("Test error", cause)
        assert error.cause is cause
        assert error.__cause__ is cause

    def test_kind_override(self):
        """Test an explicit kind wins over the class default."""
        error = MailsmithError("Test error", kind=ErrorKind.TRANSFORM)
        assert error.kind == ErrorKind.TRANSFORM


class TestRenderError:
    """Test render errors."""

    def test_render_error_inheritance(self):
        """Test RenderError is a MailsmithError with its own name."""
        error = RenderError("Test error")
        assert isinstance(error, MailsmithError)
        assert error.name == "RenderError"
        assert error.kind == ErrorKind.GENERIC

    def test_render_error_preserves_cause(self):
        """Test cause preservation."""
        cause = RuntimeError("Test cause")
        error = RenderError("Test error", cause)
        assert error.cause is cause


class TestValidationError:
    """Test validation errors."""

    def test_validation_error_inheritance(self):
        """Test ValidationError is a RenderError."""
        error = ValidationError("Test error")
        assert isinstance(error, RenderError)
        assert error.name == "ValidationError"
        assert error.kind == ErrorKind.VALIDATION
        assert error.details == []

    def test_validation_error_details(self):
        """Test details are attached."""
        details = [ValidationErrorDetail(message="Invalid template: x", tag_name="mj-text")]
        error = ValidationError("MJML error", ValueError("Format error"), details=details)
        assert error.details == details
        assert isinstance(error.cause, ValueError)

    def test_structural_validation_error(self):
        """Test a validation error can be tagged structural."""
        error = ValidationError("No markup", kind=ErrorKind.STRUCTURAL)
        assert error.kind == ErrorKind.STRUCTURAL


class TestPreviewError:
    """Test preview errors."""

    def test_preview_error(self):
        """Test PreviewError is a MailsmithError."""
        cause = OSError("Original cause")
        error = PreviewError("Preview failed", cause)
        assert isinstance(error, MailsmithError)
        assert not isinstance(error, RenderError)
        assert error.name == "PreviewError"
        assert error.cause is cause

    def test_errors_can_be_raised_and_caught_as_base(self):
        """Test every error is catchable as MailsmithError."""
        for error_class in (RenderError, ValidationError, PreviewError):
            with pytest.raises(MailsmithError):
                raise error_class("boom")
