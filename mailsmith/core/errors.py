"""
Error Types
===========

Error taxonomy shared by every rendering stage.

Each error carries an ``ErrorKind`` tag. Propagation logic branches on the tag,
so a ``ValidationError`` raised for a missing ``<mjml>`` root can still be
reported as a structural problem.
"""

from enum import Enum
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from mailsmith.models.schemas import ValidationErrorDetail


class ErrorKind(str, Enum):
    """Classification of a rendering failure."""

    STRUCTURAL = "structural"
    VALIDATION = "validation"
    TRANSFORM = "transform"
    GENERIC = "generic"


class MailsmithError(Exception):
    """Base error for all mailsmith failures."""

    default_kind = ErrorKind.GENERIC

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        *,
        kind: Optional[ErrorKind] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.kind = kind or self.default_kind
        self.component_name: Optional[str] = None
        # Simplified traceback, only set on flattened presentation errors
        self.stack: Optional[str] = None
        if cause is not None:
            self.__cause__ = cause

    @property
    def name(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        return self.message


class RenderError(MailsmithError):
    """Error during the rendering process."""


class ValidationError(RenderError):
    """Template structure, attributes or style entries were rejected."""

    default_kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        *,
        details: Optional[List["ValidationErrorDetail"]] = None,
        kind: Optional[ErrorKind] = None,
    ) -> None:
        super().__init__(message, cause, kind=kind)
        self.details: List["ValidationErrorDetail"] = list(details or [])


class PreviewError(MailsmithError):
    """Error during preview generation or display."""
