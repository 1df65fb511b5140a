"""
MJML Converter
==============

Convert extracted MJML markup into email-safe HTML.

``MJMLConverter`` is the conversion collaborator: it validates the markup at
the configured level and delegates the conversion to the ``mjml`` package.
``convert_mjml_to_html`` is the adapter used by the pipeline; it maps
collaborator failures onto the mailsmith error taxonomy.
"""

import re
from abc import ABC, abstractmethod
from io import StringIO
from typing import Any, List, Optional, Set

from mjml import mjml_to_html  # type: ignore[import-untyped]

from mailsmith.config.logging import get_logger
from mailsmith.config.settings import get_settings
from mailsmith.core.defaults import DEFAULT_MJML_OPTIONS
from mailsmith.core.diagnostics.translator import is_malformed_document, translate_diagnostic
from mailsmith.core.errors import ErrorKind, RenderError, ValidationError
from mailsmith.core.mjml.validator import MJMLValidationException, MJMLValidator
from mailsmith.models.schemas import ConversionResult, ValidationErrorDetail

logger = get_logger(__name__)

GENERIC_VALIDATION_MESSAGE = "Template has validation errors"

# Fonts the mjml package registers itself; it rejects a second mj-font for them
BUILTIN_FONTS = frozenset({"Open Sans", "Droid Sans", "Lato", "Roboto", "Ubuntu"})

MJ_FONT_REGEX = re.compile(r"<mj-font\b[^>]*?(?:/>|>\s*</mj-font\s*>)")
FONT_NAME_REGEX = re.compile(r'\bname="([^"]*)"')


class BaseMJMLConverter(ABC):
    """Abstract base class for MJML converters."""

    @abstractmethod
    def convert(self, markup: str, validation_level: Optional[str] = None, **options: Any) -> ConversionResult:
        """Convert MJML markup to HTML."""
        pass


class MJMLConverter(BaseMJMLConverter):
    """Validating converter backed by the ``mjml`` package."""

    def __init__(self, source_name: Optional[str] = None) -> None:
        self.settings = get_settings()
        self.logger: Any = logger.bind(component="mjml_converter")
        self.validator = MJMLValidator(source_name or self.settings.mjml_source_name)

    def convert(self, markup: str, validation_level: Optional[str] = None, **options: Any) -> ConversionResult:
        """
        Validate and convert MJML markup.

        Args:
            markup: MJML document
            validation_level: ``strict`` raises on findings, ``soft`` logs them,
                ``skip`` does not validate. Defaults to the configured level.

        Returns:
            Conversion result with the generated HTML

        Raises:
            MJMLValidationException: Strict validation found problems
            MalformedMJMLError: The document has no <mjml> root
        """
        level = validation_level or self.settings.validation_level
        if level != "skip":
            diagnostics = self.validator.validate(markup)
            if diagnostics and level == "strict":
                raise MJMLValidationException(diagnostics)
            for diagnostic in diagnostics:
                self.logger.warning("MJML validation warning", diagnostic=diagnostic.formatted_message)

        result = mjml_to_html(StringIO(self.drop_registered_fonts(markup)))
        return ConversionResult(html=result.html)

    def drop_registered_fonts(self, markup: str) -> str:
        """Remove mj-font elements for built-in fonts and repeated font names."""
        seen: Set[str] = set()

        def replace(match: "re.Match[str]") -> str:
            name_match = FONT_NAME_REGEX.search(match.group(0))
            if name_match is None:
                return match.group(0)

            name = name_match.group(1)
            if name in BUILTIN_FONTS or name in seen:
                self.logger.debug("Skipping already registered font", font=name)
                return ""

            seen.add(name)
            return match.group(0)

        return MJ_FONT_REGEX.sub(replace, markup)


def _diagnostic_field(error: Any, *names: str) -> Optional[str]:
    for name in names:
        value = error.get(name) if isinstance(error, dict) else getattr(error, name, None)
        if value:
            return str(value)
    return None


def translate_conversion_errors(errors: List[Any]) -> List[ValidationErrorDetail]:
    """Translate structured converter diagnostics into error details."""
    details: List[ValidationErrorDetail] = []
    for error in errors:
        raw = _diagnostic_field(error, "formatted_message", "formattedMessage", "message") or str(error)
        record = translate_diagnostic(raw)
        details.append(
            ValidationErrorDetail(
                message=record.message,
                tag_name=_diagnostic_field(error, "tag_name", "tagName"),
            )
        )
    return details


async def convert_mjml_to_html(
    markup: str, converter: Optional[BaseMJMLConverter] = None
) -> ConversionResult:
    """
    Convert MJML markup to HTML with strict validation.

    Args:
        markup: Extracted MJML fragment
        converter: Conversion collaborator, defaults to ``MJMLConverter``

    Returns:
        Conversion result

    Raises:
        ValidationError: The converter reported structured diagnostics
        RenderError: Any other conversion failure
    """
    converter = converter or MJMLConverter()

    try:
        return converter.convert(markup, **DEFAULT_MJML_OPTIONS)
    except Exception as e:
        errors = getattr(e, "errors", None)
        if isinstance(errors, (list, tuple)):
            details = translate_conversion_errors(list(errors))
            message = details[0].message if details else GENERIC_VALIDATION_MESSAGE
            logger.warning("MJML validation failed", errors=len(details))
            raise ValidationError(message, e, details=details)

        kind = ErrorKind.STRUCTURAL if is_malformed_document(str(e)) else ErrorKind.GENERIC
        logger.error("MJML conversion failed", error=str(e), kind=kind.value)
        raise RenderError("MJML conversion failed", e, kind=kind)
