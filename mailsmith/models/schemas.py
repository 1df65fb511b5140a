"""
Pydantic Models and Schemas
===========================

Core data models for render options and results, themes, component descriptors
and diagnostic records. All models include validation and type hints.
"""

from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Style-set inputs: a raw attribute string (key="value" ...) or a property mapping
StyleSet = Union[str, Dict[str, Any]]


# Diagnostic Models
class ValidationErrorDetail(BaseModel):
    """One translated validation diagnostic."""

    message: str = Field(..., description="Translated, user-facing message")
    tag_name: Optional[str] = Field(None, description="MJML tag the diagnostic refers to")


class DiagnosticRecord(BaseModel):
    """Result of translating one raw validator line."""

    message: str = Field(..., description="Translated message")
    component_name: Optional[str] = Field(None, description="Friendly component name")
    original_message: str = Field(..., description="Raw validator text")


class FormattedDiagnostic(BaseModel):
    """Translation of a complete (possibly multi-line) validator message."""

    message: str
    original_message: str
    records: List[DiagnosticRecord] = Field(default_factory=list)


# Rendering Models
class MinifyConfig(BaseModel):
    """Options for minifying HTML output."""

    model_config = ConfigDict(frozen=True)

    collapse_whitespace: bool = True
    remove_comments: bool = Field(True, description="Drop comments other than Outlook conditional comments")
    minify_css: bool = Field(True, description="Minify style blocks, only while collapse_whitespace is on")
    remove_empty_attributes: bool = Field(True, description="Drop empty id, class, style, title, lang and dir")


class RenderOptions(BaseModel):
    """Options for rendering an email component."""

    model_config = ConfigDict(frozen=True)

    plain_text: bool = Field(True, description="Derive a plain text rendition")
    beautify: bool = Field(True, description="Pretty-print the HTML output")
    minify: Union[bool, MinifyConfig] = Field(True, description="Minify the HTML output")

    def minify_config(self) -> Optional[MinifyConfig]:
        """Resolve the ``minify`` flag into a config, or None when disabled."""
        if isinstance(self.minify, MinifyConfig):
            return self.minify
        return MinifyConfig() if self.minify else None


class RenderMeta(BaseModel):
    """Metadata about a finished render."""

    render_time_ms: float = Field(..., ge=0, description="Wall-clock render time")
    size_bytes: int = Field(..., ge=0, description="UTF-8 size of the final HTML")


class RenderResult(BaseModel):
    """Email rendering result."""

    html: str = Field(..., description="HTML version of the email")
    plain_text: str = Field("", description="Plain text version of the email")
    meta: RenderMeta


class ConversionResult(BaseModel):
    """Output of the MJML to HTML conversion."""

    html: str


class PlainTextSelector(BaseModel):
    """Formatting rule for one element in the plain text rendition."""

    selector: str
    format: Literal["skip", "dataTable"]
    uppercase_header_cells: bool = True
    trim_empty_lines: bool = False


class PlainTextOptions(BaseModel):
    """Options for generating plain text from rendered markup."""

    model_config = ConfigDict(frozen=True)

    wordwrap: Optional[int] = Field(80, gt=0, description="Maximum line length")
    preserve_newlines: bool = Field(True, description="Keep explicit newlines")
    uppercase_headings: bool = Field(True, description="Upper-case h1-h6 text")
    selectors: List[PlainTextSelector] = Field(default_factory=list)


# Theme Models
class FontSpec(BaseModel):
    """Web font declaration."""

    model_config = ConfigDict(frozen=True)

    name: str
    href: str


class InlineStyle(BaseModel):
    """Custom CSS that should be inlined into the HTML elements."""

    model_config = ConfigDict(frozen=True)

    inline: Literal[True] = True
    css: str


CustomStyle = Union[str, InlineStyle]


class StyleProps(BaseModel):
    """Style configuration for the Head component."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    global_: Optional[StyleSet] = Field(
        None, alias="global", description="Global styles that affect all components"
    )
    components: Optional[Dict[str, StyleSet]] = Field(
        None, description="Component-specific styles"
    )
    custom: Optional[List[CustomStyle]] = Field(None, description="Custom CSS rules")


class ThemeOptions(BaseModel):
    """Reusable theme configuration. Read-only once created."""

    model_config = ConfigDict(frozen=True)

    fonts: Optional[List[FontSpec]] = Field(None, description="Font configurations")
    breakpoint: Optional[str] = Field(None, description="Responsive breakpoint")
    styles: Optional[StyleProps] = Field(None, description="Style configurations")


class ResolvedHead(BaseModel):
    """Fully merged head configuration, ready for markup generation."""

    fonts: List[FontSpec] = Field(default_factory=list)
    breakpoint: Optional[str] = None
    global_styles: Dict[str, str] = Field(default_factory=dict)
    components: Dict[str, Dict[str, str]] = Field(default_factory=dict)
    custom: List[CustomStyle] = Field(default_factory=list)

    @property
    def has_attributes(self) -> bool:
        return bool(self.global_styles or self.components)


# Component Models
class EmailComponent(BaseModel):
    """Descriptor of a renderable email component template."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, description="Declared component name")
    template_name: Optional[str] = Field(None, description="Template looked up by the loader")
    source: Optional[str] = Field(None, description="Inline template source")
    props_model: Optional[Type[BaseModel]] = Field(
        None, description="Model validating the component props"
    )

    @model_validator(mode="after")
    def check_template(self) -> "EmailComponent":
        """Require exactly one template origin."""
        if (self.template_name is None) == (self.source is None):
            raise ValueError("Exactly one of template_name or source must be set")
        return self
