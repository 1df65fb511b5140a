"""
MJML Validator
==============

Structural validation of MJML documents before conversion.

Checks the element registry, parent/child rules and per-tag attribute schemas
(Cerberus) and reports problems in MJML's own diagnostic format::

    Line 5 of email.mjml (mj-text) — Attributes color:, "#333" are illegal
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup, Tag
from cerberus import Validator  # type: ignore[import-untyped]

from mailsmith.config.logging import get_logger

logger = get_logger(__name__)

MALFORMED_MESSAGE = "Malformed MJML. Check that your structure is correct and enclosed in <mjml> tags."

# Attribute value patterns (Cerberus anchors regexes at both ends)
COLOR = r"(#[0-9a-fA-F]{3}|#[0-9a-fA-F]{6}|#[0-9a-fA-F]{8}|rgba?\([\d\s.,%]+\)|[a-zA-Z]+)"
LENGTH = r"-?\d+(\.\d+)?(px|%)?"
LENGTHS = rf"{LENGTH}(\s+{LENGTH}){{0,3}}"
PIXELS = r"\d+(\.\d+)?px"
LINE_HEIGHT = r"(\d+(\.\d+)?(px|%|em)?|normal)"
LETTER_SPACING = r"(-?\d+(\.\d+)?(px|em)|normal)"

VALUE_RULES: Dict[str, Dict[str, Any]] = {
    "string": {"type": "string"},
    "color": {"type": "string", "regex": COLOR},
    "length": {"type": "string", "regex": LENGTH},
    "lengths": {"type": "string", "regex": LENGTHS},
    "pixels": {"type": "string", "regex": PIXELS},
    "line-height": {"type": "string", "regex": LINE_HEIGHT},
    "letter-spacing": {"type": "string", "regex": LETTER_SPACING},
    "align": {"type": "string", "allowed": ["left", "right", "center", "justify"]},
    "vertical-align": {"type": "string", "allowed": ["top", "bottom", "middle"]},
    "direction": {"type": "string", "allowed": ["ltr", "rtl"]},
    "boolean": {"type": "string", "allowed": ["true", "false"]},
}

BASE_ATTRIBUTES = {"css-class": "string", "mj-class": "string"}
PADDING = {
    "padding": "lengths",
    "padding-top": "length",
    "padding-right": "length",
    "padding-bottom": "length",
    "padding-left": "length",
}
FONT = {
    "color": "color",
    "font-family": "string",
    "font-size": "pixels",
    "font-style": "string",
    "font-weight": "string",
    "line-height": "line-height",
    "letter-spacing": "letter-spacing",
    "text-decoration": "string",
    "text-transform": "string",
}
LINK = {"href": "string", "target": "string", "rel": "string", "title": "string"}
BACKGROUND = {
    "background-color": "color",
    "background-url": "string",
    "background-repeat": "string",
    "background-size": "string",
    "background-position": "string",
}
BLOCK = {"container-background-color": "color", "align": "align", **PADDING}

ELEMENT_ATTRIBUTES: Dict[str, Dict[str, str]] = {
    "mjml": {"lang": "string", "dir": "string", "owa": "string"},
    "mj-head": {},
    "mj-title": {},
    "mj-preview": {},
    "mj-font": {"name": "string", "href": "string"},
    "mj-breakpoint": {"width": "pixels"},
    "mj-style": {"inline": "string"},
    "mj-attributes": {},
    "mj-body": {"width": "pixels", "background-color": "color"},
    "mj-wrapper": {
        **BACKGROUND,
        **PADDING,
        "border": "string",
        "border-radius": "string",
        "full-width": "string",
        "text-align": "align",
    },
    "mj-section": {
        **BACKGROUND,
        **PADDING,
        "border": "string",
        "border-radius": "string",
        "direction": "direction",
        "full-width": "string",
        "text-align": "align",
    },
    "mj-group": {
        "width": "length",
        "vertical-align": "vertical-align",
        "background-color": "color",
        "direction": "direction",
    },
    "mj-column": {
        **PADDING,
        "width": "length",
        "vertical-align": "vertical-align",
        "background-color": "color",
        "inner-background-color": "color",
        "border": "string",
        "border-radius": "string",
    },
    "mj-hero": {
        **PADDING,
        "mode": "string",
        "height": "length",
        "width": "length",
        "background-url": "string",
        "background-width": "length",
        "background-height": "length",
        "background-color": "color",
        "vertical-align": "vertical-align",
    },
    "mj-text": {**BLOCK, **FONT, "height": "length"},
    "mj-button": {
        **BLOCK,
        **FONT,
        **LINK,
        "background-color": "color",
        "border": "string",
        "border-radius": "string",
        "inner-padding": "lengths",
        "vertical-align": "vertical-align",
        "width": "length",
        "height": "length",
        "name": "string",
    },
    "mj-image": {
        **BLOCK,
        **LINK,
        "src": "string",
        "srcset": "string",
        "sizes": "string",
        "alt": "string",
        "width": "length",
        "height": "string",
        "border": "string",
        "border-radius": "string",
        "fluid-on-mobile": "boolean",
    },
    "mj-divider": {
        **BLOCK,
        "border-color": "color",
        "border-style": "string",
        "border-width": "pixels",
        "width": "length",
    },
    "mj-spacer": {**PADDING, "container-background-color": "color", "height": "length"},
    "mj-table": {
        **BLOCK,
        **FONT,
        "border": "string",
        "cellpadding": "string",
        "cellspacing": "string",
        "table-layout": "string",
        "width": "length",
        "role": "string",
    },
    "mj-social": {
        **BLOCK,
        **FONT,
        "border-radius": "string",
        "icon-size": "length",
        "icon-height": "length",
        "icon-padding": "lengths",
        "inner-padding": "lengths",
        "mode": "string",
    },
    "mj-social-element": {
        **PADDING,
        **FONT,
        **LINK,
        "name": "string",
        "src": "string",
        "srcset": "string",
        "sizes": "string",
        "alt": "string",
        "align": "align",
        "background-color": "color",
        "border-radius": "string",
        "icon-size": "length",
        "icon-position": "string",
        "icon-padding": "lengths",
    },
    "mj-raw": {"position": "string"},
}

BODY_CONTENT_PARENTS = ["mj-column", "mj-hero"]

ALLOWED_PARENTS: Dict[str, List[str]] = {
    "mj-head": ["mjml"],
    "mj-body": ["mjml"],
    "mj-title": ["mj-head"],
    "mj-preview": ["mj-head"],
    "mj-font": ["mj-head"],
    "mj-breakpoint": ["mj-head"],
    "mj-style": ["mj-head"],
    "mj-attributes": ["mj-head"],
    "mj-wrapper": ["mj-body"],
    "mj-section": ["mj-body", "mj-wrapper"],
    "mj-hero": ["mj-body", "mj-wrapper"],
    "mj-group": ["mj-section"],
    "mj-column": ["mj-section", "mj-group"],
    "mj-text": BODY_CONTENT_PARENTS,
    "mj-button": BODY_CONTENT_PARENTS,
    "mj-image": BODY_CONTENT_PARENTS,
    "mj-divider": BODY_CONTENT_PARENTS,
    "mj-spacer": BODY_CONTENT_PARENTS,
    "mj-table": BODY_CONTENT_PARENTS,
    "mj-social": BODY_CONTENT_PARENTS,
    "mj-social-element": ["mj-social"],
    "mj-raw": ["mj-head", "mj-body", "mj-wrapper", "mj-section", "mj-group", "mj-column", "mj-hero"],
}

# Elements whose content is HTML and is not validated as MJML
ENDING_TAGS = {
    "mj-title",
    "mj-preview",
    "mj-style",
    "mj-text",
    "mj-button",
    "mj-table",
    "mj-raw",
    "mj-social-element",
}

# Extra children accepted inside mj-attributes
ATTRIBUTE_DEFAULT_TAGS = {"mj-all", "mj-class"}


class MalformedMJMLError(ValueError):
    """The document is not a single <mjml> root element."""


@dataclass(frozen=True)
class MJMLDiagnostic:
    """One validator finding."""

    line: int
    message: str
    tag_name: str
    formatted_message: str


class MJMLValidationException(Exception):
    """Strict validation failed; ``errors`` lists every finding."""

    def __init__(self, errors: List[MJMLDiagnostic]) -> None:
        self.errors = errors
        lines = "\n".join(error.formatted_message for error in errors)
        super().__init__(f"ValidationError:\n{lines}")


def _build_schema(attributes: Dict[str, str]) -> Dict[str, Dict[str, Any]]:
    schema = {name: dict(VALUE_RULES[kind]) for name, kind in BASE_ATTRIBUTES.items()}
    schema.update({name: dict(VALUE_RULES[kind]) for name, kind in attributes.items()})
    return schema


class MJMLValidator:
    """Validate MJML structure, nesting and attributes."""

    def __init__(self, source_name: str = "email.mjml") -> None:
        self.source_name = source_name
        self.logger: Any = logger.bind(component="mjml_validator")
        self.schemas = {tag: _build_schema(attrs) for tag, attrs in ELEMENT_ATTRIBUTES.items()}

    def validate(self, markup: str) -> List[MJMLDiagnostic]:
        """
        Validate an MJML document.

        Args:
            markup: MJML source

        Returns:
            Diagnostics in document order, empty when the document is valid

        Raises:
            MalformedMJMLError: If the document has no single <mjml> root
        """
        soup = BeautifulSoup(markup, "html.parser")
        roots = [child for child in soup.children if isinstance(child, Tag)]
        if len(roots) != 1 or roots[0].name != "mjml":
            raise MalformedMJMLError(MALFORMED_MESSAGE)

        diagnostics: List[MJMLDiagnostic] = []
        self._validate_element(roots[0], None, diagnostics)

        self.logger.debug("MJML validated", errors=len(diagnostics))
        return diagnostics

    def _validate_element(
        self, element: Tag, parent: Optional[Tag], diagnostics: List[MJMLDiagnostic]
    ) -> None:
        name = element.name

        if name not in self.schemas:
            self._report(
                diagnostics, element, f"Element {name} doesn't exist or is not registered"
            )
            return

        allowed_parents = ALLOWED_PARENTS.get(name)
        if parent is not None and allowed_parents and parent.name not in allowed_parents:
            self._report(
                diagnostics,
                element,
                f"{name} cannot be used inside {parent.name}, only inside: "
                f"{', '.join(allowed_parents)}",
            )

        self._validate_attributes(element, diagnostics)

        if name in ENDING_TAGS:
            return

        for child in element.children:
            if not isinstance(child, Tag):
                continue
            if name == "mj-attributes":
                if child.name not in self.schemas and child.name not in ATTRIBUTE_DEFAULT_TAGS:
                    self._report(
                        diagnostics,
                        child,
                        f"Element {child.name} doesn't exist or is not registered",
                    )
                continue
            self._validate_element(child, element, diagnostics)

    def _validate_attributes(self, element: Tag, diagnostics: List[MJMLDiagnostic]) -> None:
        attributes = {
            key: " ".join(value) if isinstance(value, list) else value
            for key, value in element.attrs.items()
        }
        if not attributes:
            return

        validator = Validator(self.schemas[element.name])  # type: ignore[misc]
        if validator.validate(attributes):  # type: ignore[misc]
            return

        illegal: List[str] = []
        for field, messages in validator.errors.items():  # type: ignore[misc]
            if "unknown field" in messages:
                illegal.extend([f"{field}:", f'"{attributes[field]}"'])
            else:
                kind = ELEMENT_ATTRIBUTES[element.name].get(field) or BASE_ATTRIBUTES.get(field)
                self._report(
                    diagnostics,
                    element,
                    f"Attribute {field} has invalid value: {attributes[field]} for type {kind}",
                )

        if illegal:
            self._report(diagnostics, element, f"Attributes {', '.join(illegal)} are illegal")

    def _report(self, diagnostics: List[MJMLDiagnostic], element: Tag, message: str) -> None:
        line = element.sourceline or 1
        diagnostics.append(
            MJMLDiagnostic(
                line=line,
                message=message,
                tag_name=element.name,
                formatted_message=f"Line {line} of {self.source_name} ({element.name}) — {message}",
            )
        )
