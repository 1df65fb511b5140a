"""
Diagnostic Translator
=====================

Turn raw MJML validator output into component-scoped, user-facing messages.

Rules are evaluated in a fixed priority order; the first matching rule wins and
an unmatched line always falls through to a generic message.
"""

import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from mailsmith.models.schemas import DiagnosticRecord, FormattedDiagnostic

MESSAGE_PREFIX = "Invalid template"

# MJML tags and the public component names they are authored with
COMPONENT_MAP = {
    "mjml": "Html",
    "mj-head": "Head",
    "mj-body": "Body",
    "mj-wrapper": "Container",
    "mj-section": "Section",
    "mj-group": "Section.Group",
    "mj-column": "Column",
    "mj-divider": "Column.Divider",
    "mj-spacer": "Column.Spacer",
    "mj-text": "Text",
    "mj-button": "Button",
    "mj-image": "Image",
    "mj-table": "Table",
    "mj-social": "Social",
    "mj-social-element": "Social.Element",
    "mj-raw": "Raw",
}

ROOT_COMPONENT = COMPONENT_MAP["mjml"]

ATTRIBUTES_PATTERN = re.compile(
    r"Line \d+ of [^\s]+ \((mj-[a-z-]+)\) — Attributes (.*) are illegal"
)
NESTING_PATTERN = re.compile(
    r"Line \d+ of [^\s]+ \((mj-[a-z-]+)\) — [^\s]+ cannot be used inside ([^,]+), only inside: ([^\"]+)"
)
UNKNOWN_ELEMENT_PATTERN = re.compile(
    r"Line \d+ of [^\s]+ \(([^)]+)\) — Element [^\s]+ doesn't exist or is not registered"
)
MALFORMED_PATTERN = re.compile(
    r"Malformed MJML\. Check that your structure is correct and enclosed in <mjml> tags\."
)

Formatter = Callable[[re.Match[str]], Tuple[str, Optional[str]]]


@dataclass(frozen=True)
class DiagnosticRule:
    """A named pattern and the formatter applied to its match."""

    name: str
    pattern: re.Pattern[str]
    formatter: Formatter


def friendly_name(tag: str) -> str:
    """Map an MJML tag to its component name, leaving unknown tags unchanged."""
    return COMPONENT_MAP.get(tag.strip(), tag.strip())


def extract_attribute_names(attributes_list: str) -> List[str]:
    """
    Extract attribute names from an MJML attribute list.

    The list alternates names and quoted values (``color:, "#333", font-size:, "16px"``),
    so names sit at the even positions.
    """
    names: List[str] = []
    tokens = attributes_list.split(",")
    for token in tokens[::2]:
        name = re.sub(r":$", "", token.strip())
        if name:
            names.append(name)
    return names


def _format_attributes(match: re.Match[str]) -> Tuple[str, Optional[str]]:
    component = friendly_name(match.group(1))
    attributes = ", ".join(extract_attribute_names(match.group(2)))
    return f"{MESSAGE_PREFIX}: Illegal Attributes for <{component}>: {attributes}", component


def _format_nesting(match: re.Match[str]) -> Tuple[str, Optional[str]]:
    component = friendly_name(match.group(1))
    parent = friendly_name(match.group(2))
    return f"{MESSAGE_PREFIX}: <{component}> cannot be used inside <{parent}>", component


def _format_unknown_element(match: re.Match[str]) -> Tuple[str, Optional[str]]:
    element = match.group(1)
    return f"{MESSAGE_PREFIX}: Element {element} doesn't exist or is not registered", None


def _format_malformed(match: re.Match[str]) -> Tuple[str, Optional[str]]:
    return (
        f"{MESSAGE_PREFIX}: Check that your structure is correct and enclosed "
        f"in <{ROOT_COMPONENT}> tags",
        ROOT_COMPONENT,
    )


DIAGNOSTIC_RULES: List[DiagnosticRule] = [
    DiagnosticRule("illegal_attributes", ATTRIBUTES_PATTERN, _format_attributes),
    DiagnosticRule("illegal_nesting", NESTING_PATTERN, _format_nesting),
    DiagnosticRule("unknown_element", UNKNOWN_ELEMENT_PATTERN, _format_unknown_element),
    DiagnosticRule("malformed", MALFORMED_PATTERN, _format_malformed),
]


def match_rule(line: str) -> Optional[Tuple[DiagnosticRule, re.Match[str]]]:
    """Return the first rule matching the line, if any."""
    for rule in DIAGNOSTIC_RULES:
        match = rule.pattern.search(line)
        if match:
            return rule, match
    return None


def translate_diagnostic(line: str) -> DiagnosticRecord:
    """Translate a single validator line."""
    original = line.strip()
    matched = match_rule(original)

    if matched is None:
        tail = original.split("—")[-1].strip() or original
        return DiagnosticRecord(
            message=f"{MESSAGE_PREFIX}: Unrecognized MJML validation error: {tail}",
            component_name=None,
            original_message=original,
        )

    rule, match = matched
    message, component = rule.formatter(match)
    return DiagnosticRecord(
        message=message, component_name=component, original_message=match.group(0)
    )


def is_malformed_document(message: str) -> bool:
    """Whether the text is the validator's missing-root diagnostic."""
    return MALFORMED_PATTERN.search(message) is not None


def format_mjml_error(original_error: str) -> FormattedDiagnostic:
    """
    Format an MJML validation error into a user-friendly message.

    Handles both single and multi-line messages. In multi-line input every line
    starting with ``Line`` is translated on its own; the first other line (such
    as an exception name) is kept verbatim as a heading.

    Args:
        original_error: Raw validator message

    Returns:
        The formatted message, the original text and the per-line records
    """
    original_message = original_error.strip()

    if "\n" in original_message:
        lines = [line.strip() for line in original_message.split("\n")]
        lines = [line for line in lines if line]
        error_lines = [line for line in lines if line.startswith("Line")]

        if error_lines:
            other_lines = [line for line in lines if not line.startswith("Line")]
            records = [translate_diagnostic(line) for line in error_lines]
            message = "\n".join(record.message for record in records)
            if other_lines:
                message = f"{other_lines[0]}\n{message}"
            return FormattedDiagnostic(
                message=message, original_message=original_message, records=records
            )

    record = translate_diagnostic(original_message)
    return FormattedDiagnostic(
        message=record.message, original_message=original_message, records=[record]
    )
