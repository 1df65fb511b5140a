"""
Plain Text Renderer
===================

Derive the plain text rendition of an email from the raw rendered markup.

The raw markup is used instead of the converted HTML so the text follows the
authored structure: presentation-only elements are skipped and ``mj-table``
becomes a padded data table.
"""

import re
import textwrap
from typing import Any, List, Optional, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from mailsmith.config.logging import get_logger
from mailsmith.core.defaults import DEFAULT_PLAIN_TEXT_OPTIONS
from mailsmith.core.errors import ErrorKind, RenderError
from mailsmith.models.schemas import PlainTextOptions, PlainTextSelector

logger = get_logger(__name__)

WHITESPACE_REGEX = re.compile(r"\s+")
EXCESS_NEWLINES_REGEX = re.compile(r"\n{3,}")

HEADING_TAGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
ALWAYS_SKIPPED = {"script", "style", "head"}
COLUMN_SEPARATOR = "   "

BLOCK_TAGS = {
    "address",
    "article",
    "blockquote",
    "div",
    "footer",
    "header",
    "hr",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "tr",
    "ul",
    "mjml",
    "mj-body",
    "mj-column",
    "mj-group",
    "mj-head",
    "mj-hero",
    "mj-raw",
    "mj-section",
    "mj-social",
    "mj-text",
    "mj-wrapper",
}


class PlainTextRenderer:
    """Walk a markup tree and collect wrapped text blocks."""

    def __init__(self, options: PlainTextOptions = DEFAULT_PLAIN_TEXT_OPTIONS) -> None:
        self.options = options
        self.skip_selectors = [rule.selector for rule in options.selectors if rule.format == "skip"]
        self.table_rules = [rule for rule in options.selectors if rule.format == "dataTable"]
        self.logger: Any = logger.bind(component="plain_text")

    def render(self, raw: str) -> str:
        """
        Convert raw markup into plain text.

        Args:
            raw: Raw rendered markup

        Returns:
            Plain text rendition
        """
        soup = BeautifulSoup(raw, "html.parser")
        for selector in self.skip_selectors:
            for element in soup.select(selector):
                element.decompose()

        self._blocks: List[Tuple[str, bool]] = []
        self._inline: List[str] = []
        self._walk(soup)
        self._flush()

        text = ""
        previous_tight = False
        for block, tight in self._blocks:
            if text:
                text += "\n" if tight and previous_tight else "\n\n"
            text += block
            previous_tight = tight

        return EXCESS_NEWLINES_REGEX.sub("\n\n", text).strip("\n")

    def _walk(self, node: Any) -> None:
        for child in list(node.children):
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                self._inline.append(self._normalize(str(child)))
            elif isinstance(child, Tag):
                self._handle_tag(child)

    def _handle_tag(self, tag: Tag) -> None:
        name = tag.name

        if name in ALWAYS_SKIPPED:
            return

        table_rule = self._table_rule(tag)
        if table_rule is not None:
            self._flush()
            table = self._format_table(tag, table_rule)
            if table:
                self._blocks.append((table, False))
            return

        if name == "br":
            self._inline.append("\n")
        elif name == "a":
            self._inline.append(self._format_link(tag))
        elif name in HEADING_TAGS:
            self._flush()
            heading = self._normalize(tag.get_text(" ")).strip()
            if self.options.uppercase_headings:
                heading = heading.upper()
            self._inline.append(heading)
            self._flush()
        elif name == "li":
            self._flush()
            self._inline.append(" * ")
            self._walk(tag)
            self._flush(tight=True)
        elif name in BLOCK_TAGS:
            self._flush()
            self._walk(tag)
            self._flush()
        else:
            self._walk(tag)

    def _table_rule(self, tag: Tag) -> Optional[PlainTextSelector]:
        for rule in self.table_rules:
            if tag.name == rule.selector:
                return rule
        return None

    def _format_link(self, anchor: Tag) -> str:
        text = self._normalize(anchor.get_text(" ")).strip()
        href = anchor.get("href")
        if not href or not isinstance(href, str) or href.startswith("#") or href == text:
            return text
        return f"{text} [{href}]" if text else f"[{href}]"

    def _format_table(self, table: Tag, rule: PlainTextSelector) -> str:
        rows: List[List[str]] = []
        for row in table.find_all("tr"):
            cells: List[str] = []
            for cell in row.find_all(["th", "td"]):
                value = WHITESPACE_REGEX.sub(" ", cell.get_text(" ")).strip()
                if cell.name == "th" and rule.uppercase_header_cells:
                    value = value.upper()
                cells.append(value)
            if rule.trim_empty_lines and not any(cells):
                continue
            rows.append(cells)

        if not rows:
            return WHITESPACE_REGEX.sub(" ", table.get_text(" ")).strip()

        column_count = max(len(cells) for cells in rows)
        widths = [
            max((len(cells[index]) for cells in rows if index < len(cells)), default=0)
            for index in range(column_count)
        ]

        lines = [
            COLUMN_SEPARATOR.join(cell.ljust(widths[index]) for index, cell in enumerate(cells)).rstrip()
            for cells in rows
        ]
        return "\n".join(lines)

    def _normalize(self, text: str) -> str:
        lead = " " if text[:1].isspace() else ""
        trail = " " if text[-1:].isspace() else ""
        core = text.strip()
        if not core:
            return " " if text else ""

        if self.options.preserve_newlines:
            core = "\n".join(WHITESPACE_REGEX.sub(" ", line.strip()) for line in core.split("\n"))
        else:
            core = WHITESPACE_REGEX.sub(" ", core)

        return lead + core + trail

    def _flush(self, tight: bool = False) -> None:
        if not self._inline:
            return

        content = "".join(self._inline)
        self._inline = []

        lines = [WHITESPACE_REGEX.sub(" ", line).strip() for line in content.split("\n")]
        while lines and not lines[0]:
            lines.pop(0)
        while lines and not lines[-1]:
            lines.pop()
        if not lines or lines == ["*"]:
            return

        if tight and lines[0].startswith("*"):
            lines[0] = " " + lines[0]

        self._blocks.append((self._wrap(lines), tight))

    def _wrap(self, lines: List[str]) -> str:
        width = self.options.wordwrap
        if not width:
            return "\n".join(lines)

        wrapped: List[str] = []
        for line in lines:
            if not line:
                wrapped.append("")
                continue
            wrapped.extend(
                textwrap.wrap(line, width=width, break_long_words=False, break_on_hyphens=False)
                or [""]
            )
        return "\n".join(wrapped)


def render_plain_text(raw: str, options: PlainTextOptions = DEFAULT_PLAIN_TEXT_OPTIONS) -> str:
    """
    Render the plain text version of an email.

    Args:
        raw: Raw rendered markup (before MJML conversion)
        options: Plain text options

    Returns:
        Plain text

    Raises:
        RenderError: If text derivation fails (kind TRANSFORM)
    """
    try:
        return PlainTextRenderer(options).render(raw)
    except Exception as e:
        logger.error("Plain text rendering failed", error=str(e))
        raise RenderError("Plain text rendering failed", e, kind=ErrorKind.TRANSFORM)
