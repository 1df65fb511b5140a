"""
HTML Post-Processor
===================

Optional beautification and minification of converted HTML.

Beautification always runs before minification, minified output is never
re-beautified. Both transforms leave inline content and Outlook conditional
comments (``<!--[if mso]>...<![endif]-->``) exactly as the converter wrote them.
"""

import re
from typing import Any, List, Union

import minify_html
from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from markupsafe import escape

from mailsmith.config.logging import get_logger
from mailsmith.core.errors import ErrorKind, RenderError
from mailsmith.models.schemas import MinifyConfig, RenderOptions

logger = get_logger(__name__)

DOCTYPE_REGEX = re.compile(r"<!doctype", re.IGNORECASE)
INDENT = "  "

# Elements laid out on their own lines when they hold other such elements
LAYOUT_TAGS = {
    "html", "head", "body", "table", "thead", "tbody", "tfoot", "tr", "td", "th",
    "div", "p", "center", "section", "article", "header", "footer", "blockquote",
    "ul", "ol", "li", "noscript", "h1", "h2", "h3", "h4", "h5", "h6",
}
# Elements written on a line of their own, content untouched
LINE_TAGS = {"meta", "link", "base", "title", "style", "script"}

# Attributes that carry no meaning when empty
EMPTY_REMOVABLE_ATTRIBUTES = {"id", "class", "style", "title", "lang", "dir"}

Node = Union[Tag, NavigableString]


def parse_html(html: str) -> BeautifulSoup:
    """Parse HTML, normalising a lowercase doctype first."""
    return BeautifulSoup(DOCTYPE_REGEX.sub("<!DOCTYPE", html, count=1), "html.parser")


def is_conditional_comment(node: Any) -> bool:
    """Check for an Outlook/IE conditional comment, opening or closing."""
    return isinstance(node, Comment) and str(node).lstrip().startswith(("[if", "<![endif]"))


def serialize(node: Node) -> str:
    """Serialize a single node as it appears in the document."""
    if isinstance(node, Tag):
        return node.decode()
    return node.output_ready()


def _attribute_text(value: Any) -> str:
    return " ".join(value) if isinstance(value, list) else str(value)


def open_tag(tag: Tag) -> str:
    attributes = "".join(
        f' {name}="{escape(_attribute_text(value))}"' for name, value in tag.attrs.items()
    )
    return f"<{tag.name}{attributes}>"


class HTMLPostProcessor:
    """Beautify and minify HTML documents."""

    def __init__(self) -> None:
        self.logger: Any = logger.bind(component="post_processor")

    def beautify(self, html: str) -> str:
        """
        Indent the block structure of an HTML document.

        Only whitespace between layout elements changes. Elements holding
        inline content are written on one line exactly as parsed.
        """
        soup = parse_html(html)
        lines: List[str] = []
        self._write_children(soup, 0, lines)
        return "\n".join(lines) + "\n"

    def _write_children(self, parent: Tag, depth: int, lines: List[str]) -> None:
        run: List[str] = []

        def flush() -> None:
            text = "".join(run).strip()
            if text:
                lines.append(INDENT * depth + text)
            run.clear()

        for child in parent.children:
            if isinstance(child, Tag) and self._is_layout(child):
                flush()
                self._write_tag(child, depth, lines)
            else:
                run.append(serialize(child))
        flush()

    def _write_tag(self, tag: Tag, depth: int, lines: List[str]) -> None:
        if not any(isinstance(child, Tag) and self._is_layout(child) for child in tag.children):
            lines.append(INDENT * depth + serialize(tag).strip())
            return

        lines.append(INDENT * depth + open_tag(tag))
        self._write_children(tag, depth + 1, lines)
        lines.append(INDENT * depth + f"</{tag.name}>")

    @staticmethod
    def _is_layout(tag: Tag) -> bool:
        return tag.name in LAYOUT_TAGS or tag.name in LINE_TAGS

    def clean(self, html: str, config: MinifyConfig) -> str:
        """Drop ordinary comments and meaningless empty attributes from the parsed tree."""
        soup = parse_html(html)

        if config.remove_comments:
            for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
                if not is_conditional_comment(comment):
                    comment.extract()

        if config.remove_empty_attributes:
            for tag in soup.find_all(True):
                for name in [n for n in tag.attrs if n in EMPTY_REMOVABLE_ATTRIBUTES]:
                    if not _attribute_text(tag.attrs[name]).strip():
                        del tag.attrs[name]

        return soup.decode()

    def minify(self, html: str, config: MinifyConfig) -> str:
        """
        Minify HTML according to the config.

        Comment and attribute cleanup works on the parsed tree. Whitespace
        collapsing and CSS minification are both done by minify-html, so
        ``minify_css`` only applies while ``collapse_whitespace`` is on.
        """
        if config.remove_comments or config.remove_empty_attributes:
            html = self.clean(html, config)

        if not config.collapse_whitespace:
            return html

        return minify_html.minify(
            html,
            minify_css=config.minify_css,
            keep_comments=True,
            keep_closing_tags=True,
            keep_html_and_head_opening_tags=True,
        )

    async def process(self, html: str, options: RenderOptions) -> str:
        """
        Apply the transforms requested in the render options.

        Args:
            html: Converted HTML
            options: Render options

        Returns:
            Processed HTML

        Raises:
            RenderError: If a transform fails (kind TRANSFORM)
        """
        processed = html

        if options.beautify:
            try:
                processed = self.beautify(processed)
            except Exception as e:
                self.logger.error("HTML beautification failed", error=str(e))
                raise RenderError("HTML beautification failed", e, kind=ErrorKind.TRANSFORM)

        minify_config = options.minify_config()
        if minify_config is not None:
            try:
                processed = self.minify(processed, minify_config)
            except Exception as e:
                self.logger.error("HTML minification failed", error=str(e))
                raise RenderError("HTML minification failed", e, kind=ErrorKind.TRANSFORM)

        self.logger.debug(
            "HTML post-processed",
            beautify=options.beautify,
            minify=minify_config is not None,
            length=len(processed),
        )
        return processed


async def post_process_html(html: str, options: RenderOptions) -> str:
    """Beautify and/or minify HTML according to the render options."""
    return await HTMLPostProcessor().process(html, options)
