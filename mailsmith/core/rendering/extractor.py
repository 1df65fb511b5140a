"""
MJML Extractor
==============

Isolate the MJML document embedded in a component's rendered output.
"""

import re

from mailsmith.core.errors import ErrorKind, ValidationError

MJML_REGEX = re.compile(r"<mjml(?=[\s>])[\s\S]*?</mjml>")
MJ_ELEMENT_REGEX = re.compile(r"<(mj-[a-z-]+)\b[^>]*?(?:/>|>[\s\S]*?</\1\s*>)")
COMMENTS_REGEX = re.compile(r"<!--[\s\S]*?-->")

NO_MARKUP_MESSAGE = "Invalid template: No MJML markup found in component output"


def strip_comments(markup: str) -> str:
    """Remove HTML comments from markup."""
    return COMMENTS_REGEX.sub("", markup)


def extract_mjml_markup(html: str, loose: bool = False) -> str:
    """
    Extract the MJML fragment from rendered component output.

    Args:
        html: Raw string produced by the component renderer
        loose: Collect every top-level ``mj-*`` element instead of the ``<mjml>`` root

    Returns:
        The comment-free MJML fragment

    Raises:
        ValidationError: If no MJML markup is present
    """
    if loose:
        fragments = [match.group(0) for match in MJ_ELEMENT_REGEX.finditer(html)]
        if not fragments:
            raise ValidationError(NO_MARKUP_MESSAGE, kind=ErrorKind.STRUCTURAL)
        return strip_comments("\n".join(fragments))

    match = MJML_REGEX.search(html)
    if not match:
        raise ValidationError(NO_MARKUP_MESSAGE, kind=ErrorKind.STRUCTURAL)

    return strip_comments(match.group(0))
