"""
Error Reporting
===============

Logging and presentation of rendering failures.

``log_error`` records the failure with its full cause chain. ``handle_error``
is the presentation boundary: it always raises, either the full chain
(debug) or a flattened error with a simplified traceback.
"""

import traceback
from typing import Any, Dict, List, NoReturn, Optional

from mailsmith.config.logging import get_logger
from mailsmith.core.diagnostics.translator import format_mjml_error
from mailsmith.core.errors import MailsmithError, ValidationError

logger = get_logger(__name__)

LIBRARY_PATH_MARKERS = ("site-packages", "dist-packages", "/lib/python")


def iter_causes(error: BaseException) -> List[BaseException]:
    """Return the cause chain of an error, outermost first, without the error itself."""
    causes: List[BaseException] = []
    seen = {id(error)}
    current = getattr(error, "cause", None) or error.__cause__

    while current is not None and id(current) not in seen:
        causes.append(current)
        seen.add(id(current))
        current = getattr(current, "cause", None) or current.__cause__

    return causes


def describe_error(error: BaseException) -> Dict[str, Any]:
    """Build the structured log fields describing one error."""
    fields: Dict[str, Any] = {
        "error_type": type(error).__name__,
        "error": str(error),
    }

    kind = getattr(error, "kind", None)
    if kind is not None:
        fields["kind"] = kind.value

    if isinstance(error, ValidationError) and error.details:
        fields["details"] = [detail.message for detail in error.details]

    return fields


def log_error(error: BaseException, component_name: Optional[str], context: str) -> None:
    """
    Log a rendering failure with its cause chain.

    Raw MJML validator output found in the chain is translated before logging.

    Args:
        error: The failure
        component_name: Component the failure is attributed to
        context: Short description of the failing operation
    """
    log = logger.bind(component_name=component_name or "the email template")
    log.error(context, **describe_error(error))

    for depth, cause in enumerate(iter_causes(error), start=1):
        fields = describe_error(cause)
        message = str(cause)
        if message.startswith("ValidationError") or message.startswith("Line "):
            formatted = format_mjml_error(message)
            fields["error"] = formatted.message
            fields["original_error"] = formatted.original_message
        log.error("Caused by", depth=depth, **fields)


def simplified_traceback(error: BaseException, limit: int = 3) -> str:
    """Format a traceback without library frames, keeping the first ``limit`` frames."""
    frames = [
        frame
        for frame in traceback.extract_tb(error.__traceback__)
        if not any(marker in frame.filename for marker in LIBRARY_PATH_MARKERS)
    ][:limit]

    lines = [f"{type(error).__name__}: {error}"]
    lines.extend(f"    at {frame.name} ({frame.filename}:{frame.lineno})" for frame in frames)
    return "\n".join(lines)


def handle_error(
    error: BaseException,
    context: str,
    component_name: Optional[str] = None,
    *,
    debug: bool = False,
) -> NoReturn:
    """
    Log a failure and raise its presentation form.

    Args:
        error: The failure
        context: Short description of the failing operation
        component_name: Component the failure is attributed to
        debug: Raise the full cause chain instead of a flattened error

    Raises:
        MailsmithError: Always
    """
    log_error(error, component_name, context)

    if debug:
        raise MailsmithError(context, error)

    flattened = MailsmithError(f"{type(error).__name__}: {error}")
    flattened.component_name = component_name
    flattened.stack = simplified_traceback(error)
    raise flattened from None
