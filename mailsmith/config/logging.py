"""
Logging Configuration
====================

Structured logging for the render pipeline.

structlog renders events as JSON in production and as console lines
elsewhere. Standard library logging is configured through ``dictConfig`` so
third-party libraries (bs4, mjml) write to the same handler at a quieter level.
"""

import logging
import logging.config
import sys
from typing import Any, Dict, List, MutableMapping, TYPE_CHECKING

import structlog
from structlog.types import Processor

from .settings import get_settings

if TYPE_CHECKING:
    from .settings import Settings

# Third-party loggers that only report warnings and above
QUIET_LOGGERS: List[str] = ["bs4", "mjml", "jinja2"]


def add_app_context(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Add the application name and environment to every event."""
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def build_processors(settings: "Settings") -> List[Processor]:
    """Build the structlog processor chain for the environment."""
    processors: List[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.environment == "production":
        processors.append(add_app_context)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=settings.environment == "development"))

    return processors


def setup_logging() -> None:
    """Configure structlog and standard library logging."""
    settings = get_settings()

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(get_logging_config(settings))


def get_logging_config(settings: "Settings") -> Dict[str, Any]:
    """Get logging configuration dictionary."""
    loggers: Dict[str, Any] = {
        "mailsmith": {
            "level": settings.log_level,
            "handlers": ["console"],
            "propagate": False,
        },
    }
    for name in QUIET_LOGGERS:
        loggers[name] = {"level": "WARNING", "handlers": ["console"], "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "plain": {"format": "%(message)s"},
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": "json" if settings.environment == "production" else "plain",
                "stream": sys.stderr,
            },
        },
        "loggers": loggers,
    }


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


# Initialize logging on import
setup_logging()
