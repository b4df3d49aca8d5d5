"""
Structured logging configuration.

Provides:
- JSON formatted logs for production
- Human-readable logs for development
- Request correlation (request, trace, user, tenant IDs)
- Redaction of credentials before anything is rendered
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from authsvc.config import settings
from authsvc.core.context import get_request_context

SENSITIVE_KEYS = frozenset({
    "password", "password_hash", "token", "secret",
    "access_token", "refresh_token", "authorization",
})

REDACTED = "***REDACTED***"


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp every entry with service name, version and environment."""
    event_dict.setdefault("service", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def add_request_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add request context from contextvars.

    Explicit keys passed at the call site win over the ambient values.
    """
    for key, value in get_request_context().items():
        event_dict.setdefault(key, value)
    return event_dict


def censor_sensitive_data(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace values of credential-like keys."""
    for key in list(event_dict.keys()):
        lowered = key.lower()
        if any(sensitive in lowered for sensitive in SENSITIVE_KEYS):
            event_dict[key] = REDACTED
    return event_dict


def setup_logging(log_level: str | None = None, log_format: str | None = None) -> None:
    """
    Configure application-wide structured logging.

    Production: JSON logs to stdout (for log aggregation)
    Development: Colorized console logs (human-readable)
    """
    level_name = (log_level or settings.log_level).upper()
    fmt = log_format or settings.log_format
    level = getattr(logging, level_name, logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_app_context,
        add_request_context,
        censor_sensitive_data,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if fmt == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)

    structlog.get_logger(__name__).info(
        "logging_configured",
        log_level=level_name,
        log_format=fmt,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("role_created", role_id=role.id, tenant_id=role.tenant_id)
    """
    return structlog.get_logger(name)
