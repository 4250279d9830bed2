"""Structured logging configuration for formpulse.

The host application calls ``configure_logging`` once at startup, usually
with ``settings.log_level`` and ``settings.log_format``. Output is JSON in
production and a colored console in development.

Library modules log through ``logging.getLogger(__name__)`` and the root
handler set up here renders those records:

    formpulse.webhooks.delivery   one line per attempt (INFO on success,
                                  WARNING on failure, ERROR when giving up)
    formpulse.storage.retry       WARNING before each delivery-log retry
    formpulse.analytics.service   DEBUG with response and field counts
    formpulse.config              WARNING for text logs in production

Bind ``form_id`` or ``webhook_id`` with ``bind_context`` to tag every
line emitted while handling one submission.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

from formpulse.exceptions import ConfigurationError

if TYPE_CHECKING:
    from structlog.typing import Processor

# Track if logging has been configured
_configured = False


def configure_logging(
    level: str = "INFO",
    format: str = "json",
) -> None:
    """Configure structured logging for formpulse.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format: Output format - "json" for production, "text" for development.

    Raises:
        ConfigurationError: If format is not "json" or "text".

    Example:
        ```python
        from formpulse.config import settings
        from formpulse.logging import configure_logging, get_logger

        configure_logging(level=settings.log_level, format=settings.log_format)
        get_logger("myapp").info("Webhook delivery enabled", timeout=settings.webhook_timeout_seconds)
        ```
    """
    global _configured

    if format.lower() not in ("json", "text"):
        raise ConfigurationError(f"Unknown log format: {format!r} (expected 'json' or 'text')")

    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if format.lower() == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name. Uses calling module name if None.

    Returns:
        A bound structlog logger.
    """
    if not _configured:
        configure_logging()

    return structlog.get_logger(name)  # type: ignore[no-any-return]


def bind_context(**kwargs: object) -> None:
    """Bind context variables to all subsequent log messages.

    Useful for request-scoped context such as form_id or response_id.

    Example:
        ```python
        bind_context(form_id="frm_123", response_id="rsp_abc")
        get_logger().info("Response submitted")  # Includes both ids
        ```
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()


def unbind_context(*keys: str) -> None:
    """Remove specific keys from the logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


# Convenience: pre-configured logger for quick imports
logger = get_logger("formpulse")
