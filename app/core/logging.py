"""
Structured logging configuration using structlog.
"""
import logging
import sys
from typing import Any, Dict, Optional

import structlog

from app.core.config import Settings, settings


def setup_logging(config: Optional[Settings] = None) -> None:
    """
    Configure structlog for the engine.

    Development gets a colored console renderer, every other environment
    one JSON document per line. Debug events (gate denials, limit
    computations) are only emitted when ``DEBUG`` is on.
    """
    config = config or settings
    level = logging.DEBUG if config.DEBUG else logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if config.is_development:
        renderers = [structlog.dev.ConsoleRenderer(colors=True)]
    else:
        renderers = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=shared_processors + renderers,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def log_authorization_decision(
    action: str,
    subject: str,
    allowed: bool,
    actor_id: str | None = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """
    Create a context dict for authorization decision logging.

    Args:
        action: Requested action
        subject: Resource type the action applies to
        allowed: Final decision
        actor_id: Authenticated actor ID, None for guests
        **kwargs: Additional context

    Returns:
        Context dictionary for logging
    """
    context = {
        "action": action,
        "subject": subject,
        "allowed": allowed,
        **kwargs,
    }

    if actor_id:
        context["actor_id"] = actor_id

    return context


def log_error_details(
    error: Exception,
    actor_id: str | None = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """
    Create a context dict for error logging.

    Args:
        error: Exception instance
        actor_id: Actor ID if available
        **kwargs: Additional context

    Returns:
        Context dictionary for logging
    """
    context = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        **kwargs,
    }

    if actor_id:
        context["actor_id"] = actor_id

    return context
