"""
Service-call logging decorator.

Wraps async service functions explicitly at their definition site so each
call, its outcome and its failures are logged with structured context.
"""

from functools import wraps
from typing import Any, Callable, Optional

import structlog

from app.core.config import Settings, get_settings
from app.core.exceptions import AuthorizationError
from app.core.logging import log_error_details

logger = structlog.get_logger(__name__)


def _summarize(value: Any) -> str:
    text = repr(value)
    return text if len(text) <= 200 else text[:197] + "..."


def log_service_call(
    service_name: str,
    settings: Optional[Settings] = None,
) -> Callable:
    """
    Log calls of an async service function.

    Arguments are only logged at debug level and only when
    ``LOG_SERVICE_ARGUMENTS`` is enabled. Authorization errors are logged at
    warning level without details; other errors at error level. Exceptions
    are always re-raised.

    Usage:
        @log_service_call("organization")
        async def update_organization(actor, organization_id, data):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            config = settings or get_settings()
            log = logger.bind(service=service_name, method=func.__name__)

            log.info("service_call")
            if config.LOG_SERVICE_ARGUMENTS:
                log.debug(
                    "service_call_arguments",
                    args=[_summarize(arg) for arg in args],
                    kwargs={key: _summarize(value) for key, value in kwargs.items()},
                )

            try:
                result = await func(*args, **kwargs)
            except AuthorizationError:
                log.warning("service_call_denied")
                raise
            except Exception as e:
                log.error("service_call_failed", **log_error_details(e))
                raise

            log.debug("service_call_completed")
            return result

        return wrapper
    return decorator
