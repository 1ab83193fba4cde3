"""
HTTP mapping of the Tenantry error taxonomy.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import ErrorCode, ErrorResponse
from app.core.exceptions import AuthorizationError, TenantryException, ValidationError
from app.core.logging import get_logger

logger = get_logger(__name__)


def error_response_for(exc: TenantryException) -> ErrorResponse:
    """Build the response body for an engine exception."""
    if isinstance(exc, AuthorizationError):
        # Never reveal why access was denied
        return ErrorResponse.authorization_error()

    if isinstance(exc, ValidationError):
        return ErrorResponse.validation_error(exc.message, field=exc.field, code=exc.error_code)

    if exc.status_code == 500:
        # Internal failures keep their code but not their internals
        return ErrorResponse(code=exc.error_code)

    return ErrorResponse(code=exc.error_code, message=exc.message, details=exc.details)


async def tenantry_exception_handler(request: Request, exc: TenantryException) -> JSONResponse:
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "request_failed",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response_for(exc).to_dict(),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all unhandled exceptions."""
    logger.error(
        "unhandled_exception",
        exc_info=exc,
        path=request.url.path,
        method=request.method,
    )

    # Don't expose internal errors in production
    message = None if settings.is_production else str(exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(code=ErrorCode.SYS_INTERNAL_ERROR, message=message).to_dict(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TenantryException, tenantry_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
