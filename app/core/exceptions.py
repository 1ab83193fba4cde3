"""
Custom exceptions for the application.
"""
from typing import Any, Dict, Optional

from app.core.errors import ErrorCode


class TenantryException(Exception):
    """Base exception for all Tenantry exceptions."""

    error_code: ErrorCode = ErrorCode.SYS_INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(TenantryException):
    """Resource not found exception."""

    error_code = ErrorCode.BUS_RESOURCE_NOT_FOUND

    def __init__(self, resource: str, resource_id: Any):
        message = f"{resource} with ID {resource_id} not found"
        super().__init__(message, status_code=404)


class ValidationError(TenantryException):
    """Validation error exception."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VAL_INVALID_INPUT,
    ):
        self.field = field
        self.error_code = error_code
        details = {"field": field} if field else {}
        super().__init__(message, status_code=422, details=details)


class AuthorizationError(TenantryException):
    """
    Authorization error exception.

    The message is intentionally generic: callers surface it as "access
    denied" and it never carries the reason of the refusal.
    """

    error_code = ErrorCode.AUTH_INSUFFICIENT_PERMISSIONS

    def __init__(self, message: str = "Access denied"):
        super().__init__(message, status_code=403)


class QuotaExceededError(TenantryException):
    """Subscription quota exceeded exception."""

    error_code = ErrorCode.BUS_QUOTA_EXCEEDED

    def __init__(
        self,
        resource: str,
        limit: int,
        current: int,
    ):
        message = f"Quota exceeded for {resource}: {current}/{limit}"
        details = {
            "resource": resource,
            "limit": limit,
            "current": current,
        }
        super().__init__(message, status_code=402, details=details)


class BillingReferenceError(TenantryException):
    """No billing reference (user or organization id) could be resolved."""

    error_code = ErrorCode.SYS_CONFIGURATION_ERROR

    def __init__(self, message: str = "No billing reference found"):
        super().__init__(message, status_code=500)


class LimitNotImplementedError(TenantryException):
    """Usage counting is not available for the requested limit kind."""

    error_code = ErrorCode.BUS_FEATURE_NOT_AVAILABLE

    def __init__(self, limit_kind: str):
        super().__init__(
            f"Limit kind '{limit_kind}' is not implemented",
            status_code=501,
            details={"limit_kind": limit_kind},
        )
