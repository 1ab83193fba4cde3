"""
Error codes and response bodies surfaced by Tenantry.

Messages are fixed per code; engine exceptions only add a field name or
structured details, never the reason of an authorization refusal.
"""
from enum import Enum
from typing import Dict, Optional


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Authorization Errors (AUTH_*)
    AUTH_INSUFFICIENT_PERMISSIONS = "AUTH_007"

    # Validation Errors (VAL_*)
    VAL_INVALID_INPUT = "VAL_003"
    VAL_INVALID_UUID = "VAL_009"
    VAL_INVALID_ENUM_VALUE = "VAL_010"

    # Business Logic Errors (BUS_*)
    BUS_RESOURCE_NOT_FOUND = "BUS_001"
    BUS_QUOTA_EXCEEDED = "BUS_004"
    BUS_FEATURE_NOT_AVAILABLE = "BUS_006"

    # System Errors (SYS_*)
    SYS_INTERNAL_ERROR = "SYS_001"
    SYS_CONFIGURATION_ERROR = "SYS_004"


class ErrorMessages:
    """Client-safe message per error code."""

    _messages: Dict[ErrorCode, str] = {
        ErrorCode.AUTH_INSUFFICIENT_PERMISSIONS: "Access denied",

        ErrorCode.VAL_INVALID_INPUT: "Invalid input provided",
        ErrorCode.VAL_INVALID_UUID: "Invalid identifier format",
        ErrorCode.VAL_INVALID_ENUM_VALUE: "Invalid value for field",

        ErrorCode.BUS_RESOURCE_NOT_FOUND: "Requested resource not found",
        ErrorCode.BUS_QUOTA_EXCEEDED: "Your subscription limit has been reached",
        ErrorCode.BUS_FEATURE_NOT_AVAILABLE: "This feature is not available",

        ErrorCode.SYS_INTERNAL_ERROR: "An internal error occurred. Please try again later",
        ErrorCode.SYS_CONFIGURATION_ERROR: "System configuration error",
    }

    @classmethod
    def get(cls, code: ErrorCode) -> str:
        return cls._messages.get(code, "An error occurred")


class ErrorResponse:
    """JSON error body: `{"error": {code, message, field?, details?}}`."""

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        details: Optional[Dict] = None,
        field: Optional[str] = None,
    ):
        self.code = code
        self.message = message or ErrorMessages.get(code)
        self.details = details or {}
        self.field = field

    def to_dict(self) -> Dict:
        """Convert to dictionary for API response."""
        response = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }

        if self.field:
            response["error"]["field"] = self.field

        if self.details:
            response["error"]["details"] = self.details

        return response

    @classmethod
    def validation_error(
        cls,
        message: str,
        field: Optional[str] = None,
        code: ErrorCode = ErrorCode.VAL_INVALID_INPUT,
    ) -> "ErrorResponse":
        """Create validation error response."""
        return cls(code=code, message=message, field=field)

    @classmethod
    def authorization_error(cls) -> "ErrorResponse":
        """Create authorization error response. Never carries details."""
        return cls(code=ErrorCode.AUTH_INSUFFICIENT_PERMISSIONS)
