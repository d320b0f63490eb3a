"""
Shared error handling for the Calorie Foods API.
"""

from enum import Enum
from typing import Dict, Any, Optional


class FoodsException(Exception):
    """Base exception for the foods service and client."""

    status_code: int = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(FoodsException):
    """Bad input from the caller."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(FoodsException):
    """Unknown id or route."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class StoreUnavailableError(FoodsException):
    """The relational store could not be reached or the query failed."""

    status_code = 503

    def __init__(self, message: str = "Database unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("STORE_UNAVAILABLE", message, details)


class ErrorCode(str, Enum):
    """Client-side error classification."""
    NETWORK_ERROR = "NETWORK_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    HTTP_ERROR = "HTTP_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


RETRYABLE_CODES = frozenset({
    ErrorCode.NETWORK_ERROR,
    ErrorCode.RATE_LIMITED,
    ErrorCode.SERVER_ERROR,
    ErrorCode.SERVICE_UNAVAILABLE,
})


class ApiError(FoodsException):
    """Classified failure surfaced by the gateway client."""

    def __init__(self, code: ErrorCode, message: str, status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(code.value, message, details)
        # HTTP status of the failed response; None for transport failures
        self.status_code = status_code
        self.kind = code
        self.retryable = code in RETRYABLE_CODES

    def __repr__(self) -> str:
        return (
            f"ApiError(code={self.code!r}, status_code={self.status_code!r}, "
            f"retryable={self.retryable!r})"
        )
