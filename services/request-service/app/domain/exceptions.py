"""
Custom exceptions for the request service domain.

These exceptions represent domain-level errors and are independent
of infrastructure concerns (HTTP, database, etc.).
"""

from typing import Any, Optional

# Longest slice of an offending value echoed back in error details
MAX_ECHOED_VALUE_LENGTH = 100


class RequestServiceException(Exception):
    """Base exception for all request service errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInputException(RequestServiceException):
    """Raised when input validation fails."""

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}: {reason}"
        super().__init__(
            message=message,
            details={
                "field": field,
                "value": str(value)[:MAX_ECHOED_VALUE_LENGTH],
                "reason": reason,
            },
        )
        self.field = field


class InvalidPaginationException(InvalidInputException):
    """Raised when a page number is outside the valid range."""

    def __init__(self, page: Any, page_size: int):
        super().__init__("page", page, f"Page must be >= 1 (page size {page_size})")
        self.details["page_size"] = page_size


class RequestStoreException(RequestServiceException):
    """Raised when the underlying store is unreachable or rejects an operation."""

    def __init__(self, operation: str, reason: Optional[str] = None):
        message = f"Store {operation} failed"
        if reason:
            message += f": {reason}"
        super().__init__(
            message=message, details={"operation": operation, "reason": reason}
        )
