"""
PasteShare — Custom Exception Hierarchy
=======================================

What:  Application-specific exceptions for the paste engine and its HTTP layer.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, the browse query parser and middleware.

Exception Hierarchy:
    PasteShareError (base)
    ├── ValidationError           → 400 Bad Request (malformed id / page input)
    ├── NotFoundError             → 404 Not Found
    ├── StorageError              → 500 Internal Server Error
    ├── InvariantViolationError   → 500 Internal Server Error
    └── RateLimitExceededError    → 429 Too Many Requests

An absent paste is not an exception at the store boundary: PasteStore.get()
returns None, and the service layer turns that into NotFoundError.
"""

from typing import Any, Dict, Optional


class PasteShareError(Exception):
    """
    Base exception for all PasteShare application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(PasteShareError):
    """
    Raised when caller input is malformed.

    When:  Non-numeric paste id, non-numeric or non-positive page number,
           unparseable browse path arguments. Detected before touching storage.
    HTTP:  400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(PasteShareError):
    """
    Raised when a requested paste does not exist.

    HTTP:  404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} {resource_id} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StorageError(PasteShareError):
    """
    Raised when the persistence layer fails.

    What:  Connection loss, constraint violation, transaction failure.
    How:   Raised with the underlying SQLAlchemy exception chained as
           __cause__; its type name is recorded in context.
    HTTP:  500 Internal Server Error (details logged server-side only)
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvariantViolationError(PasteShareError):
    """
    Raised when an operation is asked to do something it has no defined
    answer for, such as counting pages of size zero.

    HTTP:  500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Internal invariant violated",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(PasteShareError):
    """
    Raised when a client submits pastes faster than the configured limit.

    HTTP:  429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before submitting again."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
