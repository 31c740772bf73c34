"""
Modulith Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for infrastructure failures.
How:   Each exception carries a message and an optional context dict.
       Global handlers (registered in main.py) turn them into JSON
       responses; the context is logged, never returned to the client.

Exception Hierarchy:
    ModulithError (base)
    ├── DatabaseError          → 500 Internal Server Error
    └── RequestTimeoutError    → 504 Gateway Timeout

Not covered here on purpose:
    - Validation failures are values (ValidationResult), handled in controllers.
    - "Not found" is a None/False result from repositories, never an exception.
"""

from typing import Any, Dict, Optional


class ModulithError(Exception):
    """
    Base exception for all Modulith application errors.

    Attributes:
        message:  User-facing error description
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


class DatabaseError(ModulithError):
    """
    Raised when a store operation fails unexpectedly.

    When:    Connection lost mid-query, constraint violation, store unreachable.
    HTTP:    500 Internal Server Error

    The message returned to the client is always generic; the underlying
    SQLAlchemy error is chained (`raise ... from exc`) and logged.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RequestTimeoutError(ModulithError):
    """
    Raised when a request exceeds the configured REQUEST_TIMEOUT.

    HTTP:    504 Gateway Timeout
    """

    def __init__(
        self,
        timeout: float,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["timeout"] = timeout
        super().__init__(message="Request timed out", context=ctx)
        self.timeout = timeout
