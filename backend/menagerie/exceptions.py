"""
Menagerie Backend: Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for every failure the API can report.
Why:   The storage layer classifies driver failures into a closed set before
       they reach the HTTP layer, so nothing above the gateway ever inspects
       raw driver error text.
How:   Each exception carries a client-safe message, a context dict for
       server-side logging, and class-level `error_code`/`status_code` used
       by the Resource Controller and the global handlers in main.py.

Exception Hierarchy:
    MenagerieError (base)
    ├── BadRequestError              → 400 (malformed JSON, field, or identifier)
    ├── NotFoundError                → 404
    └── StorageError                 → 500
        ├── ConflictError            → 409 (uniqueness / constraint violation)
        ├── StorageUnavailableError  → 500 (connection, pool, or timeout failure)
        └── StorageInternalError     → 500 (anything else, e.g. row decoding)

Design Decision:
    Absence is NOT an exception at the storage layer. Gateway lookups return
    None for a missing row; the controller turns None into NotFoundError.
"""

from typing import Any, Dict, List, Optional


class MenagerieError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  Client-facing description (safe to return in an API response)
        context:  Debug info (logged, NEVER returned to the client)
    """

    error_code = "server_error"
    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class BadRequestError(MenagerieError):
    """
    Raised when client input cannot be parsed.

    When:  Body is not JSON, a required field is missing or mistyped, or the
           path identifier is not a valid UUID.
    HTTP:  400 Bad Request (never FastAPI's default 422)

    `details` holds field-level messages produced by Pydantic; they describe
    the client's input only and are safe to return.
    """

    error_code = "bad_request"
    status_code = 400

    def __init__(
        self,
        message: str = "The request could not be understood",
        details: Optional[List[Dict[str, str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.details = details


class NotFoundError(MenagerieError):
    """Raised when an operation addresses an identifier with no row behind it."""

    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StorageError(MenagerieError):
    """
    Root of the closed storage classification.

    Security Note:
        The message is always generic. Driver text, SQL fragments and
        constraint names go into `context` for the server log only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConflictError(StorageError):
    """Uniqueness or foreign-key violation reported by the store."""

    error_code = "conflict"
    status_code = 409

    def __init__(
        self,
        message: str = "The request conflicts with an existing record",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageUnavailableError(StorageError):
    """
    The store could not be reached in time.

    When:  Connection refused or dropped, pool exhausted past db_pool_timeout,
           or the operation exceeded db_statement_timeout.
    Recovery: none in-process; the gateway performs no retries.
    """


class StorageInternalError(StorageError):
    """Any other storage failure, including a returned row that fails to decode."""
