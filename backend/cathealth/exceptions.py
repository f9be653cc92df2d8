"""
CatHealth Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the different error scenarios.
Why:   Services raise domain errors; global handlers in main.py turn them
       into JSON responses with the right status code, so no route needs
       its own try/except.
How:   Each exception carries a user-facing message, an optional context
       dict (logged, never returned) and the HTTP status it maps to.

Exception Hierarchy:
    CatHealthError (base)
    ├── ValidationError        → 400 Bad Request
    ├── ConflictError          → 400 Bad Request (duplicate unique field)
    ├── AuthenticationError    → 401 Unauthorized (missing token, bad login)
    ├── PermissionDeniedError  → 403 Forbidden (bad token, not the owner)
    ├── NotFoundError          → 404 Not Found
    ├── FileStorageError       → 500 Internal Server Error
    └── DatabaseError          → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class CatHealthError(Exception):
    """
    Base exception for all CatHealth application errors.

    Attributes:
        message:      User-facing error description (safe to return in API response)
        context:      Additional debug info (logged but NOT returned to client)
        status_code:  HTTP status used by the global handler
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatHealthError):
    """
    Raised when client input fails validation.

    When:    Malformed body, invalid date, unsupported upload type, bad query param.
    HTTP:    400 Bad Request
    """

    status_code = 400

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


class ConflictError(CatHealthError):
    """
    Raised when a unique field is already taken (e.g. registration email).

    HTTP:    400 Bad Request, which is what the frontend expects for a taken email.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationError(CatHealthError):
    """
    Raised when the caller is not authenticated.

    When:    No bearer token on a protected route, or login credentials don't match.
    HTTP:    401 Unauthorized (the frontend clears its stored token on 401)
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(CatHealthError):
    """
    Raised when the caller is known but not allowed.

    When:    Token signature invalid or expired, or the resource belongs to
             another user (directly or through its cat).
    HTTP:    403 Forbidden
    """

    status_code = 403

    def __init__(
        self,
        message: str = "You do not have permission to access this resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CatHealthError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None
    into this exception. Always checked before ownership.
    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class FileStorageError(CatHealthError):
    """
    Raised when file system operations fail (disk full, permission denied).

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CatHealthError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the SQL error
    is logged server-side only.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
