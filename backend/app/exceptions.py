"""
CrudCamp Backend — Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the right status code.
Who:   Raised by services, dependencies and middleware; caught by global handlers.

Exception Hierarchy:
    CrudCampError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── DatabaseError            → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests

Schema-level validation (pydantic DTOs) is left to FastAPI's default 422.
ValidationError is for business rules the DTOs cannot express.
"""

from typing import Any, Dict, Optional


class CrudCampError(Exception):
    """
    Base exception for all CrudCamp application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CrudCampError):
    """
    Raised when client input breaks a business rule.

    When:  Unknown sort key, password too long once encoded, etc.
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


class AuthenticationError(CrudCampError):
    """
    Raised when a request cannot be tied to an active user.

    When:    Missing/malformed bearer header, bad or expired token,
             wrong credentials at login, deactivated account.
    HTTP:    401 Unauthorized (with `WWW-Authenticate: Bearer`)

    Login failures always use the same message whether the email exists or
    not, so the endpoint cannot be used to enumerate accounts.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(CrudCampError):
    """
    Raised when an authenticated user may not perform an action.

    HTTP:  403 Forbidden
    """

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CrudCampError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/PATCH/DELETE /api/tasks/{id} with an unknown id, or an id
             that belongs to another user (indistinguishable on purpose).
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing records; services convert that
    None into this exception.
    """

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


class ConflictError(CrudCampError):
    """
    Raised when a write would violate a uniqueness rule.

    When:  Registering an email that is already taken.
    HTTP:  409 Conflict
    """

    def __init__(
        self,
        message: str = "The resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CrudCampError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:  500 Internal Server Error

    The message returned to the client is always generic; the context
    (error type, ids) is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(CrudCampError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:  429 Too Many Requests (with Retry-After header)
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
