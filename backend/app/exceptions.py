"""
RoomStager Backend — Custom Exception Hierarchy
=================================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages without leaking internals.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, the graph layer and the identity dependency.

Exception Hierarchy:
    StagingError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden (admin-only routes)
    ├── NotFoundError            → 404 Not Found (missing OR not owned)
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

Ownership note:
    A project that exists but belongs to someone else is reported exactly
    like a project that does not exist. Services never raise a distinct
    "forbidden" error for ownership so the response cannot leak existence.
"""

from typing import Any, Dict, Optional


class StagingError(Exception):
    """
    Base exception for all RoomStager application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for 5xx errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(StagingError):
    """
    Raised when client input fails validation.

    When:    Missing required field, malformed identifier, non-numeric
             coordinate, unsupported upload.
    HTTP:    400 Bad Request

    Raised before the project document is mutated, so a rejected request
    never leaves a partial change behind.
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


class AuthenticationError(StagingError):
    """
    Raised when a request carries no usable access token.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(StagingError):
    """
    Raised when an authenticated non-admin calls an admin-only route.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        message: str = "Admin access required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(StagingError):
    """
    Raised when a requested resource does not exist or is not visible to the caller.

    When:    Unknown project id, project owned by another user, unknown area,
             hotspot, library item or item instance inside a project.
    HTTP:    404 Not Found
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


class FileStorageError(StagingError):
    """
    Raised when writing an upload to the storage volume fails.

    HTTP:    500 Internal Server Error
    Recovery: none. A file written before a failed document save stays
              orphaned in storage.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(StagingError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error
    Security Note:
        The message returned to the client is always generic.
        Detailed error info is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

