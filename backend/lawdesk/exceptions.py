"""
LawDesk Backend — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for every error the API can report.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) translate them into
       one JSON error shape: {error, message, details, request_id}.
Who:   Raised by stores, image storage and the admin gate.
Why:   Stores raise domain errors; only main.py knows about HTTP status codes.

Exception Hierarchy:
    LawDeskError (base)
    ├── ValidationError      → 400 Bad Request
    ├── UnauthorizedError    → 401 Unauthorized
    ├── NotFoundError        → 404 Not Found
    ├── DuplicateSlugError   → 409 Conflict
    ├── FileStorageError     → 500 Internal Server Error
    └── DatabaseError        → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class LawDeskError(Exception):
    """
    Base exception for all LawDesk application errors.

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


class ValidationError(LawDeskError):
    """
    Raised when client input fails validation.

    When:    Missing required post/feedback fields, unsupported image type,
             image too large.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Error saving post",
            "details": {"field": "title", "cause": "String should have at least 1 character"}
        }
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


class UnauthorizedError(LawDeskError):
    """
    Raised when an admin route is called without a valid X-Admin-Key.

    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "A valid admin key is required for this operation",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(LawDeskError):
    """
    Raised when a requested resource does not exist.

    When:    GET /posts/{slug} with an unknown slug, approving unknown feedback.
    HTTP:    404 Not Found

    Deletes never raise this; deleting a missing record is a success.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DuplicateSlugError(LawDeskError):
    """
    Raised when a post's slug collides with an existing post.

    When:    The unique index on posts.slug rejects an insert. With the
             timestamp suffix this only happens for identical titles created
             in the same millisecond, or for a literal slug saved twice.
    HTTP:    409 Conflict

    Recovery: the caller retries with a modified title.
    """

    def __init__(
        self,
        slug: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if slug:
            ctx["slug"] = slug
        super().__init__(
            message="A post with this title already exists. Kindly update the title.",
            context=ctx,
        )
        self.slug = slug


class FileStorageError(LawDeskError):
    """
    Raised when writing an uploaded image fails.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(LawDeskError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, database unavailable.
    HTTP:    500 Internal Server Error

    The response carries the underlying error type only; the full error is
    logged server-side. No retry is attempted.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
