"""
Glyphbin Backend — Custom Exception Hierarchy
==============================================

What:  Defines application-specific exceptions for the paste lifecycle.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages. They replace generic Python
       and SQLAlchemy exceptions that would leak internal details to the client.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured error responses with correct HTTP status codes.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    GlyphbinError (base)
    ├── ValidationError          → 400 Bad Request (empty or oversized paste)
    ├── InvalidIdentifierError   → 400 Bad Request (malformed paste ID)
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 500 (ID collision; retried once by the pipeline)
    ├── StorageUnavailableError  → 503 Service Unavailable (retry later)
    ├── DatabaseError            → 500 Internal Server Error
    └── UnknownThemeError        → startup failure (misconfigured theme)

Note:
    An unknown *language* is deliberately absent from this list. The
    highlighter falls back to plain text instead of failing.
"""

from typing import Any, Dict, Optional


class GlyphbinError(Exception):
    """
    Base exception for all Glyphbin application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client
                  unless a handler explicitly chooses to)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GlyphbinError):
    """
    Raised when a submitted paste fails business validation.

    When:    Empty content, content larger than MAX_PASTE_SIZE.
    HTTP:    400 Bad Request

    Schema-level problems (missing JSON fields, wrong types) are still
    reported by FastAPI as 422; this exception covers rules that depend on
    configuration.
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


class InvalidIdentifierError(GlyphbinError):
    """
    Raised when an external paste ID string cannot be parsed.

    When:    GET /api/pastes/{id} with something that is not 16 bytes of hex.
    HTTP:    400 Bad Request

    Kept separate from NotFoundError: a malformed ID is a client typo,
    while a well-formed unknown ID simply has no paste behind it.
    """

    def __init__(
        self,
        value: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["value"] = str(value)[:64]
        super().__init__(
            message="Paste ID must be a 32-digit hexadecimal identifier",
            context=ctx,
        )
        self.value = value


class NotFoundError(GlyphbinError):
    """
    Raised when a requested resource does not exist.

    When:    A well-formed paste ID that was never issued.
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


class ConflictError(GlyphbinError):
    """
    Raised by the store when an insert hits an existing primary key.

    When:    Two random 128-bit IDs collide (astronomically rare).
    HTTP:    500 Internal Server Error, only reached after the pipeline's
             single retry with a fresh ID also collided.
    """

    def __init__(
        self,
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message="A paste with this ID already exists", context=ctx)


class StorageUnavailableError(GlyphbinError):
    """
    Raised when the database cannot be reached.

    When:    Connection refused, connection dropped, database file unreadable.
    HTTP:    503 Service Unavailable with Retry-After

    Nothing is committed when this is raised, so the client can simply
    resubmit. The pipeline never retries it internally.
    """

    def __init__(
        self,
        message: str = "Paste storage is temporarily unavailable. Please try again shortly.",
        retry_after: int = 5,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class DatabaseError(GlyphbinError):
    """
    Raised when database operations fail for reasons other than
    connectivity or key conflicts.

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


class UnknownThemeError(GlyphbinError):
    """
    Raised when a highlight theme name is not in the Pygments style catalog.

    When:    Building the Highlighter at startup with a bad HIGHLIGHT_THEME.
             The lifespan handler lets it propagate, so the server refuses
             to start instead of failing on every submission.
    """

    def __init__(
        self,
        theme: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["theme"] = theme
        super().__init__(message=f"Unknown highlight theme '{theme}'", context=ctx)
        self.theme = theme
