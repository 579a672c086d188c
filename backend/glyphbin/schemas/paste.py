"""
Glyphbin Backend — Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the JSON API contract.
Why:   Strict input validation, automatic serialization, and OpenAPI doc generation.
How:   FastAPI uses these models to validate request bodies, serialize responses,
       and generate the OpenAPI document.

Design Decision:
    Schemas are separate from the SQLAlchemy model because the stored row
    carries fields that must never leave the server (deletion_token, raw
    owner reference), and because the external ID is a hyphenated string
    while the column holds 16 raw bytes.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from glyphbin.services.highlighter import PLAIN_TEXT


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PasteCreate(BaseModel):
    """
    What:  Body of POST /api/pastes.

    language is free text. Unknown names are accepted and rendered as plain
    text, so the only rule here is a sane length.
    """
    language: str = Field(
        default=PLAIN_TEXT,
        max_length=100,
        description="Grammar name or alias, e.g. 'Python' or 'py'",
    )
    content: str = Field(description="Text to store and highlight; must not be empty")

    @field_validator("language")
    @classmethod
    def default_blank_language(cls, v: str) -> str:
        """Blank language labels mean plain text."""
        return v.strip() or PLAIN_TEXT


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class PasteCreatedResponse(BaseModel):
    """Returned by POST /api/pastes with HTTP 201."""
    id: str = Field(description="Canonical paste ID (hyphenated lowercase hex)")
    url: str = Field(description="Path of the HTML page showing the paste")


class PasteResponse(BaseModel):
    """
    What:  A stored paste as shown to readers.
    Who:   Returned by GET /api/pastes/{id}; also feeds the HTML paste page.

    rendered is the HTML computed at submission time. Raw content is not
    part of the response.
    """
    id: str = Field(description="Canonical paste ID")
    language: str = Field(description="Language label as submitted")
    created_at: datetime = Field(description="When the paste was stored (UTC)")
    expires_at: Optional[datetime] = Field(
        default=None,
        description="Reserved expiry timestamp (not enforced)",
    )
    rendered: str = Field(description="Highlighted HTML")


class LanguageListResponse(BaseModel):
    """Returned by GET /api/languages."""
    languages: List[str] = Field(description="Known grammar names")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "error": "invalid_identifier",
            "message": "Paste ID must be a 32-digit hexadecimal identifier",
            "details": {"value": "not-a-paste"},
            "request_id": "1f0c9a2e"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    languages: int = Field(description="Number of grammars in the highlighter catalog")
    uptime_seconds: float = Field(description="Seconds since service started")
