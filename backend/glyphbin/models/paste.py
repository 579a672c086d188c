"""
Glyphbin Backend — Paste SQLAlchemy Model
==========================================

What:  ORM model representing the `pastes` table.
Why:   Maps Python objects to database rows for type-safe database operations.
Who:   Used by PasteStore for insert/lookup and by Alembic for schema management.

Table Design Rationale:
    - 16-byte binary primary key: the raw bytes of a random 128-bit ID.
      Stored as LargeBinary so SQLite and PostgreSQL (BYTEA) share one schema.
    - owner_id: opaque optional user reference. There is no users table in
      this service, so no foreign key is declared.
    - content: raw UTF-8 bytes exactly as submitted.
    - rendered: HTML computed once at submission; fetches never re-highlight.
    - expires_at / deletion_token: reserved columns. They are written on
      insert and never read by any code path.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, LargeBinary, Text
from sqlalchemy.orm import Mapped, mapped_column

from glyphbin.database import Base


class Paste(Base):
    """
    A single immutable paste.

    Lifecycle:
        1. Built by PasteService.submit() with a fresh ID and deletion token
        2. Inserted once by PasteStore.insert() (create-only)
        3. Read by ID forever after; never updated, never deleted
    """

    __tablename__ = "pastes"

    id: Mapped[bytes] = mapped_column(
        LargeBinary(16),
        primary_key=True,
        comment="Raw 16 bytes of the paste's random 128-bit identifier",
    )

    owner_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        default=None,
        comment="Optional opaque user reference; NULL for anonymous pastes",
    )

    # Stored in UTC; SQLite hands back naive datetimes, which are UTC too
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When this paste was inserted (UTC)",
    )

    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="Reserved expiry timestamp; not enforced",
    )

    language: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Language label as submitted; not checked against the grammar catalog",
    )

    content: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
        comment="Raw submitted bytes (UTF-8)",
    )

    rendered: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Highlighted HTML produced at submission time",
    )

    deletion_token: Mapped[bytes] = mapped_column(
        LargeBinary(16),
        nullable=False,
        comment="Reserved 128-bit deletion capability",
    )

    @property
    def paste_id(self) -> uuid.UUID:
        """The primary key as a UUID, for canonical string formatting."""
        return uuid.UUID(bytes=self.id)

    def __repr__(self) -> str:
        return (
            f"<Paste(id={self.paste_id}, language='{self.language}', "
            f"created_at='{self.created_at}')>"
        )
