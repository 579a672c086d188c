"""Create pastes table

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Creates the `pastes` table holding every submitted paste.
How:   Portable column types only (LargeBinary → BYTEA on PostgreSQL,
       BLOB on SQLite) so one migration serves both backends.

Rollback: downgrade() drops the table entirely (destructive: all pastes lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the pastes table. Column rationale lives in glyphbin/models/paste.py."""
    op.create_table(
        "pastes",
        sa.Column(
            "id",
            sa.LargeBinary(16),
            nullable=False,
            comment="Raw 16 bytes of the paste's random 128-bit identifier",
        ),
        sa.Column(
            "owner_id",
            sa.Integer(),
            nullable=True,
            comment="Optional opaque user reference; NULL for anonymous pastes",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="When this paste was inserted (UTC)",
        ),
        sa.Column(
            "expires_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="Reserved expiry timestamp; not enforced",
        ),
        sa.Column(
            "language",
            sa.Text(),
            nullable=False,
            comment="Language label as submitted; not checked against the grammar catalog",
        ),
        sa.Column(
            "content",
            sa.LargeBinary(),
            nullable=False,
            comment="Raw submitted bytes (UTF-8)",
        ),
        sa.Column(
            "rendered",
            sa.Text(),
            nullable=False,
            comment="Highlighted HTML produced at submission time",
        ),
        sa.Column(
            "deletion_token",
            sa.LargeBinary(16),
            nullable=False,
            comment="Reserved 128-bit deletion capability",
        ),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """
    Drop the pastes table entirely.

    WARNING: This is destructive. Every stored paste is permanently lost.
    """
    op.drop_table("pastes")
