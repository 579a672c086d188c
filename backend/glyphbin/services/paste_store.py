"""
Glyphbin Backend — Paste Store
===============================

What:  Durable create-only persistence for pastes, keyed by paste ID.
Why:   Keeps the storage contract (insert fails on collision, lookup fails on
       absence) in one place and translates SQLAlchemy errors into the
       application's exception hierarchy.
How:   Stateless; each call receives the request's AsyncSession.
Who:   Called by PasteService only.

Contract:
    insert(db, paste)   → commits, or raises ConflictError /
                          StorageUnavailableError / DatabaseError
    get(db, paste_id)   → Paste, or raises NotFoundError /
                          StorageUnavailableError / DatabaseError

    There is no update or delete. Once insert() returns, get() with the same
    ID returns the same row for the lifetime of the database.

Error Translation:
    IntegrityError                     → ConflictError (primary key taken)
    OperationalError, InterfaceError,
    OSError                            → StorageUnavailableError
    any other SQLAlchemyError          → DatabaseError
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from glyphbin.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    StorageUnavailableError,
)
from glyphbin.models.paste import Paste

logger = logging.getLogger(__name__)

# Failures that mean "the database could not be reached or used at all"
UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, OSError)


class PasteStore:
    """Create and point-lookup operations over the `pastes` table."""

    async def insert(self, db: AsyncSession, paste: Paste) -> None:
        """
        Insert a new paste and commit it.

        The commit happens here rather than in get_db_session so that a
        primary key collision surfaces while the pipeline can still retry
        with a new ID.

        Raises:
            ConflictError: A paste with the same ID already exists.
            StorageUnavailableError: The database could not be reached.
            DatabaseError: Any other storage failure.
        """
        db.add(paste)
        try:
            await db.commit()
        except IntegrityError as e:
            await self._rollback(db)
            logger.warning("Paste ID collision on insert: %s", paste.paste_id)
            raise ConflictError(
                resource_id=str(paste.paste_id),
                context={"original_error": type(e).__name__},
            ) from e
        except UNAVAILABLE_ERRORS as e:
            await self._rollback(db)
            logger.error("Storage unavailable during insert: %s", str(e))
            raise StorageUnavailableError(
                context={"operation": "insert", "original_error": type(e).__name__},
            ) from e
        except SQLAlchemyError as e:
            await self._rollback(db)
            logger.error("Database error inserting paste %s: %s", paste.paste_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not store the paste. Please try again.",
                context={"original_error": type(e).__name__},
            ) from e

        logger.debug("Paste %s committed", paste.paste_id)

    async def get(self, db: AsyncSession, paste_id: uuid.UUID) -> Paste:
        """
        Retrieve a paste by ID.

        Query plan:
            SELECT * FROM pastes WHERE id = :bytes → primary key lookup

        Raises:
            NotFoundError: No paste with this ID exists.
            StorageUnavailableError: The database could not be reached.
            DatabaseError: Any other storage failure.
        """
        try:
            result = await db.execute(select(Paste).where(Paste.id == paste_id.bytes))
            paste = result.scalar_one_or_none()
        except UNAVAILABLE_ERRORS as e:
            logger.error("Storage unavailable fetching paste %s: %s", paste_id, str(e))
            raise StorageUnavailableError(
                context={"operation": "get", "original_error": type(e).__name__},
            ) from e
        except SQLAlchemyError as e:
            logger.error("Database error fetching paste %s: %s", paste_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve the paste. Please try again.",
                context={"paste_id": str(paste_id)},
            ) from e

        if paste is None:
            raise NotFoundError(resource="paste", resource_id=str(paste_id))
        return paste

    @staticmethod
    async def _rollback(db: AsyncSession) -> None:
        # A dead connection can fail the rollback too; the original error is
        # the one worth reporting
        try:
            await db.rollback()
        except Exception:
            logger.error("Rollback after failed insert also failed", exc_info=True)


# ── Singleton Instance ────────────────────────────────────────────────────
# PasteStore is stateless; sessions are passed per call
paste_store = PasteStore()
