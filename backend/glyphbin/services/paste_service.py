"""
Glyphbin Backend — Paste Service (Rendering Pipeline)
======================================================

What:  Orchestrates identifiers, highlighter and store for the two use cases:
       submitting a paste and fetching one.
Why:   Keeps the submit/fetch rules out of the HTTP layer so they can be
       tested with a mock session and reused by both the JSON API and the
       HTML pages.
Who:   Built once in the lifespan handler; called by routes via
       the get_paste_service dependency.

Submit Flow:
    ┌──────────┐   ┌───────────┐   ┌──────────────┐   ┌──────────────────┐
    │ Validate │──▶│ Highlight │──▶│ New ID+token │──▶│ Store (create-   │
    │ (size)   │   │ (once)    │   │              │   │ only, 1 retry)   │
    └──────────┘   └───────────┘   └──────────────┘   └──────────────────┘

    Render-once: the HTML is computed here and stored. Fetch returns it
    as-is, so reads cost the same regardless of paste size or language.

Retry Policy:
    ConflictError       → new ID, one more attempt (tenacity), then propagate
    StorageUnavailable  → propagate immediately, nothing was committed
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
)

from glyphbin.config import settings
from glyphbin.exceptions import ConflictError, ValidationError
from glyphbin.models.paste import Paste
from glyphbin.schemas.paste import PasteResponse
from glyphbin.services.highlighter import PLAIN_TEXT, Highlighter
from glyphbin.services.identifiers import format_id, new_id, new_token, parse_id
from glyphbin.services.paste_store import PasteStore, paste_store

logger = logging.getLogger(__name__)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo on the way back; stored values are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PasteService:
    """
    Submit and fetch pastes.

    Stateless apart from its collaborators: the shared read-only Highlighter
    and the stateless PasteStore. The database session is passed per call.
    """

    def __init__(
        self,
        highlighter: Highlighter,
        store: Optional[PasteStore] = None,
        max_paste_size: Optional[int] = None,
    ):
        self.highlighter = highlighter
        self.store = store or paste_store
        self.max_paste_size = max_paste_size or settings.max_paste_size

    def list_languages(self) -> List[str]:
        return self.highlighter.list_languages()

    async def submit(
        self,
        db: AsyncSession,
        language: str,
        content: Union[str, bytes],
    ) -> uuid.UUID:
        """
        Store a new paste and return its ID.

        Args:
            db: Async database session
            language: Grammar label, kept as given; unknown names render as plain text
            content: Paste text, or its raw UTF-8 bytes

        Returns:
            The new paste's identifier.

        Raises:
            ValidationError: Empty content or content over max_paste_size bytes
            ConflictError: Two ID collisions in a row
            StorageUnavailableError: Database unreachable (no retry)
            DatabaseError: Any other storage failure
        """
        if isinstance(content, bytes):
            raw = content
            text = content.decode("utf-8", errors="replace")
        else:
            raw = content.encode("utf-8")
            text = content

        if not raw:
            raise ValidationError(message="Paste content must not be empty", field="content")
        if len(raw) > self.max_paste_size:
            raise ValidationError(
                message=(
                    f"Paste is too large ({len(raw)} bytes). "
                    f"Maximum size is {self.max_paste_size} bytes."
                ),
                field="content",
                context={"size": len(raw), "max_size": self.max_paste_size},
            )

        language = (language or "").strip() or PLAIN_TEXT
        rendered = self.highlighter.render(text, language)

        paste = await self._insert_new(
            db,
            language=language,
            content=raw,
            rendered=rendered,
            deletion_token=new_token().bytes,
        )
        logger.info(
            "Paste %s stored: language=%s (%s), %d bytes",
            paste.paste_id, language, self.highlighter.resolve_language(language), len(raw),
        )
        return paste.paste_id

    @retry(
        stop=stop_after_attempt(2),
        retry=retry_if_exception_type(ConflictError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _insert_new(
        self,
        db: AsyncSession,
        language: str,
        content: bytes,
        rendered: str,
        deletion_token: bytes,
    ) -> Paste:
        # A fresh ID on every attempt; the rendering and token are reused
        paste = Paste(
            id=new_id().bytes,
            owner_id=None,
            created_at=datetime.now(timezone.utc),
            expires_at=None,
            language=language,
            content=content,
            rendered=rendered,
            deletion_token=deletion_token,
        )
        await self.store.insert(db, paste)
        return paste

    async def fetch(self, db: AsyncSession, paste_id: str) -> PasteResponse:
        """
        Look up a paste by its external ID string.

        Raises:
            InvalidIdentifierError: paste_id is not a well-formed identifier
            NotFoundError: No paste with this ID exists
            StorageUnavailableError: Database unreachable
        """
        identifier = parse_id(paste_id)
        paste = await self.store.get(db, identifier)
        return PasteResponse(
            id=format_id(identifier),
            language=paste.language,
            created_at=_as_utc(paste.created_at),
            expires_at=_as_utc(paste.expires_at),
            rendered=paste.rendered,
        )
