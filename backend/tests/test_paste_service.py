"""
Glyphbin Backend — Paste Service Unit Tests
============================================

What:  Tests for the submit/fetch pipeline.
How:   Mock PasteStore for the retry and error rules; a throwaway SQLite
       database for the end-to-end round trip.

What we test:
    ✅ Submit renders once and stores the result under a fresh ID
    ✅ One ID collision is retried with a new ID; two propagate
    ✅ Storage outages propagate without a retry
    ✅ Empty and oversized content is rejected before anything is stored
    ✅ Fetch distinguishes a malformed ID from a missing paste
    ✅ The collision retry works against a real SQLite primary key
"""

import uuid
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from glyphbin.exceptions import (
    ConflictError,
    InvalidIdentifierError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from glyphbin.models.paste import Paste
from glyphbin.services.highlighter import PLAIN_TEXT
from glyphbin.services.identifiers import format_id, new_id
from glyphbin.services.paste_service import PasteService


def inserted_pastes(store):
    """The Paste objects handed to store.insert, in call order."""
    return [call.args[1] for call in store.insert.await_args_list]


class TestPasteServiceSubmit:

    @pytest.fixture(autouse=True)
    def service(self, highlighter):
        self.store = MagicMock()
        self.store.insert = AsyncMock(return_value=None)
        self.service = PasteService(highlighter, store=self.store, max_paste_size=1024)
        return self.service

    @pytest.mark.asyncio
    async def test_submit_success(self, service, highlighter, mock_db_session):
        paste_id = await service.submit(mock_db_session, language="Python", content="x = 1\n")

        assert isinstance(paste_id, uuid.UUID)
        self.store.insert.assert_awaited_once()
        paste = inserted_pastes(self.store)[0]
        assert paste.paste_id == paste_id
        assert paste.language == "Python"
        assert paste.content == b"x = 1\n"
        assert paste.rendered == highlighter.render("x = 1\n", "Python")
        assert len(paste.deletion_token) == 16
        assert paste.deletion_token != paste.id
        assert paste.expires_at is None

    @pytest.mark.asyncio
    async def test_submit_accepts_bytes(self, service, mock_db_session):
        await service.submit(mock_db_session, language="Python", content="café\n".encode("utf-8"))
        paste = inserted_pastes(self.store)[0]
        assert paste.content == "café\n".encode("utf-8")
        assert "café" in paste.rendered

    @pytest.mark.asyncio
    async def test_unknown_language_kept_as_label(self, service, highlighter, mock_db_session):
        await service.submit(mock_db_session, language="NoSuchLanguage123", content="a\n")
        paste = inserted_pastes(self.store)[0]
        assert paste.language == "NoSuchLanguage123"
        assert paste.rendered == highlighter.render("a\n", PLAIN_TEXT)

    @pytest.mark.asyncio
    async def test_blank_language_is_plain_text(self, service, mock_db_session):
        await service.submit(mock_db_session, language="  ", content="a\n")
        assert inserted_pastes(self.store)[0].language == PLAIN_TEXT

    @pytest.mark.asyncio
    async def test_conflict_retried_with_new_id(self, service, mock_db_session):
        """First insert collides; the retry uses a different ID and succeeds."""
        self.store.insert.side_effect = [ConflictError(resource_id="taken"), None]

        paste_id = await service.submit(mock_db_session, language="Python", content="x\n")

        assert self.store.insert.await_count == 2
        first, second = inserted_pastes(self.store)
        assert first.id != second.id
        assert second.paste_id == paste_id
        assert first.rendered == second.rendered
        assert first.deletion_token == second.deletion_token

    @pytest.mark.asyncio
    async def test_second_conflict_propagates(self, service, mock_db_session):
        self.store.insert.side_effect = ConflictError(resource_id="taken")

        with pytest.raises(ConflictError):
            await service.submit(mock_db_session, language="Python", content="x\n")
        assert self.store.insert.await_count == 2

    @pytest.mark.asyncio
    async def test_unavailable_not_retried(self, service, mock_db_session):
        self.store.insert.side_effect = StorageUnavailableError()

        with pytest.raises(StorageUnavailableError):
            await service.submit(mock_db_session, language="Python", content="x\n")
        self.store.insert.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_content_rejected(self, service, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await service.submit(mock_db_session, language="Python", content="")
        assert exc_info.value.context["field"] == "content"
        self.store.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_oversized_content_rejected(self, service, mock_db_session):
        with pytest.raises(ValidationError) as exc_info:
            await service.submit(mock_db_session, language="Python", content="x" * 1025)
        assert exc_info.value.context["max_size"] == 1024
        self.store.insert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_size_limit_counts_bytes(self, service, mock_db_session):
        """512 two-byte characters fit exactly; one more does not."""
        await service.submit(mock_db_session, language=PLAIN_TEXT, content="é" * 512)
        with pytest.raises(ValidationError):
            await service.submit(mock_db_session, language=PLAIN_TEXT, content="é" * 513)


class TestPasteServiceFetch:

    @pytest.fixture(autouse=True)
    def service(self, highlighter):
        self.store = MagicMock()
        self.store.get = AsyncMock()
        self.service = PasteService(highlighter, store=self.store)
        return self.service

    @pytest.mark.asyncio
    async def test_fetch_invalid_id(self, service, mock_db_session):
        with pytest.raises(InvalidIdentifierError):
            await service.fetch(mock_db_session, "not-a-paste-id")
        self.store.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_not_found_propagates(self, service, mock_db_session):
        self.store.get.side_effect = NotFoundError(resource="paste", resource_id="x")

        with pytest.raises(NotFoundError):
            await service.fetch(mock_db_session, format_id(new_id()))

    @pytest.mark.asyncio
    async def test_fetch_returns_stored_rendering(self, service, mock_db_session, sample_paste_data):
        naive = dict(sample_paste_data, created_at=datetime(2024, 1, 15, 12, 0, 0))
        paste = Paste(**naive)
        self.store.get.return_value = paste

        result = await service.fetch(mock_db_session, paste.paste_id.hex)

        self.store.get.assert_awaited_once_with(mock_db_session, paste.paste_id)
        assert result.id == str(paste.paste_id)
        assert result.rendered == sample_paste_data["rendered"]
        assert result.created_at.tzinfo is not None


class TestPasteServiceRoundTrip:

    @pytest.mark.asyncio
    async def test_submit_then_fetch(self, paste_service, highlighter, db_session_factory):
        content = "import os\n\n\ndef main():\n    return os.getcwd()\n"

        async with db_session_factory() as session:
            paste_id = await paste_service.submit(session, language="Python", content=content)

        async with db_session_factory() as session:
            result = await paste_service.fetch(session, format_id(paste_id))

        assert result.id == format_id(paste_id)
        assert result.language == "Python"
        assert result.rendered == highlighter.render(content, "Python")
        assert result.rendered.count('class="line"') == len(content.splitlines())

    @pytest.mark.asyncio
    async def test_fetch_unknown_id(self, paste_service, db_session_factory):
        async with db_session_factory() as session:
            with pytest.raises(NotFoundError):
                await paste_service.fetch(session, format_id(new_id()))

    @pytest.mark.asyncio
    async def test_collision_on_real_primary_key(
        self, paste_service, db_session_factory, sample_paste_data, monkeypatch
    ):
        """An ID already in the table is retried once with a fresh one."""
        async with db_session_factory() as session:
            await paste_service.store.insert(session, Paste(**sample_paste_data))

        taken = Paste(**sample_paste_data).paste_id
        fresh = new_id()
        monkeypatch.setattr(
            "glyphbin.services.paste_service.new_id", MagicMock(side_effect=[taken, fresh])
        )

        async with db_session_factory() as session:
            paste_id = await paste_service.submit(session, language="Go", content="package main\n")
        assert paste_id == fresh

        async with db_session_factory() as session:
            original = await paste_service.fetch(session, format_id(taken))
            stored = await paste_service.fetch(session, format_id(fresh))
        assert original.language == "Python"
        assert stored.language == "Go"

    @pytest.mark.asyncio
    async def test_two_real_collisions_propagate(
        self, paste_service, db_session_factory, sample_paste_data, monkeypatch
    ):
        async with db_session_factory() as session:
            await paste_service.store.insert(session, Paste(**sample_paste_data))

        taken = Paste(**sample_paste_data).paste_id
        monkeypatch.setattr(
            "glyphbin.services.paste_service.new_id", MagicMock(side_effect=[taken, taken])
        )

        async with db_session_factory() as session:
            with pytest.raises(ConflictError):
                await paste_service.submit(session, language="Go", content="package main\n")
