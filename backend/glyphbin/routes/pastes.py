"""
Glyphbin Backend — Paste API Route Handlers
============================================

What:  JSON API for submitting pastes, fetching them, and listing languages.
Why:   Programmatic access (curl, editor plugins) alongside the HTML pages.
How:   Extracts request data, delegates to PasteService, returns JSON.

Caching Strategy:
    - POST /api/pastes: never cached
    - GET /api/pastes/{id}: cached for a year, marked immutable, since a
      paste can never change after creation
    - GET /api/languages: short cache; the catalog only changes on redeploy
"""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from glyphbin.database import get_db_session
from glyphbin.dependencies import get_paste_service
from glyphbin.schemas.paste import (
    ErrorResponse,
    LanguageListResponse,
    PasteCreate,
    PasteCreatedResponse,
    PasteResponse,
)
from glyphbin.services.identifiers import format_id
from glyphbin.services.paste_service import PasteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Pastes"])


@router.get(
    "/languages",
    response_model=LanguageListResponse,
    summary="List known grammar names",
)
async def list_languages(
    response: Response,
    service: PasteService = Depends(get_paste_service),
) -> LanguageListResponse:
    response.headers["Cache-Control"] = "public, max-age=3600"
    return LanguageListResponse(languages=service.list_languages())


@router.post(
    "/pastes",
    status_code=201,
    response_model=PasteCreatedResponse,
    responses={
        201: {"description": "Paste stored", "model": PasteCreatedResponse},
        400: {"description": "Empty or oversized content", "model": ErrorResponse},
        503: {"description": "Storage unavailable", "model": ErrorResponse},
    },
    summary="Submit a paste",
    description=(
        "Stores the text and returns its ID. The text is highlighted once, at "
        "submission; unknown language names are rendered as plain text."
    ),
)
async def create_paste(
    payload: PasteCreate,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    service: PasteService = Depends(get_paste_service),
) -> PasteCreatedResponse:
    paste_id = await service.submit(db, language=payload.language, content=payload.content)
    canonical = format_id(paste_id)
    response.headers["Location"] = f"/api/pastes/{canonical}"
    return PasteCreatedResponse(id=canonical, url=f"/paste/{canonical}")


@router.get(
    "/pastes/{paste_id}",
    response_model=PasteResponse,
    responses={
        200: {"description": "Stored paste", "model": PasteResponse},
        400: {"description": "Malformed paste ID", "model": ErrorResponse},
        404: {"description": "Paste not found", "model": ErrorResponse},
        503: {"description": "Storage unavailable", "model": ErrorResponse},
    },
    summary="Fetch a paste by ID",
)
async def get_paste(
    paste_id: str,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    service: PasteService = Depends(get_paste_service),
) -> PasteResponse:
    """
    paste_id is taken as a plain string rather than a UUID path parameter so
    that malformed IDs reach PasteService and come back as 400
    invalid_identifier instead of FastAPI's generic 422.
    """
    result = await service.fetch(db, paste_id)
    response.headers["Cache-Control"] = "public, max-age=31536000, immutable"
    return result
