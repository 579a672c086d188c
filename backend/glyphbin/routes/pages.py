"""
Glyphbin Backend — HTML Page Handlers
======================================

What:  Server-rendered pages: the submit form, form submission, and the
       paste view.
How:   Jinja2 templates fed by PasteService. Form posts redirect (303) to
       the new paste's page so a browser refresh does not resubmit.

Routes:
    GET  /                 submit form with the language selector
    POST /paste/new        form submission → 303 to /paste/{id}
    GET  /paste/{paste_id} rendered paste with created/expiry dates
"""

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from glyphbin.database import get_db_session
from glyphbin.dependencies import get_paste_service
from glyphbin.services.highlighter import PLAIN_TEXT
from glyphbin.services.identifiers import format_id
from glyphbin.services.paste_service import PasteService
from glyphbin.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"], include_in_schema=False)


@router.get("/", response_class=HTMLResponse)
async def index(
    request: Request,
    service: PasteService = Depends(get_paste_service),
):
    return templates.TemplateResponse(
        request,
        "index.html",
        {"languages": service.list_languages(), "default_language": PLAIN_TEXT},
    )


@router.post("/paste/new")
async def new_paste(
    language: str = Form(default=PLAIN_TEXT),
    content: str = Form(default=""),
    db: AsyncSession = Depends(get_db_session),
    service: PasteService = Depends(get_paste_service),
) -> RedirectResponse:
    paste_id = await service.submit(db, language=language, content=content)
    return RedirectResponse(url=f"/paste/{format_id(paste_id)}", status_code=303)


@router.get("/paste/{paste_id}", response_class=HTMLResponse)
async def load_paste(
    request: Request,
    paste_id: str,
    db: AsyncSession = Depends(get_db_session),
    service: PasteService = Depends(get_paste_service),
):
    paste = await service.fetch(db, paste_id)
    response = templates.TemplateResponse(request, "paste.html", {"paste": paste})
    response.headers["Cache-Control"] = "public, max-age=31536000, immutable"
    return response
