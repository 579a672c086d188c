"""
FastAPI dependencies for objects built in the lifespan handler.

The highlighter catalog and the pipeline are created once at startup and
kept on app.state; routes receive them through these functions, which
tests replace with app.dependency_overrides.
"""

from fastapi import Request

from glyphbin.services.highlighter import Highlighter
from glyphbin.services.paste_service import PasteService


def get_highlighter(request: Request) -> Highlighter:
    return request.app.state.highlighter


def get_paste_service(request: Request) -> PasteService:
    return request.app.state.paste_service
