"""
Glyphbin Backend — Application Package Initializer
===================================================

What: Marks the `glyphbin` directory as a Python package.
Why:  Enables module imports like `from glyphbin.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    This backend follows a clean layered architecture:

    ┌─────────────────────────────────────┐
    │      Routes (JSON API + Pages)      │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Pipeline, Highlighter,  │  ← Orchestration, rendering,
    │        Identifiers, Store)          │     storage contract
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the database or Pygments directly; they call the
    PasteService, which owns the submit and fetch flows.
"""

__version__ = "1.0.0"
