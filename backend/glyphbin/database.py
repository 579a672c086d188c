"""
Glyphbin Backend — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling, provides a session
       dependency that auto-commits on success and auto-rolls-back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Backends:
    SQLite (aiosqlite) is the default and is what the tests use.
    PostgreSQL (asyncpg) is the production target. Pool sizing options are
    only passed for server databases; SQLAlchemy picks a suitable pool for
    SQLite on its own and rejects pool_size for some SQLite URLs.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from glyphbin.config import settings


def _engine_options() -> Dict[str, Any]:
    """Builds create_async_engine keyword arguments for the configured backend."""
    options: Dict[str, Any] = {
        # SQL echo is only useful during development
        "echo": settings.log_level == "DEBUG",
    }
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,  # Recycle after 1 hour to prevent stale connections
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options())

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: the PasteStore commits inside insert(), and the
# pipeline still reads the Paste's attributes afterwards
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class so that they register with a single
    metadata object (used by Alembic and by init_models()).
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    The PasteStore commits its own insert, so the commit here is a no-op for
    paste submissions. It is kept so that any handler using the session gets
    the same transactional guarantees.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise  # Re-raise so the global error handler can respond appropriately
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_models() -> None:
    """
    What:  Creates all tables known to Base.metadata if they do not exist.
    When:  Called during startup when settings.db_create_tables is enabled.
    Why:   Lets a fresh SQLite deployment run without a migration step.
           PostgreSQL deployments normally disable it and run Alembic instead.
    """
    # Model modules must be imported so their tables are registered
    from glyphbin.models import paste  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called during application shutdown (lifespan handler).
    """
    await engine.dispose()
