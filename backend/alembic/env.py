"""
Alembic Migration Environment
==============================

What:  Runs migrations against settings.database_url with the async engine.
Who:   Called by `alembic` CLI commands (upgrade, downgrade, revision).

Offline mode (`alembic upgrade head --sql`) prints the DDL instead of
connecting, for PostgreSQL deployments that apply schema changes by hand.
SQLite migrations run in batch mode since SQLite cannot ALTER most things
in place.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from glyphbin.config import settings
from glyphbin.database import Base
from glyphbin.models.paste import Paste  # noqa: F401  (registers the table)

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)


def _configure(**options) -> None:
    context.configure(
        target_metadata=Base.metadata,
        render_as_batch=settings.is_sqlite,
        **options,
    )
    with context.begin_transaction():
        context.run_migrations()


async def _run_online() -> None:
    # Migrations are one-shot; a pool would only hold a connection open
    engine = create_async_engine(settings.database_url, poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(lambda sync_conn: _configure(connection=sync_conn))
    await engine.dispose()


if context.is_offline_mode():
    _configure(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    asyncio.run(_run_online())
