"""
Glyphbin Backend — Application Configuration
=============================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
       Fails fast on a bad database URL or log level.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time; validated before app starts.

Note:
    The highlight theme is only checked for existence when the Highlighter is
    built in the lifespan handler. Pygments is the authority on which themes
    exist, so the check lives next to the catalog rather than here.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Drivers that SQLAlchemy can drive through create_async_engine
ASYNC_DRIVERS = ("+aiosqlite", "+asyncpg", "+psycopg", "+aiomysql", "+asyncmy")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for local development (a SQLite file
    next to the working directory). Production deployments point
    DATABASE_URL at PostgreSQL with the asyncpg driver.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Format: sqlite+aiosqlite:///path.db or postgresql+asyncpg://user:pw@host/db
    database_url: str = Field(
        default="sqlite+aiosqlite:///./glyphbin.db",
        description="Async SQLAlchemy connection URL",
    )

    # Pool sizing only applies to server databases; SQLite ignores these
    db_pool_size: int = Field(default=20, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # What: Run metadata.create_all at startup
    # Turn off when the schema is managed with `alembic upgrade head`
    db_create_tables: bool = Field(default=True)

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Rejects synchronous drivers, which create_async_engine cannot use."""
        scheme = v.split("://", 1)[0]
        if not scheme.endswith(ASYNC_DRIVERS):
            raise ValueError(
                f"database_url '{scheme}://...' must use an async driver "
                f"(one of: {', '.join(d.lstrip('+') for d in ASYNC_DRIVERS)})"
            )
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    # ── Highlighting ──────────────────────────────────────────────────────
    # What: Pygments style used for every rendered paste
    # An unknown name stops the server at startup
    highlight_theme: str = Field(default="monokai", min_length=1)

    # What: Maximum paste size in bytes (UTF-8 encoded content)
    # Default: 512KB; rendering cost grows linearly with content size
    max_paste_size: int = Field(default=524_288, ge=1_024, le=10_485_760)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (parsed by the property below)
    cors_origins: str = Field(default="http://localhost:8000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # DATABASE_URL and database_url both work
    }


# Singleton instance, imported throughout the application
settings = Settings()
