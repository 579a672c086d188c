"""Jinja2 environment for the server-rendered pages."""

from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import Optional

from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def rfc2822(value: Optional[datetime]) -> str:
    """Formats a stored timestamp like 'Sat, 17 Oct 2026 11:33:00 +0000'."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value)


templates.env.filters["rfc2822"] = rfc2822
