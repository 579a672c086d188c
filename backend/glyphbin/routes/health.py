"""
Glyphbin Backend — Health Check Route
======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 against the database and reports the size of the
       highlighter catalog.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)

The highlighter has no "down" state: if it could not be built, the
server never finished starting.
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text

from glyphbin import __version__
from glyphbin.database import engine
from glyphbin.dependencies import get_highlighter
from glyphbin.schemas.paste import HealthResponse
from glyphbin.services.highlighter import Highlighter

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    response: Response,
    highlighter: Highlighter = Depends(get_highlighter),
) -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        languages=len(highlighter.list_languages()),
        uptime_seconds=round(time.time() - _start_time, 2),
    )
