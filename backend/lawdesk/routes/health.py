"""
LawDesk Backend — Health Check Route
======================================

What:  Liveness and database probe for Docker health checks and load balancers.
Why:   SELECT 1 goes through the pool and the network, so a stale connection
       or a down database shows up here and not only in user requests.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from lawdesk import __version__
from lawdesk.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    """Runs SELECT 1 against the database and reports uptime."""
    db_status = "connected"
    overall = "healthy"

    try:
        async with request.app.state.database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
