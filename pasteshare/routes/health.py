"""
PasteShare — Health Check Route
===============================

What:  Liveness and database reachability for monitors and load balancers.
How:   Runs SELECT 1 on a request-scoped session; always answers 200 and
       reports the outcome in the body ("healthy" / "unhealthy").
"""

import logging
import time

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pasteshare import __version__
from pasteshare.database import get_db_session
from pasteshare.schemas.paste import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_started_at = time.monotonic()


async def _database_reachable(db: AsyncSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Health check: database unreachable: %s", exc)
        return False
    return True


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(db: AsyncSession = Depends(get_db_session)) -> HealthResponse:
    reachable = await _database_reachable(db)
    return HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        database="connected" if reachable else "disconnected",
        uptime_seconds=round(time.monotonic() - _started_at, 2),
    )
