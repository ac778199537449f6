"""Health check endpoint."""
import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from teapos.core.config import settings
from teapos.db.database import get_db

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check(request: Request, db: AsyncSession = Depends(get_db)):
    """Liveness plus a database ping.

    The POS keeps selling from the built-in catalog when the database is
    down, so an unreachable database reports ``degraded`` rather than failing.
    """
    logger.debug(
        f"[HEALTH] Health check requested - Client: {request.client.host if request.client else 'unknown'}"
    )
    try:
        await db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.warning(f"[HEALTH] Database unreachable: {e}")
        database = "unreachable"

    return {
        "status": "healthy" if database == "ok" else "degraded",
        "database": database,
        "store": settings.store_name,
    }
