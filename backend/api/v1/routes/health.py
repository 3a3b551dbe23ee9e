from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text

from common.core.config import settings
from common.db.session import get_db
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/")
async def health_check(request: Request):
    # Unlimited and unlogged: probes hit this every few seconds
    return {"status": "healthy", "service": "payments-service"}


@router.get("/ready")
async def readiness_check(request: Request, db: AsyncSession = Depends(get_db)):
    """Database reachable and Paylink credentials present."""
    database = "connected"
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
    except Exception as e:
        logger.error(f"Database readiness check failed: {e}")
        database = "disconnected"

    ready = database == "connected" and settings.paylink_configured
    return {
        "status": "ready" if ready else "not_ready",
        "database": database,
        "paylinkConfigured": settings.paylink_configured,
    }
