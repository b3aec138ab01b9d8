"""
Health check endpoints.

- /health: Overview with database status
- /health/ready: Readiness probe (503 when the database is unreachable)
- /health/live: Liveness probe
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.config import settings
from backend.core.database import get_db
from backend.models.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


def _database_ok(db: Session) -> bool:
    try:
        db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False


@router.get("", response_model=HealthResponse)
async def health_check(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Check health of the service.

    Returns:
        HealthResponse with database status
    """
    db_healthy = _database_ok(db)
    return HealthResponse(
        status="healthy" if db_healthy else "degraded",
        version=settings.APP_VERSION,
        database=db_healthy,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/ready")
async def readiness_check(db: Session = Depends(get_db)):
    """
    Container readiness probe.
    Returns 200 if service is ready to accept traffic.
    """
    if _database_ok(db):
        return {"status": "ready"}
    # Don't expose internal error details
    return JSONResponse(
        status_code=503,
        content={"status": "not ready", "error": "Database connection failed"},
    )


@router.get("/live")
async def liveness_check() -> dict:
    """
    Container liveness probe.
    Returns 200 if service is alive.
    """
    return {"status": "alive"}
