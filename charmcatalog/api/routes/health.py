"""Health check routes."""

from fastapi import APIRouter, Depends, Response

from charmcatalog.api.deps import get_db
from charmcatalog.db.database import Database

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Health status.
    """
    return {"status": "healthy"}


@router.get("/ready")
async def readiness_check(db: Database = Depends(get_db)) -> dict:
    """Readiness check endpoint.

    Args:
        db: Database instance.

    Returns:
        Readiness status with database health.
    """
    db_healthy = await db.health_check()
    if not db_healthy:
        return {
            "status": "not_ready",
            "errors": ["database"],
            "details": {"database": db_healthy},
        }
    return {"status": "ready", "details": {"database": db_healthy}}


@router.head("/health")
async def health_check_head() -> Response:
    """Health check HEAD endpoint.

    Returns:
        Empty response with 200 status.
    """
    return Response(status_code=200)
