"""Health check API endpoint."""

from fastapi import APIRouter

from planet.db.database import check_connection

router = APIRouter(tags=["Health"])


@router.get("")
async def health_check():
    """Health check endpoint, including database reachability."""
    database_ok = check_connection()
    return {"status": "healthy" if database_ok else "degraded", "database": database_ok}
