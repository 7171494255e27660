from fastapi import APIRouter
from sqlalchemy import text

from stockroom.database import get_session

router = APIRouter(tags=["health"])

@router.get("/health")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "Stock Replenishment Service"}

@router.get("/health/db")
async def database_health():
    """Check database connectivity and the stock tables"""
    try:
        async with get_session() as session:
            await session.execute(text("SELECT 1"))

            counts = {}
            for table in ("stock_entries", "replenishment_notifications"):
                result = await session.execute(text(f"SELECT COUNT(*) FROM {table}"))
                counts[table] = result.scalar()

            return {
                "status": "healthy",
                "database": "connected",
                "row_counts": counts
            }
    except Exception as e:
        return {
            "status": "unhealthy",
            "database": "error",
            "error": str(e)
        }
