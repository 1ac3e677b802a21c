from fastapi import APIRouter, HTTPException, status
from sqlalchemy import text

from perks.core.database import async_engine
from perks.managers.redis_manager import redis_manager
from perks.models.base import utcnow

router = APIRouter()


@router.get("")
async def health_check():
    return {
        "success": True,
        "message": "Server is running",
        "data": {"status": "healthy", "timestamp": utcnow().isoformat()},
    }


@router.get("/redis")
async def redis_health():
    if not await redis_manager.ping():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Redis connection failed"
        )
    return {
        "success": True,
        "message": "Redis is reachable",
        "data": {"service": "redis", "connected": True},
    }


@router.get("/database")
async def database_health():
    try:
        async with async_engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Database health check failed: {str(e)}"
        )
    return {
        "success": True,
        "message": "Database is reachable",
        "data": {"service": "database", "connected": True},
    }
