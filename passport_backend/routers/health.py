from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime, timezone
import logging

from ..dependencies import get_db_session, get_cache
from ..services.cache import CacheService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_db_session),
    cache: CacheService = Depends(get_cache),
):
    """Проверка работоспособности сервиса"""
    db_ok = False
    try:
        await db.execute(select(1))
        db_ok = True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")

    # без Redis сервис работает, только без кэша отзывов
    cache_ok = await cache.ping()

    return {
        "status": "healthy" if db_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected" if db_ok else "disconnected",
        "cache": "connected" if cache_ok else "disconnected",
        "service": "expert-rating-api",
    }
