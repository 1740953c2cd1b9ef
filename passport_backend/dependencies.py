# passport_backend/dependencies.py
"""
Зависимости FastAPI: сессия БД, кэш, сервисы и аутентификация
"""

import logging
from functools import lru_cache
from typing import Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from passport_shared.config import config
from .database import get_db
from .schemas.auth import Actor
from .services.cache import CacheService
from .services.service_records import ServiceRecordService
from .services.reviews import ReviewService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

get_db_session = get_db


@lru_cache
def get_cache() -> CacheService:
    """Один клиент Redis на процесс"""
    return CacheService(config.REDIS_URL, default_ttl=config.REVIEWS_CACHE_TTL)


def get_service_record_service() -> ServiceRecordService:
    return ServiceRecordService()


def get_review_service(cache: CacheService = Depends(get_cache)) -> ReviewService:
    return ReviewService(cache)


def _parse_uuid_claim(payload: dict, *names: str) -> Optional[UUID]:
    for name in names:
        value = payload.get(name)
        if value:
            return UUID(str(value))
    return None


def decode_access_token(token: str) -> Actor:
    """Разбор bearer-токена в Actor.

    `sub` - ID пользователя; `expert_id` (или `expertId`) есть только
    у экспертов.
    """
    payload = jwt.decode(token, config.JWT_SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    subject_id = _parse_uuid_claim(payload, "sub")
    if subject_id is None:
        raise jwt.InvalidTokenError("Token has no subject")
    return Actor(
        subject_id=subject_id,
        expert_id=_parse_uuid_claim(payload, "expert_id", "expertId"),
    )


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    """Текущий пользователь из заголовка Authorization"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_access_token(credentials.credentials)
    except (jwt.InvalidTokenError, ValueError) as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
