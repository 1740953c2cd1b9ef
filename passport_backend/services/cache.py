# passport_backend/services/cache.py
import json
from typing import Any, Optional
from uuid import UUID
import redis.asyncio as redis
from redis.exceptions import RedisError
import logging

logger = logging.getLogger(__name__)


def expert_reviews_key(expert_id: UUID, limit: int) -> str:
    return f"reviews:expert:{expert_id}:limit:{limit}"


def expert_reviews_pattern(expert_id: UUID) -> str:
    return f"reviews:expert:{expert_id}:*"


class CacheService:
    """Кэш Redis для публичных выборок отзывов.

    Redis здесь необязателен: ошибка чтения превращается в промах,
    ошибки записи и очистки только логируются.
    """

    def __init__(self, redis_url: str, namespace: str = "expert-rating", default_ttl: int = 300):
        self.redis = redis.from_url(redis_url, decode_responses=True)
        self.namespace = namespace
        self.default_ttl = default_ttl

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Получить значение по ключу"""
        try:
            raw = await self.redis.get(self._key(key))
        except RedisError as e:
            logger.error(f"Cache get error for key {key}: {e}")
            return None

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Corrupted cache entry {key}, dropping it")
            await self.delete(key)
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Сохранить значение на ttl секунд"""
        try:
            await self.redis.setex(self._key(key), ttl or self.default_ttl, json.dumps(value, default=str))
            return True
        except RedisError as e:
            logger.error(f"Cache set error for key {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        try:
            await self.redis.delete(self._key(key))
            return True
        except RedisError as e:
            logger.error(f"Cache delete error for key {key}: {e}")
            return False

    async def clear_pattern(self, pattern: str) -> int:
        """Удалить все ключи по паттерну (через SCAN, без блокировки Redis)"""
        try:
            keys = [key async for key in self.redis.scan_iter(match=self._key(pattern))]
            if keys:
                await self.redis.delete(*keys)
            logger.debug(f"Cache cleared {len(keys)} keys for {pattern}")
            return len(keys)
        except RedisError as e:
            logger.error(f"Cache clear pattern error for {pattern}: {e}")
            return 0

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        await self.redis.aclose()
