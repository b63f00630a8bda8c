"""
Redis-backed rescoring lock and matches cache
"""
from typing import Any, Dict, List, Optional
from uuid import UUID

from application.services.lifecycle.interfaces import IMatchesCache
from application.services.rescoring.interfaces import ICandidateLock
from core.config import settings
from .redis_cache_service import RedisCacheService


class RedisCandidateLock(ICandidateLock):
    """One rescoring pass per candidate at a time"""

    def __init__(self, cache: RedisCacheService, ttl_seconds: Optional[int] = None):
        self.cache = cache
        self.ttl_seconds = ttl_seconds or settings.RESCORING_LOCK_TTL_SECONDS

    @staticmethod
    def key(candidate_id: UUID) -> str:
        return f"rescoring:lock:{candidate_id}"

    async def acquire(self, candidate_id: UUID) -> bool:
        return await self.cache.acquire_lock(self.key(candidate_id), self.ttl_seconds)

    async def release(self, candidate_id: UUID) -> None:
        await self.cache.release_lock(self.key(candidate_id))


class RedisMatchesCache(IMatchesCache):
    def __init__(self, cache: RedisCacheService, ttl_seconds: Optional[int] = None):
        self.cache = cache
        self.ttl_seconds = ttl_seconds or settings.MATCHES_CACHE_TTL_SECONDS

    @staticmethod
    def key(candidate_id: UUID) -> str:
        return f"matches:{candidate_id}"

    async def get(self, candidate_id: UUID) -> Optional[List[Dict[str, Any]]]:
        value = await self.cache.get_json(self.key(candidate_id))
        return value if isinstance(value, list) else None

    async def set(self, candidate_id: UUID, items: List[Dict[str, Any]]) -> None:
        await self.cache.set_json(self.key(candidate_id), items, self.ttl_seconds)

    async def invalidate(self, candidate_id: UUID) -> None:
        await self.cache.delete(self.key(candidate_id))
