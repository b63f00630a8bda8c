import json
from typing import Optional, Any
import redis.asyncio as redis
from redis.asyncio import Redis

from core.config import settings
from core.logging_config import logger


class RedisCacheService:
    """Redis side cache for match listings and per-candidate locks"""

    def __init__(self, redis_url: Optional[str] = None):
        self._redis_url = redis_url or settings.REDIS_URL
        self._redis: Optional[Redis] = None

    @property
    def connected(self) -> bool:
        return self._redis is not None

    async def connect(self):
        """Connect to Redis"""
        try:
            self._redis = redis.from_url(
                self._redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=settings.REDIS_SOCKET_CONNECT_TIMEOUT,
                socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            )
            await self._redis.ping()
            logger.info(f"Connected to Redis: {self._redis_url}")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            # Don't raise - allow app to run without cache
            self._redis = None

    async def disconnect(self):
        """Disconnect from Redis"""
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            logger.info("Disconnected from Redis")

    async def get(self, key: str) -> Optional[str]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        if not self._redis:
            return None

        try:
            return await self._redis.get(key)
        except Exception as e:
            logger.error(f"Redis GET error for key {key}: {e}")
            return None

    async def set(self, key: str, value: str, ttl: int = 3600):
        """
        Set value in cache with TTL

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time to live in seconds (default 1 hour)
        """
        if not self._redis:
            return

        try:
            await self._redis.setex(key, ttl, value)
            logger.debug(f"Cached key {key} with TTL {ttl}s")
        except Exception as e:
            logger.error(f"Redis SET error for key {key}: {e}")

    async def delete(self, key: str):
        if not self._redis:
            return

        try:
            await self._redis.delete(key)
            logger.debug(f"Deleted key {key}")
        except Exception as e:
            logger.error(f"Redis DELETE error for key {key}: {e}")

    async def get_json(self, key: str) -> Optional[Any]:
        value = await self.get(key)
        if not value:
            return None

        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            logger.error(f"JSON decode error for key {key}: {e}")
            return None

    async def set_json(self, key: str, value: Any, ttl: int = 3600):
        try:
            json_value = json.dumps(value)
            await self.set(key, json_value, ttl)
        except (TypeError, ValueError) as e:
            logger.error(f"JSON encode error for key {key}: {e}")

    async def acquire_lock(self, key: str, ttl: int) -> bool:
        """
        SET NX EX lock

        Returns True when acquired. Without Redis every caller gets the lock,
        so a cache outage never blocks the caller.
        """
        if not self._redis:
            return True

        try:
            return bool(await self._redis.set(key, "1", nx=True, ex=ttl))
        except Exception as e:
            logger.error(f"Redis lock error for key {key}: {e}")
            return True

    async def release_lock(self, key: str):
        await self.delete(key)


# Global cache instance
cache_service = RedisCacheService()
