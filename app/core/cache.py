"""
@file cache.py
@brief Redis cache manager singleton
@details
Caches API responses that are expensive to rebuild (the generated file
listing). Redis is optional: when it is unreachable every call degrades to a
cache miss and the API keeps working.

@author Market Research Project
@date 2025-03-19
"""

import json
import logging
from typing import Optional, Any
import redis.asyncio as redis

from app.core.config import REDIS_URL

logger = logging.getLogger(__name__)

## @brief Cache key of the generated file listing
FILES_CACHE_KEY = "api:files:list"


class RedisCache:
    """
    @brief Singleton wrapper for Async Redis client
    """
    _instance: Optional['RedisCache'] = None
    client: Optional[redis.Redis] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(RedisCache, cls).__new__(cls)
        return cls._instance

    async def connect(self):
        """
        @brief Initialize Redis connection pool from REDIS_URL
        """
        try:
            self.client = redis.from_url(
                REDIS_URL,
                encoding="utf-8",
                decode_responses=True
            )
            await self.client.ping()
            logger.info(f"Connected to Redis at {REDIS_URL}")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            self.client = None

    async def close(self):
        if self.client:
            await self.client.close()
            logger.info("Redis connection closed")

    async def get(self, key: str) -> Optional[Any]:
        """
        @brief Retrieve a JSON value, None on miss or error
        """
        if not self.client:
            return None
        try:
            value = await self.client.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.warning(f"Redis get error for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: int = 3600):
        """
        @brief Store a JSON-serializable value with TTL
        """
        if not self.client:
            return
        try:
            await self.client.setex(key, ttl, json.dumps(value))
        except Exception as e:
            logger.warning(f"Redis set error for {key}: {e}")

    async def delete(self, key: str):
        """
        @brief Invalidate a key
        """
        if not self.client:
            return
        try:
            await self.client.delete(key)
        except Exception as e:
            logger.warning(f"Redis delete error for {key}: {e}")


# Global instance
cache = RedisCache()
