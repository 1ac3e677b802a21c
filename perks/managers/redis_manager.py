"""
Shared Redis connection used for rate-limit counters and health probes.
"""
import asyncio
import logging
from typing import Optional, Tuple

import redis.asyncio as redis
from redis.asyncio import ConnectionPool

from perks.core.config import settings

logger = logging.getLogger(__name__)


class AsyncRedisManager:
    """Lazily connected Redis client; ``initialize`` runs on first use."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.redis_url
        self.pool: Optional[ConnectionPool] = None
        self.redis: Optional[redis.Redis] = None
        self._connection_lock = asyncio.Lock()

    async def initialize(self):
        async with self._connection_lock:
            if self.redis is not None:
                return
            self.pool = ConnectionPool.from_url(
                self.url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
                max_connections=20,
                health_check_interval=30,
            )
            self.redis = redis.Redis(connection_pool=self.pool)
            try:
                await self.redis.ping()
            except Exception as e:
                logger.error(f"Could not connect to Redis at {self.url}: {e}")
                await self._reset()
                raise
            logger.info("Redis connection pool ready")

    async def _reset(self):
        if self.redis is not None:
            await self.redis.aclose()
        if self.pool is not None:
            await self.pool.disconnect()
        self.redis = None
        self.pool = None

    async def close(self):
        async with self._connection_lock:
            was_open = self.redis is not None
            await self._reset()
        if was_open:
            logger.info("Redis connection pool closed")

    async def ping(self) -> bool:
        """True when Redis answers a PING, connecting first if needed."""
        try:
            await self.initialize()
            return bool(await self.redis.ping())
        except Exception as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    async def increment_window(self, key: str, window_seconds: int) -> Tuple[int, int]:
        """
        Count one hit against a fixed window.

        Args:
            key: Counter key for the client and window
            window_seconds: Window length; the key expires with the window

        Returns:
            Tuple of (hits in the window so far, seconds until the window resets)
        """
        await self.initialize()

        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.ttl(key)
            count, ttl = await pipe.execute()

        if ttl < 0:
            # First hit in this window (or a key that lost its expiry)
            await self.redis.expire(key, window_seconds)
            ttl = window_seconds
        return int(count), int(ttl)


redis_manager = AsyncRedisManager()
