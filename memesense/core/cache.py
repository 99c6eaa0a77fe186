"""
Response cache with Redis or in-memory storage.

Market and chat-context responses are cached for a fixed TTL. When Redis is
disabled (the default) or unreachable at startup, entries live in a
process-local dict with expiry times.
"""

import json
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

import redis

from ..config import MemesenseConfig
from .service_metrics import get_metrics

logger = logging.getLogger(__name__)


class ResponseCache:
    """
    TTL cache for JSON-serializable responses.

    Usage:
        cache = ResponseCache(ttl_seconds=300)
        data = cache.get_json("market:trendingTokens::")
        if data is None:
            data = await build()
            cache.set_json("market:trendingTokens::", data)
    """

    def __init__(
        self,
        ttl_seconds: Optional[int] = None,
        redis_url: Optional[str] = None,
        enabled: Optional[bool] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime (defaults to config)
            redis_url: Redis connection URL (defaults to config)
            enabled: Whether Redis is used (defaults to config)
            clock: Time source for in-memory expiry
        """
        self.ttl_seconds = ttl_seconds or MemesenseConfig.get_cache_ttl()
        if enabled is None:
            enabled = MemesenseConfig.get_redis_enabled()
        self.enabled = enabled
        self.redis_url = redis_url or MemesenseConfig.get_redis_url()
        self.clock = clock

        self.redis_client = None
        self._memory: Dict[str, Tuple[str, float]] = {}  # key -> (value, expires_at)

        if self.enabled:
            try:
                self.redis_client = redis.Redis.from_url(
                    self.redis_url,
                    decode_responses=True,
                    socket_connect_timeout=2,
                    socket_timeout=2,
                )
                self.redis_client.ping()
                logger.info("Redis response cache initialized")
            except redis.RedisError as e:
                logger.warning(f"Failed to connect to Redis: {e}. Using in-memory cache.")
                self.enabled = False
                self.redis_client = None
        else:
            logger.debug("Redis disabled, using in-memory cache")

    def get(self, key: str) -> Optional[str]:
        """
        Get value from cache.

        Returns:
            Cached value or None if not found/expired
        """
        if self.redis_client is not None:
            try:
                return self.redis_client.get(key)
            except redis.RedisError as e:
                logger.debug(f"Redis get failed for key {key}: {e}, using in-memory cache")

        entry = self._memory.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self.clock() >= expires_at:
            del self._memory[key]
            return None
        return value

    def set(self, key: str, value: str, ttl_seconds: Optional[int] = None):
        ttl = ttl_seconds or self.ttl_seconds
        if self.redis_client is not None:
            try:
                self.redis_client.setex(key, ttl, value)
                return
            except redis.RedisError as e:
                logger.debug(f"Redis set failed for key {key}: {e}, using in-memory cache")

        self._memory[key] = (value, self.clock() + ttl)

        # Sweep expired entries once the dict grows
        if len(self._memory) > 1000:
            now = self.clock()
            for k in [k for k, (_, exp) in self._memory.items() if now >= exp]:
                del self._memory[k]

    def get_json(self, key: str) -> Optional[Any]:
        """Get and decode a cached JSON value, recording hit/miss telemetry."""
        raw = self.get(key)
        if raw is None:
            get_metrics().record_cache_event("miss")
            return None
        get_metrics().record_cache_event("hit")
        return json.loads(raw)

    def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = None):
        self.set(key, json.dumps(value), ttl_seconds)

    def delete(self, key: str):
        """Delete key from cache."""
        if self.redis_client is not None:
            try:
                self.redis_client.delete(key)
            except redis.RedisError as e:
                logger.debug(f"Redis delete failed for key {key}: {e}")
        self._memory.pop(key, None)

    def clear(self):
        """Clear all cached values."""
        if self.redis_client is not None:
            try:
                self.redis_client.flushdb()
            except redis.RedisError as e:
                logger.debug(f"Redis clear failed: {e}")
        self._memory.clear()
