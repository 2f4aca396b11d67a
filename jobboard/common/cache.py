"""
Cache-aside (read-through) layer.

RedisCache is the facade used by the repository. When REDIS_URL is configured
values are stored in Redis as JSON with SETEX; every write is mirrored into an
in-process MemoryCache that also serves reads when Redis misses or is down.

Policy decisions:
- Loader results of None are never cached, so lookups for missing or
  degraded (store unreachable) documents are retried on the next request.
- Cache backend errors are logged and treated as misses (fail-open); reads
  never fail because the cache is unavailable.
- There is no stampede protection: concurrent misses on the same key may
  each invoke the loader.
"""

import copy
import json
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional, Tuple, TypeVar

import redis
from redis.exceptions import RedisError

from .config import Config

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 300
MAX_MEMORY_ENTRIES = 1000


class MemoryCache:
    """
    In-process TTL cache with a bounded number of entries.

    When full, the oldest inserted entry is evicted. Expired entries are
    dropped lazily on read or by ``purge_expired``.
    """

    def __init__(self, max_size: int = MAX_MEMORY_ENTRIES):
        self._max_size = max_size
        self._entries: "OrderedDict[str, Tuple[Any, float]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if time.monotonic() > expires_at:
                del self._entries[key]
                return None
            return copy.deepcopy(value)

    def set(self, key: str, value: Any, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self._max_size:
                self._entries.popitem(last=False)
            self._entries[key] = (copy.deepcopy(value), time.monotonic() + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> int:
        with self._lock:
            keys = [key for key in self._entries if key.startswith(prefix)]
            for key in keys:
                del self._entries[key]
            return len(keys)

    def purge_expired(self) -> int:
        now = time.monotonic()
        with self._lock:
            expired = [key for key, (_, expires_at) in self._entries.items() if now > expires_at]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisCache:
    """
    Redis-backed cache with an in-memory fallback.

    Usage:
        cache = RedisCache(redis_url="redis://localhost:6379/0")
        doc = cache.get_or_fetch("job:some-slug", lambda: load(slug), ttl_seconds=3600)
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        client: Optional[redis.Redis] = None,
        memory: Optional[MemoryCache] = None,
    ):
        """
        Args:
            redis_url: Redis connection URL; None/empty disables Redis
            client: Pre-built Redis client (takes precedence over redis_url)
            memory: Fallback memory cache (a new one is created if omitted)
        """
        self._redis_url = redis_url
        self._client = client
        self._memory = memory or MemoryCache()

    def _get_client(self) -> Optional[redis.Redis]:
        if self._client is None and self._redis_url:
            try:
                self._client = redis.from_url(self._redis_url, decode_responses=True)
            except (ValueError, RedisError) as e:
                # Unusable URL: stay on the memory cache for the life of this instance
                logger.warning(f"Invalid REDIS_URL, using memory cache only: {e}")
                self._redis_url = None
                return None
            logger.info("Redis cache client created")
        return self._client

    @property
    def memory(self) -> MemoryCache:
        return self._memory

    def is_available(self) -> bool:
        """Whether a Redis backend is configured (memory is always available)."""
        return self._get_client() is not None

    def get(self, key: str) -> Optional[Any]:
        client = self._get_client()
        if client is not None:
            try:
                raw = client.get(key)
            except RedisError as e:
                logger.warning(f"Redis GET failed for {key}, using memory cache: {e}")
            else:
                if raw is not None:
                    try:
                        return json.loads(raw)
                    except ValueError:
                        return raw

        return self._memory.get(key)

    def set(self, key: str, value: Any, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        client = self._get_client()
        if client is not None:
            payload = value if isinstance(value, str) else json.dumps(value, default=str)
            try:
                client.setex(key, ttl_seconds, payload)
            except RedisError as e:
                logger.warning(f"Redis SETEX failed for {key}: {e}")

        self._memory.set(key, value, ttl_seconds)

    def delete(self, key: str) -> None:
        client = self._get_client()
        if client is not None:
            try:
                client.delete(key)
            except RedisError as e:
                logger.warning(f"Redis DEL failed for {key}: {e}")

        self._memory.delete(key)

    def invalidate(self, key: str) -> None:
        """Drop a single key (use after writes that must be visible at once)."""
        self.delete(key)
        logger.info(f"[Cache INVALIDATED] {key}")

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every key starting with ``prefix``. Returns the number of memory keys removed."""
        client = self._get_client()
        if client is not None:
            try:
                keys = list(client.scan_iter(match=f"{prefix}*"))
                if keys:
                    client.delete(*keys)
            except RedisError as e:
                logger.warning(f"Redis prefix invalidation failed for {prefix}*: {e}")

        removed = self._memory.invalidate_prefix(prefix)
        logger.info(f"[Cache INVALIDATED] {prefix}*")
        return removed

    def get_or_fetch(
        self,
        key: str,
        loader: Callable[[], Optional[T]],
        ttl_seconds: int = 3600,
    ) -> Optional[T]:
        """
        Return the cached value for ``key`` or load, cache and return it.

        Args:
            key: Cache key (e.g., "job:up-police-recruitment-2026-1735689600000")
            loader: Zero-argument callable reading the canonical store
            ttl_seconds: Time to live for a freshly loaded value

        Returns:
            Cached or freshly loaded value; None if the loader found nothing
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"[Cache HIT] {key}")
            return cached

        logger.debug(f"[Cache MISS] {key}")
        data = loader()

        if data is not None:
            self.set(key, data, ttl_seconds)

        return data

    def close(self) -> None:
        if self._client is not None:
            try:
                self._client.close()
            except RedisError as e:
                logger.warning(f"Error closing Redis client: {e}")
            self._client = None


# Singleton cache instance
_cache_instance: Optional[RedisCache] = None


def get_cache() -> RedisCache:
    """
    Get the process-wide cache.

    Uses Redis when REDIS_URL is configured, memory only otherwise.
    """
    global _cache_instance

    if _cache_instance is None:
        _cache_instance = RedisCache(redis_url=Config.REDIS_URL or None)
        backend = "Redis + memory" if Config.REDIS_URL else "memory only"
        logger.info(f"Initialized cache ({backend})")

    return _cache_instance


def reset_cache() -> None:
    """
    Reset the cache singleton.

    Used for testing or when configuration changes.
    """
    global _cache_instance

    if _cache_instance is not None:
        _cache_instance.close()
        _cache_instance.memory.clear()

    _cache_instance = None
    logger.info("Cache singleton reset")
