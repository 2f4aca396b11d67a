"""
Tests for the cache-aside layer.
"""

import json
import time
from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from jobboard.common.cache import MemoryCache, RedisCache, get_cache, reset_cache


class TestMemoryCache:
    """Tests for the in-process TTL cache."""

    def test_set_and_get(self):
        cache = MemoryCache()
        cache.set("job:a", {"title": "A"}, ttl_seconds=60)

        assert cache.get("job:a") == {"title": "A"}
        assert cache.get("job:missing") is None

    def test_returns_copies(self):
        cache = MemoryCache()
        cache.set("job:a", {"tags": ["x"]}, ttl_seconds=60)

        cache.get("job:a")["tags"].append("mutated")

        assert cache.get("job:a") == {"tags": ["x"]}

    def test_expiry(self):
        cache = MemoryCache()
        cache.set("job:a", "value", ttl_seconds=10)

        later = time.monotonic() + 11
        with patch("jobboard.common.cache.time.monotonic", return_value=later):
            assert cache.get("job:a") is None
        assert len(cache) == 0

    def test_evicts_oldest_when_full(self):
        cache = MemoryCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)

        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_invalidate_prefix(self):
        cache = MemoryCache()
        cache.set("job:a", 1)
        cache.set("job:b", 2)
        cache.set("tags", 3)

        assert cache.invalidate_prefix("job:") == 2
        assert cache.get("tags") == 3

    def test_purge_expired(self):
        cache = MemoryCache()
        cache.set("short", 1, ttl_seconds=1)
        cache.set("long", 2, ttl_seconds=100)

        later = time.monotonic() + 5
        with patch("jobboard.common.cache.time.monotonic", return_value=later):
            assert cache.purge_expired() == 1
        assert cache.get("long") == 2


class TestGetOrFetch:
    """Tests for read-through behaviour."""

    def test_miss_loads_and_caches(self):
        cache = RedisCache()
        loader = MagicMock(return_value={"id": "1"})

        assert cache.get_or_fetch("job:x", loader, ttl_seconds=3600) == {"id": "1"}
        assert cache.get_or_fetch("job:x", loader, ttl_seconds=3600) == {"id": "1"}

        loader.assert_called_once()

    def test_none_is_not_cached(self):
        cache = RedisCache()
        loader = MagicMock(return_value=None)

        assert cache.get_or_fetch("job:x", loader) is None
        assert cache.get_or_fetch("job:x", loader) is None

        assert loader.call_count == 2

    def test_loader_errors_propagate(self):
        cache = RedisCache()

        with pytest.raises(RuntimeError):
            cache.get_or_fetch("job:x", MagicMock(side_effect=RuntimeError("boom")))

    def test_reloads_after_ttl(self):
        cache = RedisCache()
        loader = MagicMock(side_effect=[{"v": 1}, {"v": 2}])

        cache.get_or_fetch("job:x", loader, ttl_seconds=3600)
        later = time.monotonic() + 3601
        with patch("jobboard.common.cache.time.monotonic", return_value=later):
            assert cache.get_or_fetch("job:x", loader, ttl_seconds=3600) == {"v": 2}


class TestRedisBackend:
    """Tests for the Redis path with an injected client."""

    def test_set_uses_setex_json(self):
        client = MagicMock()
        cache = RedisCache(client=client)

        cache.set("job:x", {"id": "1"}, ttl_seconds=3600)

        client.setex.assert_called_once_with("job:x", 3600, json.dumps({"id": "1"}))

    def test_get_prefers_redis(self):
        client = MagicMock()
        client.get.return_value = json.dumps({"id": "from-redis"})
        cache = RedisCache(client=client)

        assert cache.get("job:x") == {"id": "from-redis"}

    def test_redis_errors_fall_back_to_memory(self):
        client = MagicMock()
        client.setex.side_effect = RedisConnectionError("down")
        client.get.side_effect = RedisConnectionError("down")
        cache = RedisCache(client=client)

        cache.set("job:x", {"id": "1"})

        assert cache.get("job:x") == {"id": "1"}

    def test_redis_miss_falls_back_to_memory(self):
        client = MagicMock()
        client.get.return_value = None
        memory = MemoryCache()
        memory.set("job:x", {"id": "memory"})
        cache = RedisCache(client=client, memory=memory)

        assert cache.get("job:x") == {"id": "memory"}

    def test_invalidate_prefix_scans_redis(self):
        client = MagicMock()
        client.scan_iter.return_value = iter(["job:a", "job:b"])
        cache = RedisCache(client=client)
        cache.memory.set("job:a", 1)

        assert cache.invalidate_prefix("job:") == 1

        client.scan_iter.assert_called_once_with(match="job:*")
        client.delete.assert_called_once_with("job:a", "job:b")

    def test_client_created_lazily_from_url(self):
        with patch("jobboard.common.cache.redis.from_url") as from_url:
            cache = RedisCache(redis_url="redis://localhost:6379/0")
            from_url.assert_not_called()

            assert cache.is_available() is True
            from_url.assert_called_once_with("redis://localhost:6379/0", decode_responses=True)

    def test_memory_only_without_url(self):
        assert RedisCache().is_available() is False

    def test_malformed_url_falls_back_to_memory(self):
        cache = RedisCache(redis_url="localhost:6379")
        loader = MagicMock(return_value={"title": "A"})

        assert cache.get_or_fetch("job:a", loader, ttl_seconds=60) == {"title": "A"}
        assert cache.get_or_fetch("job:a", loader, ttl_seconds=60) == {"title": "A"}
        loader.assert_called_once()
        assert cache.is_available() is False


class TestCacheSingleton:

    def test_singleton_and_reset(self):
        first = get_cache()
        assert get_cache() is first

        reset_cache()

        assert get_cache() is not first
