"""
Tests for the response cache backends and helpers.
"""

import json

import pytest
from httpx import AsyncClient

from propertyhub.utils import cache as cache_policies
from propertyhub.utils.cache import (
    InMemoryCacheBackend,
    RedisCacheBackend,
    build_cache_key,
    cached_response,
    invalidate,
)
from tests.conftest import FakeClock


class FakeRedis:
    """Just enough of the redis.asyncio client for the cache backend."""

    def __init__(self):
        self.store = {}
        self.expiries = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        self.expiries[key] = ex

    async def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)

    async def scan_iter(self, match=None, count=None):
        prefix = match.rstrip("*")
        for key in list(self.store):
            if key.startswith(prefix):
                yield key


class TestInMemoryCacheBackend:
    """Test TTL expiry and oldest-first eviction."""

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self):
        """Entries are served until their age reaches the TTL."""
        clock = FakeClock()
        backend = InMemoryCacheBackend(clock=clock)
        await backend.set("properties", "k", {"v": 1}, 300)

        clock.advance(299)
        assert await backend.get("properties", "k", 300) == {"v": 1}

        clock.advance(1)
        assert await backend.get("properties", "k", 300) is None
        assert backend.size("properties") == 0

    @pytest.mark.asyncio
    async def test_oldest_inserted_entry_is_evicted(self):
        """A full namespace drops its oldest entry, even if it was read recently."""
        backend = InMemoryCacheBackend(max_entries=2, clock=FakeClock())
        await backend.set("blog", "a", 1, 60)
        await backend.set("blog", "b", 2, 60)
        await backend.get("blog", "a", 60)

        await backend.set("blog", "c", 3, 60)

        assert await backend.get("blog", "a", 60) is None
        assert await backend.get("blog", "b", 60) == 2
        assert await backend.get("blog", "c", 60) == 3

    @pytest.mark.asyncio
    async def test_overwrite_does_not_evict(self):
        """Replacing an existing key keeps the namespace size."""
        backend = InMemoryCacheBackend(max_entries=2, clock=FakeClock())
        await backend.set("blog", "a", 1, 60)
        await backend.set("blog", "b", 2, 60)
        await backend.set("blog", "a", 10, 60)

        assert await backend.get("blog", "a", 60) == 10
        assert await backend.get("blog", "b", 60) == 2

    @pytest.mark.asyncio
    async def test_namespaces_are_independent(self):
        """Clearing one namespace leaves the others alone."""
        backend = InMemoryCacheBackend(clock=FakeClock())
        await backend.set("team", "k", 1, 60)
        await backend.set("blog", "k", 2, 60)

        await backend.clear("team")

        assert await backend.get("team", "k", 60) is None
        assert await backend.get("blog", "k", 60) == 2

        await backend.clear()
        assert await backend.get("blog", "k", 60) is None


class TestRedisCacheBackend:
    """Test the Redis-backed cache against an in-process fake client."""

    @pytest.mark.asyncio
    async def test_values_round_trip_as_json_with_expiry(self):
        """Entries are JSON documents with a server-side TTL."""
        client = FakeRedis()
        backend = RedisCacheBackend(client)

        await backend.set("developers", "list", {"count": 2}, 1800)

        assert json.loads(client.store["propertyhub:cache:developers:list"]) == {"count": 2}
        assert client.expiries["propertyhub:cache:developers:list"] == 1800
        assert await backend.get("developers", "list", 1800) == {"count": 2}

    @pytest.mark.asyncio
    async def test_clear_namespace(self):
        """Clearing scans only the namespace prefix."""
        client = FakeRedis()
        backend = RedisCacheBackend(client)
        await backend.set("blog", "a", 1, 60)
        await backend.set("team", "a", 2, 60)

        await backend.clear("blog")

        assert await backend.get("blog", "a", 60) is None
        assert await backend.get("team", "a", 60) == 2


class TestCachedResponse:
    """Test the read-through helper used by routes."""

    @pytest.mark.asyncio
    async def test_miss_then_hit(self):
        """Compute runs once; the hit is flagged."""
        backend = InMemoryCacheBackend(clock=FakeClock())
        calls = []

        async def compute():
            calls.append(1)
            return {"success": True, "data": [1, 2]}

        key = build_cache_key({"page": 1})
        first = await cached_response(backend, cache_policies.BLOG, key, compute)
        second = await cached_response(backend, cache_policies.BLOG, key, compute)

        assert first == {"success": True, "data": [1, 2]}
        assert second == {"success": True, "data": [1, 2], "fromCache": True}
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_invalidate_clears_each_policy(self):
        backend = InMemoryCacheBackend(clock=FakeClock())
        await backend.set("properties", "k", 1, 60)
        await backend.set("property_detail", "k", 2, 60)
        await backend.set("blog", "k", 3, 60)

        await invalidate(backend, cache_policies.PROPERTIES, cache_policies.PROPERTY_DETAIL)

        assert await backend.get("properties", "k", 60) is None
        assert await backend.get("property_detail", "k", 60) is None
        assert await backend.get("blog", "k", 60) == 3

    def test_cache_key_depends_on_parameter_order(self):
        """Keys are built from the ordered effective parameters."""
        assert build_cache_key({"a": 1, "b": 2}) == '{"a":1,"b":2}'
        assert build_cache_key({"a": 1, "b": 2}) != build_cache_key({"b": 2, "a": 1})


class TestCacheClearEndpoint:
    """Test the admin cache-clear route."""

    @pytest.mark.asyncio
    async def test_requires_admin(self, async_client: AsyncClient):
        """Anonymous callers are rejected."""
        response = await async_client.post("/api/cache/clear")

        assert response.status_code == 401
        assert response.json()["message"] == "Authentication token required"

    @pytest.mark.asyncio
    async def test_clear_single_namespace(self, async_client: AsyncClient, admin_headers, cache_backend):
        await cache_backend.set("blog", "k", 1, 60)
        await cache_backend.set("team", "k", 2, 60)

        response = await async_client.post("/api/cache/clear", json={"cacheKey": "blog"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["message"] == "Cache 'blog' cleared successfully"
        assert await cache_backend.get("blog", "k", 60) is None
        assert await cache_backend.get("team", "k", 60) == 2

    @pytest.mark.asyncio
    async def test_clear_everything(self, async_client: AsyncClient, admin_headers, cache_backend):
        await cache_backend.set("team", "k", 2, 60)

        response = await async_client.post("/api/cache/clear", headers=admin_headers)

        assert response.json()["message"] == "All caches cleared successfully"
        assert await cache_backend.get("team", "k", 60) is None

    @pytest.mark.asyncio
    async def test_unknown_namespace(self, async_client: AsyncClient, admin_headers):
        response = await async_client.post("/api/cache/clear", json={"cacheKey": "sessions"}, headers=admin_headers)

        assert response.status_code == 400
        assert "Unknown cache key 'sessions'" in response.json()["message"]
