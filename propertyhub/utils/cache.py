"""
Response cache for public read routes.

Handlers depend on the `CacheBackend` interface. The in-memory backend is the
single-process default; the Redis backend shares entries across instances.
"""

from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple
import json
import logging
import time

from propertyhub.config import settings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class CachePolicy:
    """Namespace and time-to-live used by one cached route."""

    namespace: str
    ttl_seconds: int


PROPERTIES = CachePolicy("properties", 5 * 60)
FEATURED_PROPERTIES = CachePolicy("featured_properties", 10 * 60)
PROPERTY_DETAIL = CachePolicy("property_detail", 10 * 60)
BLOG = CachePolicy("blog", 10 * 60)
FEATURED_BLOG = CachePolicy("featured_blog", 10 * 60)
TESTIMONIALS = CachePolicy("testimonials", 15 * 60)
TEAM = CachePolicy("team", 20 * 60)
DEVELOPERS = CachePolicy("developers", 30 * 60)

CACHE_POLICIES: Dict[str, CachePolicy] = {
    policy.namespace: policy
    for policy in (
        PROPERTIES,
        FEATURED_PROPERTIES,
        PROPERTY_DETAIL,
        BLOG,
        FEATURED_BLOG,
        TESTIMONIALS,
        TEAM,
        DEVELOPERS,
    )
}


class CacheBackend(ABC):
    """Storage interface for cached response payloads."""

    @abstractmethod
    async def get(self, namespace: str, key: str, ttl_seconds: int) -> Optional[Any]:
        """Return the cached value, or None when absent or older than ttl_seconds."""

    @abstractmethod
    async def set(self, namespace: str, key: str, value: Any, ttl_seconds: int) -> None:
        """Store a value."""

    @abstractmethod
    async def evict(self, namespace: str, key: str) -> None:
        """Drop a single entry."""

    @abstractmethod
    async def clear(self, namespace: Optional[str] = None) -> None:
        """Drop every entry of a namespace, or everything when namespace is None."""


class InMemoryCacheBackend(CacheBackend):
    """
    Process-local cache with one insertion-ordered map per namespace.

    When a new key would grow a namespace past `max_entries`, the oldest-inserted
    entry is evicted first. Reads do not refresh an entry's position.
    """

    def __init__(self, max_entries: int = 100, clock: Clock = time.monotonic):
        self.max_entries = max_entries
        self.clock = clock
        self._entries: Dict[str, "OrderedDict[str, Tuple[Any, float]]"] = {}

    async def get(self, namespace: str, key: str, ttl_seconds: int) -> Optional[Any]:
        entries = self._entries.get(namespace)
        if not entries or key not in entries:
            return None

        value, captured_at = entries[key]
        if self.clock() - captured_at < ttl_seconds:
            return value

        del entries[key]
        return None

    async def set(self, namespace: str, key: str, value: Any, ttl_seconds: int) -> None:
        entries = self._entries.setdefault(namespace, OrderedDict())
        if key not in entries and len(entries) >= self.max_entries:
            evicted_key, _ = entries.popitem(last=False)
            logger.debug(f"Evicted oldest cache entry {namespace}:{evicted_key}")
        entries[key] = (value, self.clock())

    async def evict(self, namespace: str, key: str) -> None:
        entries = self._entries.get(namespace)
        if entries:
            entries.pop(key, None)

    async def clear(self, namespace: Optional[str] = None) -> None:
        if namespace is None:
            self._entries.clear()
        else:
            self._entries.pop(namespace, None)

    def size(self, namespace: str) -> int:
        return len(self._entries.get(namespace, ()))


class RedisCacheBackend(CacheBackend):
    """
    Cache shared through Redis. Entries are JSON documents with a server-side expiry,
    so eviction under memory pressure follows the server's maxmemory policy.
    """

    def __init__(self, client, prefix: str = "propertyhub:cache"):
        self.client = client
        self.prefix = prefix

    def _key(self, namespace: str, key: str) -> str:
        return f"{self.prefix}:{namespace}:{key}"

    async def get(self, namespace: str, key: str, ttl_seconds: int) -> Optional[Any]:
        raw = await self.client.get(self._key(namespace, key))
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, namespace: str, key: str, value: Any, ttl_seconds: int) -> None:
        await self.client.set(self._key(namespace, key), json.dumps(value), ex=ttl_seconds)

    async def evict(self, namespace: str, key: str) -> None:
        await self.client.delete(self._key(namespace, key))

    async def clear(self, namespace: Optional[str] = None) -> None:
        pattern = f"{self.prefix}:{namespace}:*" if namespace else f"{self.prefix}:*"
        keys = [key async for key in self.client.scan_iter(match=pattern, count=100)]
        if keys:
            await self.client.delete(*keys)
        logger.info(f"Cleared {len(keys)} cache keys matching {pattern}")


def build_cache_key(params: Dict[str, Any]) -> str:
    """Deterministic key from the ordered effective request parameters."""
    return json.dumps(params, separators=(",", ":"), default=str)


async def cached_response(
    backend: CacheBackend,
    policy: CachePolicy,
    key: str,
    compute: Callable[[], Awaitable[Dict[str, Any]]],
) -> Dict[str, Any]:
    """
    Serve a payload from cache, or compute and store it.

    Args:
        backend: Cache backend
        policy: Namespace and TTL of the route
        key: Cache key within the namespace
        compute: Coroutine factory producing the response payload on a miss

    Returns:
        The payload; cache hits carry `fromCache: true`
    """
    cached = await backend.get(policy.namespace, key, policy.ttl_seconds)
    if cached is not None:
        logger.debug(f"Cache hit for {policy.namespace}:{key}")
        return {**cached, "fromCache": True}

    payload = await compute()
    await backend.set(policy.namespace, key, payload, policy.ttl_seconds)
    return payload


async def invalidate(backend: CacheBackend, *policies: CachePolicy) -> None:
    """Clear the namespaces affected by a write."""
    for policy in policies:
        await backend.clear(policy.namespace)


@lru_cache()
def get_cache_backend() -> CacheBackend:
    """
    Dependency returning the configured cache backend.
    """
    if settings.cache_backend == "redis":
        import redis.asyncio as redis

        logger.info("Using Redis response cache")
        return RedisCacheBackend(redis.from_url(settings.redis_url, decode_responses=True))
    return InMemoryCacheBackend(max_entries=settings.cache_max_entries)
