"""
Fixed-window rate limiting keyed by route scope and client IP.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, Optional
import logging
import time

from fastapi import Depends, Request

from propertyhub.config import settings
from propertyhub.utils.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    allowed: bool
    count: int
    reset_at: float


class RateLimiter(ABC):
    """Counter store interface."""

    @abstractmethod
    async def consume(self, key: str, max_requests: int, window_seconds: int) -> RateLimitResult:
        """Count one request against the key's current window."""

    @abstractmethod
    async def check(self, key: str, max_requests: int) -> bool:
        """Whether another request would currently be allowed, without counting it."""

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Forget the key's window."""


class InMemoryRateLimiter(RateLimiter):
    """
    Process-local fixed-window counters.

    The first request of a window, or the first after `reset_at` has passed, starts
    a new window with count 1. Later requests increment the count and are allowed
    while it stays at or below the maximum.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._windows: Dict[str, Dict[str, float]] = {}

    async def consume(self, key: str, max_requests: int, window_seconds: int) -> RateLimitResult:
        now = self.clock()
        window = self._windows.get(key)

        if window is None or now > window["reset_at"]:
            window = {"count": 1, "reset_at": now + window_seconds}
            self._windows[key] = window
            return RateLimitResult(True, 1, window["reset_at"])

        window["count"] += 1
        return RateLimitResult(window["count"] <= max_requests, int(window["count"]), window["reset_at"])

    async def check(self, key: str, max_requests: int) -> bool:
        window = self._windows.get(key)
        if window is None or self.clock() > window["reset_at"]:
            return True
        return window["count"] < max_requests

    async def reset(self, key: str) -> None:
        self._windows.pop(key, None)


class RedisRateLimiter(RateLimiter):
    """
    Counters shared through Redis.

    Each request runs SET NX PX, INCR and PTTL in one MULTI/EXEC block, so a
    counter never exists without its expiry.
    """

    def __init__(self, client, prefix: str = "propertyhub:ratelimit"):
        self.client = client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def consume(self, key: str, max_requests: int, window_seconds: int) -> RateLimitResult:
        redis_key = self._key(key)
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.set(redis_key, 0, px=window_seconds * 1000, nx=True)
            pipe.incr(redis_key)
            pipe.pttl(redis_key)
            _, count, ttl_ms = await pipe.execute()
        return RateLimitResult(count <= max_requests, count, time.time() + max(ttl_ms, 0) / 1000)

    async def check(self, key: str, max_requests: int) -> bool:
        count = await self.client.get(self._key(key))
        return count is None or int(count) < max_requests

    async def reset(self, key: str) -> None:
        await self.client.delete(self._key(key))


@lru_cache()
def get_rate_limiter() -> RateLimiter:
    """
    Dependency returning the configured rate limiter.
    """
    if settings.cache_backend == "redis":
        import redis.asyncio as redis

        return RedisRateLimiter(redis.from_url(settings.redis_url, decode_responses=True))
    return InMemoryRateLimiter()


def get_client_ip(request: Request) -> str:
    """
    Get client IP address from request.

    Args:
        request: FastAPI request object

    Returns:
        Client IP address
    """
    # Check for forwarded headers (load balancer/proxy)
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


class RateLimit:
    """
    Route dependency enforcing a per-IP request budget.

    Usage:
        @router.post("/login", dependencies=[Depends(RateLimit("login", 5))])
    """

    def __init__(
        self,
        scope: str,
        max_requests: int,
        window_seconds: Optional[int] = None,
        message: str = "Too many requests. Please try again later."
    ):
        self.scope = scope
        self.max_requests = max_requests
        self.window_seconds = window_seconds or settings.rate_limit_window_seconds
        self.message = message

    async def __call__(self, request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> None:
        client_ip = get_client_ip(request)
        result = await limiter.consume(f"{self.scope}:{client_ip}", self.max_requests, self.window_seconds)
        if not result.allowed:
            logger.warning(
                f"Rate limit exceeded for {self.scope} from {client_ip}",
                extra={"scope": self.scope, "client_ip": client_ip, "count": result.count}
            )
            raise RateLimitExceededError(self.message)
