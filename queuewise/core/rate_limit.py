"""
Fixed-window rate limiting per (bucket, client).

Counters live in Redis (INCR + EXPIRE) when REDIS_URL is configured so every
API instance shares them. Without Redis the counters are kept in process
memory, which only bounds traffic per instance and resets on restart.
"""

import logging
import time
from dataclasses import dataclass
from threading import Lock

import redis.asyncio as redis
from fastapi import Request

from queuewise.core.config import Settings
from queuewise.core.errors import RateLimited

logger = logging.getLogger(__name__)

MEMORY_CACHE_CLEANUP_INTERVAL = 60


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_at: int
    retry_after: int = 0


class MemoryRateLimiter:
    def __init__(self, window_seconds: int):
        self.window_seconds = window_seconds
        self._entries: dict[str, dict] = {}
        self._lock = Lock()
        self._last_cleanup = 0

    def _cleanup(self, now: int) -> None:
        if now - self._last_cleanup < MEMORY_CACHE_CLEANUP_INTERVAL:
            return
        expired = [k for k, v in self._entries.items() if now >= v["reset_at"]]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("Cleaned up %d expired rate limit entries", len(expired))
        self._last_cleanup = now

    async def hit(self, key: str, limit: int) -> RateLimitResult:
        now = int(time.time())
        with self._lock:
            self._cleanup(now)
            entry = self._entries.get(key)
            if entry is None or now >= entry["reset_at"]:
                entry = {"count": 0, "reset_at": now + self.window_seconds}
                self._entries[key] = entry
            entry["count"] += 1
            count, reset_at = entry["count"], entry["reset_at"]

        if count > limit:
            return RateLimitResult(False, 0, reset_at, max(reset_at - now, 1))
        return RateLimitResult(True, limit - count, reset_at)

    async def close(self) -> None:
        self._entries.clear()


class RedisRateLimiter:
    def __init__(self, client: "redis.Redis", window_seconds: int):
        self.client = client
        self.window_seconds = window_seconds

    async def hit(self, key: str, limit: int) -> RateLimitResult:
        now = int(time.time())
        redis_key = f"ratelimit:{key}"
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.incr(redis_key)
            pipe.expire(redis_key, self.window_seconds, nx=True)
            pipe.ttl(redis_key)
            count, _, ttl = await pipe.execute()

        ttl = ttl if ttl and ttl > 0 else self.window_seconds
        reset_at = now + ttl
        if count > limit:
            return RateLimitResult(False, 0, reset_at, ttl)
        return RateLimitResult(True, limit - count, reset_at)

    async def close(self) -> None:
        await self.client.aclose()


def build_rate_limiter(settings: Settings):
    if settings.REDIS_URL:
        logger.info("Using Redis-backed rate limiting")
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=15,
            socket_timeout=30,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        return RedisRateLimiter(client, settings.RATE_LIMIT_WINDOW_SECONDS)

    logger.info("REDIS_URL not set, rate limits are per process")
    return MemoryRateLimiter(settings.RATE_LIMIT_WINDOW_SECONDS)


def get_client_id(request: Request) -> str:
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client:
        return request.client.host
    return "unknown-client"


def rate_limit(bucket: str):
    """FastAPI dependency enforcing the configured limit for ``bucket``."""
    async def _guard(request: Request) -> None:
        settings: Settings = request.app.state.settings
        if not settings.RATE_LIMIT_ENABLED:
            return
        client_id = get_client_id(request)
        limit = settings.rate_limits[bucket]
        result = await request.app.state.rate_limiter.hit(f"{bucket}:{client_id}", limit)
        if not result.allowed:
            logger.warning("Rate limit exceeded for %s (client=%s)", bucket, client_id)
            raise RateLimited(retry_after=result.retry_after, reset_at=result.reset_at)
    return _guard
