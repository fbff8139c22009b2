"""Redis lifecycle and per-client rate limiting.

One pool is shared by the GitHub cache, the profile store and the rate
limit windows. Routes receive it through the get_redis dependency.
"""

from __future__ import annotations

import time
from typing import AsyncGenerator, Optional

import redis.asyncio as aioredis

from app.config import get_settings
from app.exceptions import RateLimitError
from app.logging_config import get_logger
from app.metrics import RATE_LIMIT_HITS

logger = get_logger(__name__)

_redis_pool: Optional[aioredis.Redis] = None


async def init_redis() -> None:
    """Open the shared pool and fail startup if Redis is unreachable.

    Everything DevPath stores is text (JSON documents, compressed cache
    entries in base64), so responses are decoded to str.
    """
    global _redis_pool
    settings = get_settings()
    _redis_pool = aioredis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
    )
    await _redis_pool.ping()


async def close_redis() -> None:
    global _redis_pool
    if _redis_pool:
        await _redis_pool.aclose()
        _redis_pool = None


async def get_redis() -> AsyncGenerator[aioredis.Redis, None]:
    """Yield the shared pool. Tests override this with fakeredis."""
    if _redis_pool is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    yield _redis_pool


class RateLimiter:
    """Sliding-window request counter kept in a Redis sorted set.

    Each request adds a member scored by its timestamp; members older
    than the window are trimmed before counting.
    """

    def __init__(
        self,
        key_prefix: str,
        max_requests: int,
        window_seconds: int,
    ) -> None:
        self.key_prefix = key_prefix
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    async def check(self, identifier: str, redis: aioredis.Redis) -> None:
        """Count this request for `identifier` (a hashed client IP).

        Raises:
            RateLimitError: more than max_requests inside the window
        """
        key = f"ratelimit:{self.key_prefix}:{identifier}"
        now = time.time()
        window_start = now - self.window_seconds

        pipe = redis.pipeline()
        pipe.zremrangebyscore(key, 0, window_start)
        pipe.zadd(key, {str(now): now})
        pipe.zcard(key)
        pipe.expire(key, self.window_seconds)
        results = await pipe.execute()

        request_count = results[2]
        if request_count > self.max_requests:
            RATE_LIMIT_HITS.labels(
                endpoint=self.key_prefix, limit_type="sliding_window"
            ).inc()
            logger.warning("rate_limit_exceeded", limit_type=self.key_prefix)
            raise RateLimitError(
                limit_type=self.key_prefix,
                retry_after=self.window_seconds,
            )


# GitHub analysis and sync hit the upstream API, so they get a daily budget
analyze_rate_limiter = RateLimiter(
    key_prefix="analyze",
    max_requests=get_settings().rate_limit_analyze_per_day,
    window_seconds=86400,
)

# Profile, project and roadmap writes
api_rate_limiter = RateLimiter(
    key_prefix="api",
    max_requests=get_settings().rate_limit_requests_per_minute,
    window_seconds=60,
)
