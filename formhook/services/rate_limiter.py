"""
Rate Limiter Service using Redis sorted sets (sliding window).

Public form submissions are limited per client IP.
"""
import time
import redis.asyncio as redis
from redis.exceptions import RedisError
from formhook.config import settings
from formhook.logging_config import get_logger

log = get_logger(component="rate_limiter")


class RateLimiter:
    """Per-client rate limiter using Redis sorted sets."""

    def __init__(self, redis_url: str | None = None, limit: int | None = None, window: int | None = None):
        self.redis_url = redis_url or settings.REDIS_URL
        self._redis = None
        self.limit = limit or settings.SUBMISSION_RATE_LIMIT  # requests per window
        self.window = window or settings.SUBMISSION_RATE_WINDOW_SECONDS

    async def get_redis(self):
        if self._redis is None:
            self._redis = redis.from_url(self.redis_url)
        return self._redis

    async def is_allowed(self, client_key: str) -> tuple[bool, int]:
        """
        Check if a request is allowed for the client.

        Returns:
            (allowed: bool, retry_after: int)
        """
        key = f"ratelimit:submit:{client_key}"
        now = time.time()
        window_start = now - self.window

        try:
            r = await self.get_redis()

            # Clean up old entries and count current requests
            pipe = r.pipeline()
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            results = await pipe.execute()

            request_count = results[1]

            if request_count >= self.limit:
                oldest = await r.zrange(key, 0, 0, withscores=True)
                if oldest:
                    retry_after = int(self.window - (now - oldest[0][1]))
                else:
                    retry_after = self.window
                return False, max(retry_after, 1)

            await r.zadd(key, {str(now): now})
            await r.expire(key, self.window)

            return True, 0

        except RedisError as e:
            # Redis down: fail open so submissions are never lost
            log.warning("rate_limiter_unavailable", error=str(e))
            return True, 0


# Singleton instance
rate_limiter = RateLimiter()
