"""
Per-caller inbound rate limiter backed by Redis.
"""

import asyncio
from typing import Dict, Any, Optional
import redis.asyncio as redis
from redis.exceptions import RedisError
from fastapi import Request

from shared.logging import get_logger
from shared.errors import RateLimitError


class InboundRateLimiter:
    """Fixed-window request counter per caller and path.

    Redis failures fail open: the request is allowed and the error logged.
    """

    def __init__(self, redis_url: str, limit: int, window_seconds: int = 60):
        self.redis_url = redis_url
        self.limit = limit
        self.window_seconds = window_seconds
        self.logger = get_logger("relay.inbound_rate_limiter")
        self._redis: Optional[redis.Redis] = None

    @property
    def enabled(self) -> bool:
        return self.limit > 0

    async def _get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(self.redis_url)
        return self._redis

    def _make_key(self, client_id: str, endpoint: str) -> str:
        """Generate rate limit key."""
        return f"relay:rate_limit:{client_id}:{endpoint}"

    async def check_rate_limit(self, client_id: str, endpoint: str) -> Dict[str, Any]:
        """Count this request and report whether it is within the window budget."""
        if not self.enabled:
            return {"allowed": True, "limit": 0, "remaining": None, "reset_in_seconds": None}

        key = self._make_key(client_id, endpoint)
        try:
            redis_client = await self._get_redis()
            current_count = await redis_client.incr(key)
            if current_count == 1:
                await redis_client.expire(key, self.window_seconds)

            if current_count > self.limit:
                ttl = await redis_client.ttl(key)
                if not isinstance(ttl, (int, float)) or ttl < 0:
                    ttl = self.window_seconds
                self.logger.warning(
                    "Inbound rate limit exceeded",
                    client_id=client_id,
                    endpoint=endpoint,
                    current_count=current_count,
                    limit=self.limit
                )
                return {
                    "allowed": False,
                    "current_count": current_count,
                    "limit": self.limit,
                    "remaining": 0,
                    "reset_in_seconds": int(ttl),
                    "retry_after": int(ttl)
                }

            return {
                "allowed": True,
                "current_count": current_count,
                "limit": self.limit,
                "remaining": max(0, self.limit - current_count),
                "reset_in_seconds": self.window_seconds
            }

        except (RedisError, OSError, asyncio.TimeoutError) as e:
            self.logger.error("Rate limit check error", error=str(e))
            return {
                "allowed": True,
                "current_count": 0,
                "limit": self.limit,
                "remaining": self.limit,
                "reset_in_seconds": self.window_seconds,
                "error": "Redis unavailable"
            }

    async def enforce(self, request: Request) -> Dict[str, Any]:
        """Check the caller's budget, raising RateLimitError when exhausted."""
        client_id = get_client_id(request)
        result = await self.check_rate_limit(client_id, request.url.path)
        if not result.get("allowed", False):
            raise RateLimitError(
                "Too many requests",
                details={
                    "limit": result.get("limit"),
                    "current_count": result.get("current_count"),
                    "retry_after": result.get("retry_after"),
                }
            )
        return result

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


def get_client_id(request: Request) -> str:
    """Extract the caller IP from standard headers."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"
