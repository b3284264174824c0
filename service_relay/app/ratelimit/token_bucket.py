"""
Token bucket limiter for outbound upstream calls.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from shared.logging import get_logger
from shared.errors import RateLimitError


class TokenBucket:
    """In-process token bucket with a bounded wait.

    Tokens refill continuously at ``rate`` per second up to ``capacity``.
    A caller that would have to wait longer than ``max_wait`` for its
    token is rejected with RateLimitError instead of queueing.
    """

    def __init__(
        self,
        rate: float,
        capacity: Optional[float] = None,
        *,
        max_wait: float = 1.0,
        name: str = "outbound",
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if rate <= 0:
            raise ValueError("rate must be positive")
        self.rate = float(rate)
        self.capacity = float(capacity if capacity is not None else max(1.0, rate))
        self.max_wait = max(0.0, max_wait)
        self.name = name
        self.logger = get_logger(f"relay.rate_limiter.{name}")
        self._clock = clock
        self._sleep = sleep
        self._tokens = self.capacity
        self._updated_at = clock()

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated_at)
        self._tokens = min(self.capacity, self._tokens + elapsed * self.rate)
        self._updated_at = now

    @property
    def tokens(self) -> float:
        """Tokens available now."""
        self._refill()
        return self._tokens

    def try_acquire(self) -> bool:
        """Take a token if one is available right now."""
        self._refill()
        if self._tokens >= 1.0:
            self._tokens -= 1.0
            return True
        return False

    async def acquire(self) -> float:
        """Take a token, waiting at most ``max_wait`` seconds for it.

        Returns the time waited. The token is reserved before sleeping,
        so concurrent callers see the backlog and each wait stays bounded.
        """
        self._refill()
        deficit = 1.0 - self._tokens
        wait = deficit / self.rate if deficit > 0 else 0.0

        if wait > self.max_wait:
            self.logger.warning(
                "Outbound rate limit exceeded",
                limiter=self.name,
                retry_after=round(wait, 3),
                max_wait=self.max_wait
            )
            raise RateLimitError(
                f"Outbound rate limit exceeded for {self.name}",
                details={"retry_after": round(wait, 3), "rate_per_second": self.rate}
            )

        self._tokens -= 1.0
        if wait > 0:
            self.logger.debug("Waiting for outbound budget", limiter=self.name, wait=round(wait, 3))
            await self._sleep(wait)
        return wait

    def get_status(self) -> Dict[str, Any]:
        """Get limiter status."""
        return {
            "limiter": self.name,
            "rate_per_second": self.rate,
            "capacity": self.capacity,
            "available": round(max(0.0, self.tokens), 3),
        }
