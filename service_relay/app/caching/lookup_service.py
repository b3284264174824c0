"""
Cache-aside lookups against an upstream source.
"""

import re
from typing import Any, Awaitable, Callable, Optional, TYPE_CHECKING

from shared.logging import get_logger
from shared.errors import InvalidKeyError
from .ttl_cache import TTLCache

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


_DIGITS = re.compile(r"[0-9]+")


def is_numeric_key(key: str) -> bool:
    """ASCII digits only; rejects empty strings and unicode digits."""
    return isinstance(key, str) and _DIGITS.fullmatch(key) is not None


class CacheAsideLookupService:
    """Serve fresh cache entries, otherwise fetch once upstream and cache the result.

    Concurrent misses for the same key may each fetch; the last write wins.
    Failed fetches never populate the cache.
    """

    def __init__(
        self,
        fetch: Callable[[str], Awaitable[Any]],
        cache: TTLCache,
        *,
        validator: Callable[[str], bool] = is_numeric_key,
        name: str = "lookup",
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.fetch = fetch
        self.cache = cache
        self.validator = validator
        self.name = name
        self.metrics = metrics
        self.logger = get_logger(f"relay.lookup.{name}")

    async def lookup(self, key: str) -> Any:
        """Return the document for ``key``, fetching and caching it on a miss."""
        if not self.validator(key):
            raise InvalidKeyError(
                f"Invalid {self.name} key format",
                details={"key": key}
            )

        entry = self.cache.get_entry(key)
        if entry is not None:
            self.logger.debug("Cache hit", key=key)
            self._record("hit")
            return entry.value

        self._record("miss")
        value = await self.fetch(key)
        self.cache.set(key, value)
        self.logger.info("Cache miss, fetched from upstream", key=key)
        return value

    def _record(self, result: str) -> None:
        """Record a cache hit or miss."""
        if self.metrics is not None:
            self.metrics.increment_counter("cache_lookups_total", cache_type=self.name, result=result)
