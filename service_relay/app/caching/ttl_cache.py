"""
In-memory TTL cache for upstream lookups.

Each worker process owns its own cache; nothing is shared between
processes or persisted across restarts.
"""

import asyncio
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from shared.logging import get_logger

DEFAULT_TTL_SECONDS = 600

_MISSING = object()


@dataclass(frozen=True)
class CacheEntry:
    """A cached document and the instant it stops being visible."""
    key: str
    value: Any
    expires_at: float

    def is_live(self, now: float) -> bool:
        return now < self.expires_at


class TTLCache:
    """Key/value cache with a single fixed TTL and lazy expiry."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS,
                 clock: Callable[[], float] = time.monotonic, name: str = "default"):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self.ttl_seconds = ttl_seconds
        self.name = name
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.logger = get_logger(f"relay.cache.{name}")

    def get_entry(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for ``key``, dropping it if expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_live(now):
                return entry
            # Only drop the entry we looked at; a concurrent set may have replaced it
            if self._entries.get(key) is entry:
                del self._entries[key]
        return None

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for ``key``, or ``default``."""
        entry = self.get_entry(key)
        return default if entry is None else entry.value

    def contains(self, key: str) -> bool:
        """Check whether ``key`` has a live entry."""
        return self.get_entry(key) is not None

    def set(self, key: str, value: Any) -> CacheEntry:
        """Store ``value`` under ``key``; the last write wins."""
        entry = CacheEntry(key=key, value=value, expires_at=self._clock() + self.ttl_seconds)
        with self._lock:
            self._entries[key] = entry
        return entry

    def sweep(self) -> int:
        """Remove expired entries. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if not entry.is_live(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            self.logger.debug("Swept expired cache entries", removed=len(expired))
        return len(expired)

    async def sweep_periodically(self, interval_seconds: float) -> None:
        """Sweep forever every ``interval_seconds``; run as a background task."""
        while True:
            await asyncio.sleep(interval_seconds)
            self.sweep()

    def clear(self) -> None:
        """Drop all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "name": self.name,
            "entries": len(self),
            "ttl_seconds": self.ttl_seconds,
        }
