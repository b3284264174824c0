"""
Relay caching package.

Provides the in-memory TTL cache and the cache-aside lookup service used
to shield the postal-code upstream from repeated identical requests.
"""

from .ttl_cache import CacheEntry, TTLCache
from .lookup_service import CacheAsideLookupService, is_numeric_key

__all__ = ["CacheEntry", "TTLCache", "CacheAsideLookupService", "is_numeric_key"]
