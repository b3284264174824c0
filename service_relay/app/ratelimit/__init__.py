"""
Rate limiting package for the Relay.

Holds the in-process token bucket that throttles outbound upstream calls
and the Redis fixed-window limiter that enforces per-caller inbound budgets.
"""

from .token_bucket import TokenBucket
from .fixed_window import InboundRateLimiter, get_client_id

__all__ = ["TokenBucket", "InboundRateLimiter", "get_client_id"]
