"""
Adapters package for the Relay Service.

Contains HTTP client wrappers for the services the relay talks to
(Easyship, the downstream results endpoint, Discord, Google Routes).
These adapters encapsulate:

- URLs, credentials and request shapes
- Bounded timeouts (no retries: each call is attempted once)
- Error handling that maps to shared errors or RelayOutcome values

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .easyship_client import EasyshipClient
from .routes_client import GoogleRoutesClient
from .webhook_sinks import DiscordNotifier, DownstreamForwarder

__all__ = [
    "EasyshipClient",
    "GoogleRoutesClient",
    "DiscordNotifier",
    "DownstreamForwarder",
]
